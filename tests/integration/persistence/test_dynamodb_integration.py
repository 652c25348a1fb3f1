"""Integration tests for DynamoDBRecordStore against LocalStack."""

from __future__ import annotations

import pytest

from csvbridge.core.config import DynamoDBConfig
from csvbridge.persistence.dynamodb_backend import DynamoDBRecordStore
from tests.integration.conftest import LOCALSTACK_URL, skip_no_localstack


@skip_no_localstack
class TestDynamoDBIntegration:
    @pytest.fixture
    def store(self, seeded_tables):
        return DynamoDBRecordStore(
            DynamoDBConfig().financials_table,
            owner_attr="listing_id",
            sort_attr="date_key",
            table_suffix=seeded_tables,
            region="us-east-1",
            endpoint_url=LOCALSTACK_URL,
        )

    def test_ledger_replace_round_trip(self, store):
        store.delete_by_key("INT-1")
        store.insert_many([
            {"listing_id": "INT-1", "date_key": "January-2025", "revenue": 100.5},
            {"listing_id": "INT-1", "date_key": "February-2025", "revenue": 200.0},
        ])
        rows = store.list_by_owner("INT-1")
        assert {r["date_key"] for r in rows} == {"January-2025", "February-2025"}

        store.delete_by_key("INT-1")
        assert store.list_by_owner("INT-1") == []

    def test_insert_one(self, store):
        store.insert_one({"listing_id": "INT-2", "date_key": "March-2024", "net_profit": 12.25})
        rows = store.list_by_owner("INT-2")
        assert rows[0]["net_profit"] == 12.25
        store.delete_by_key("INT-2")
