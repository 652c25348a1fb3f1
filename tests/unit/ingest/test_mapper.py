"""Tests for header auto-mapping."""

from __future__ import annotations

import logging

import pytest

from csvbridge.ingest.mapper import auto_detect
from csvbridge.models.schema_mapping import ColumnMapping
from csvbridge.schemas.financials import FINANCIAL_SCHEMA
from csvbridge.schemas.listings import LISTING_SCHEMA


class TestListingHeuristics:
    def test_typical_export(self):
        headers = ["Business Name", "Asking Price", "Category", "Annual Revenue", "Net Profit",
                   "Seller Email", "Status", "NDA Required"]
        mapping = auto_detect(headers, LISTING_SCHEMA)
        assert mapping.bindings == {
            "title": "Business Name",
            "asking_price": "Asking Price",
            "business_type": "Category",
            "annual_revenue": "Annual Revenue",
            "annual_profit": "Net Profit",
            "seller_email": "Seller Email",
            "status": "Status",
            "requires_nda": "NDA Required",
        }

    def test_unmatched_header_stays_unbound(self):
        mapping = auto_detect(["Title", "Mystery Column"], LISTING_SCHEMA)
        assert "Mystery Column" not in mapping.bindings.values()

    def test_blank_headers_ignored(self):
        assert auto_detect(["", "  "], LISTING_SCHEMA).bindings == {}


class TestExactMatch:
    @pytest.mark.parametrize("header", ["asking_price", " Asking_Price ", "ASKING_PRICE"])
    def test_exact_key_binds_case_insensitively(self, header):
        assert auto_detect([header], LISTING_SCHEMA).get("asking_price") == header

    def test_exact_key_beats_heuristic_order(self):
        # "business_model" contains "model" but is excluded from that rule; it is an exact key.
        assert auto_detect(["business_model"], LISTING_SCHEMA).get("business_model") == "business_model"

    @pytest.mark.parametrize("policy", ["last_wins", "first_wins"])
    def test_later_heuristic_never_displaces_exact(self, policy):
        mapping = auto_detect(["title", "Business Name"], LISTING_SCHEMA, policy)
        assert mapping.get("title") == "title"

    @pytest.mark.parametrize("policy", ["last_wins", "first_wins"])
    def test_later_exact_displaces_heuristic(self, policy):
        mapping = auto_detect(["Business Name", "title"], LISTING_SCHEMA, policy)
        assert mapping.get("title") == "title"


class TestCollisions:
    def test_last_wins_by_default(self):
        mapping = auto_detect(["Listing Name", "Business Name"], LISTING_SCHEMA)
        assert mapping.get("title") == "Business Name"

    def test_first_wins(self):
        mapping = auto_detect(["Listing Name", "Business Name"], LISTING_SCHEMA, "first_wins")
        assert mapping.get("title") == "Listing Name"

    def test_collision_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="csvbridge.ingest.mapper"):
            auto_detect(["Listing Name", "Business Name"], LISTING_SCHEMA)
        record = next(r for r in caplog.records if r.getMessage() == "mapping_collision")
        assert record.dropped_header == "Listing Name"
        assert record.kept_header == "Business Name"


class TestFinancialHeuristics:
    def test_pnl_export(self):
        mapping = auto_detect(["Month", "Total Income", "Marketing Spend", "Net Income", "COGS"],
                              FINANCIAL_SCHEMA)
        assert mapping.bindings == {
            "date": "Month",
            "revenue": "Total Income",
            "marketing": "Marketing Spend",
            "net_profit": "Net Income",
            "cogs": "COGS",
        }

    def test_cost_of_sales_is_cogs(self):
        mapping = auto_detect(["Month", "Sales", "Cost of Sales"], FINANCIAL_SCHEMA)
        assert mapping.get("revenue") == "Sales"
        assert mapping.get("cogs") == "Cost of Sales"

    def test_expenses_split(self):
        mapping = auto_detect(["Period", "Expenses", "Marketing Expenses"], FINANCIAL_SCHEMA, "first_wins")
        assert mapping.get("operating_expenses") == "Expenses"
        assert mapping.get("marketing") == "Marketing Expenses"


class TestRequiredGate:
    def test_missing_price_blocks_start(self):
        mapping = auto_detect(["Business Name"], LISTING_SCHEMA)
        assert [f.key for f in mapping.missing_required(LISTING_SCHEMA)] == ["asking_price"]
        assert not mapping.can_start(LISTING_SCHEMA)

    def test_binding_any_header_unblocks(self):
        mapping = auto_detect(["Business Name", "Col B"], LISTING_SCHEMA)
        mapping.bind("asking_price", "Col B")
        assert mapping.can_start(LISTING_SCHEMA)

    def test_empty_header_unbinds(self):
        mapping = ColumnMapping(bindings={"title": "A", "asking_price": "B"})
        mapping.bind("asking_price", "")
        assert not mapping.is_bound("asking_price")
        assert not mapping.can_start(LISTING_SCHEMA)
