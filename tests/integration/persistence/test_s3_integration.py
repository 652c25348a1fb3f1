"""Integration tests for S3FileStore against LocalStack."""

from __future__ import annotations

import pytest

from csvbridge.persistence import create_persistence
from tests.integration.conftest import skip_no_localstack


@skip_no_localstack
class TestS3Integration:
    @pytest.fixture
    def file_store(self, integration_settings, upload_bucket):
        return create_persistence(integration_settings).file_store

    def test_staged_upload_round_trip(self, file_store):
        path = file_store.key_for("inttest-session", "listings.csv")
        file_store.write(path, b"title,asking_price\nAcme,100\n")
        assert file_store.read(path) == b"title,asking_price\nAcme,100\n"
        assert path in file_store.list_files("uploads/inttest-session/")
