"""Integration fixtures: the import service's backends on LocalStack.

Tables and the upload bucket are created by ``scripts/seed_dynamodb.py``
under a dedicated suffix so a run never touches dev data.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError

from csvbridge.core.config import AppSettings, DynamoDBConfig, S3Config

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))
from seed_dynamodb import create_tables, create_upload_bucket  # noqa: E402

LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "us-east-1"
TABLE_SUFFIX = "-inttest"
UPLOAD_BUCKET = "csvbridge-uploads-inttest"


def _localstack_available() -> bool:
    try:
        boto3.client("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL).list_tables()
        return True
    except (BotoCoreError, ClientError):
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def integration_settings() -> AppSettings:
    """Settings pointing every AWS backend at LocalStack."""
    return AppSettings(
        dynamodb=DynamoDBConfig(table_suffix=TABLE_SUFFIX, region=REGION, endpoint_url=LOCALSTACK_URL),
        s3=S3Config(bucket=UPLOAD_BUCKET, region=REGION, endpoint_url=LOCALSTACK_URL),
    )


@pytest.fixture(scope="session")
def seeded_tables(integration_settings):
    """Record-store tables for listings and ledgers; returns the suffix."""
    ddb = boto3.resource("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL)
    create_tables(ddb, suffix=TABLE_SUFFIX, config=integration_settings.dynamodb)
    return TABLE_SUFFIX


@pytest.fixture(scope="session")
def upload_bucket(integration_settings):
    """Staging bucket for raw uploads; returns its name."""
    s3 = boto3.client("s3", region_name=REGION, endpoint_url=LOCALSTACK_URL)
    create_upload_bucket(s3, integration_settings.s3)
    return UPLOAD_BUCKET
