"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from typing import NamedTuple

from csvbridge.core.config import AppSettings
from csvbridge.persistence.dynamodb_backend import DynamoDBRecordStore
from csvbridge.persistence.redis_backend import RedisCacheBackend
from csvbridge.persistence.s3_backend import S3FileStore


class Persistence(NamedTuple):
    listing_store: DynamoDBRecordStore
    financial_store: DynamoDBRecordStore
    cache: RedisCacheBackend
    file_store: S3FileStore


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings."""
    if settings is None:
        settings = AppSettings()

    cache = RedisCacheBackend.from_config(settings.redis)

    listing_store = DynamoDBRecordStore(
        table_name=settings.dynamodb.listings_table,
        owner_attr="seller_id",
        sort_attr="id",
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    financial_store = DynamoDBRecordStore(
        table_name=settings.dynamodb.financials_table,
        owner_attr="listing_id",
        sort_attr="date_key",
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
        prefix=settings.s3.upload_prefix,
    )

    return Persistence(listing_store, financial_store, cache, file_store)
