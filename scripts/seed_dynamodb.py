"""Create the DynamoDB tables and S3 bucket used by the import service.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

from csvbridge.core.config import DynamoDBConfig, S3Config


def table_names(config: DynamoDBConfig | None = None, suffix: str = "") -> list[str]:
    config = config or DynamoDBConfig()
    return [f"{config.listings_table}{suffix}", f"{config.financials_table}{suffix}"]


def create_tables(ddb: Any, suffix: str = "", config: DynamoDBConfig | None = None) -> list[str]:
    """Create the record-store tables. Skips tables that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])
    created: list[str] = []

    for table_name in table_names(config, suffix):
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        created.append(table_name)
        print(f"  Created table {table_name}")
    return created


def create_upload_bucket(s3: Any, config: S3Config | None = None) -> bool:
    """Create the upload bucket unless it exists; True when created."""
    config = config or S3Config()
    existing = {b["Name"] for b in s3.list_buckets().get("Buckets", [])}
    if config.bucket in existing:
        print(f"  Bucket {config.bucket} already exists, skipping")
        return False
    kwargs: dict[str, Any] = {"Bucket": config.bucket}
    if config.region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": config.region}
    s3.create_bucket(**kwargs)
    print(f"  Created bucket {config.bucket}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create csvbridge DynamoDB tables and upload bucket")
    parser.add_argument("--endpoint-url", default=None, help="AWS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--skip-bucket", action="store_true", help="Do not create the S3 upload bucket")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    print("Creating tables...")
    create_tables(boto3.resource("dynamodb", **kwargs), suffix=args.table_suffix)

    if not args.skip_bucket:
        print("Creating upload bucket...")
        create_upload_bucket(boto3.client("s3", **kwargs), S3Config(region=args.region))

    print("Done!")


if __name__ == "__main__":
    main()
