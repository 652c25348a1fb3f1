"""DynamoDB backend implementing IRecordStore."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import uuid4

import boto3
from botocore.exceptions import ClientError

from csvbridge.core.exceptions import RecordWriteError, StorageError
from csvbridge.core.logging_config import get_logger

logger = get_logger("persistence.dynamodb")


def _encode_numbers(obj: Any) -> Any:
    """Convert floats to Decimal for DynamoDB."""
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _encode_numbers(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_encode_numbers(i) for i in obj]
    return obj


def _decode_value(v: Any) -> Any:
    if isinstance(v, Decimal):
        return int(v) if v == int(v) else float(v)
    if isinstance(v, dict):
        return _decode_decimals(v)
    if isinstance(v, list):
        return [_decode_value(i) for i in v]
    return v


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    return {k: _decode_value(v) for k, v in item.items()}


class DynamoDBRecordStore:
    """Production IRecordStore backed by one DynamoDB table.

    Items are partitioned by their owner (``PK = "<OWNER>#<id>"``) and sorted
    by ``sort_attr`` when the record carries it, a fresh id otherwise.
    """

    def __init__(self, table_name: str, owner_attr: str, sort_attr: str | None = None,
                 table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_name = f"{table_name}{table_suffix}"
        self._owner_attr = owner_attr
        self._sort_attr = sort_attr
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    @property
    def table_name(self) -> str:
        return self._table_name

    def _table(self):
        return self._ddb.Table(self._table_name)

    def _pk(self, owner_id: Any) -> str:
        return f"{self._owner_attr.upper()}#{owner_id}"

    def _to_item(self, record: dict[str, Any]) -> dict[str, Any]:
        owner = record.get(self._owner_attr)
        if owner in (None, ""):
            raise RecordWriteError(f"Record has no {self._owner_attr!r}")
        sort_value = record.get(self._sort_attr) if self._sort_attr else None
        item = _encode_numbers({k: v for k, v in record.items() if v is not None})
        item["PK"] = self._pk(owner)
        item["SK"] = str(sort_value) if sort_value not in (None, "") else uuid4().hex
        return item

    def insert_one(self, record: dict[str, Any]) -> None:
        item = self._to_item(record)
        try:
            self._table().put_item(Item=item)
        except ClientError as exc:
            raise RecordWriteError(exc.response.get("Error", {}).get("Message", str(exc))) from exc

    def delete_by_key(self, owner_id: str) -> None:
        try:
            keys = [
                {"PK": item["PK"], "SK": item["SK"]}
                for item in self._query_pk(self._pk(owner_id), raw=True)
            ]
            with self._table().batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key=key)
        except ClientError as exc:
            raise StorageError(f"DynamoDB delete failed for {owner_id!r}: {exc}") from exc
        logger.info("records_deleted", extra={"table": self._table_name, "owner": owner_id, "count": len(keys)})

    def insert_many(self, records: list[dict[str, Any]]) -> None:
        items = [self._to_item(r) for r in records]
        try:
            with self._table().batch_writer() as batch:
                for item in items:
                    batch.put_item(Item=item)
        except ClientError as exc:
            raise StorageError(f"DynamoDB batch insert failed: {exc}") from exc
        logger.info("records_inserted", extra={"table": self._table_name, "count": len(items)})

    def _query_pk(self, pk: str, raw: bool = False) -> list[dict[str, Any]]:
        """Query all items with a given partition key."""
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": pk},
        }
        while True:
            resp = self._table().query(**kwargs)
            items.extend(resp.get("Items", []))
            if "LastEvaluatedKey" not in resp:
                break
            kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        return items if raw else [_decode_decimals(i) for i in items]

    def list_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        """All records of one owner, ordered by sort key."""
        return sorted(self._query_pk(self._pk(owner_id)), key=lambda x: x["SK"])

