"""Raw row -> typed record, driven by a schema's per-field cleanup rules."""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Optional

from csvbridge.core.logging_config import get_logger
from csvbridge.ingest.dates import PeriodDate, normalize_period
from csvbridge.models.records import RowError, TransformBatch
from csvbridge.models.schema_mapping import ColumnMapping, FieldRule, ImportSchema
from csvbridge.models.table import RawTable

logger = get_logger("ingest.transformer")

CURRENCY_CHARS = "$€£¥₹,"
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"^[+-]?\d+")

# Header is row 1, so the first data row is row 2.
FIRST_DATA_ROW = 2


def parse_number(value: str) -> float:
    """Currency-tolerant float parse; anything unparseable is 0."""
    if not value:
        return 0.0
    cleaned = "".join(ch for ch in value if ch not in CURRENCY_CHARS).strip()
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    num = float(match.group(0))
    return num if math.isfinite(num) else 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_int(value: str) -> int:
    match = _LEADING_INT.match(value.strip()) if value else None
    return int(match.group(0)) if match else 0


def parse_bool(value: str, true_token: str = "true") -> bool:
    return value.strip().lower() == true_token.lower()


def parse_enum(value: str, allowed: tuple[str, ...], default: Any) -> Any:
    lowered = value.strip().lower()
    for option in allowed:
        if option.lower() == lowered:
            return option
    return default


def parse_list(value: str, delimiter: str = "|") -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(delimiter)]


def _is_empty(value: Any) -> bool:
    if isinstance(value, PeriodDate):
        return not value.label
    return not value


class RowTransformer:
    """Applies a confirmed mapping to raw rows of one table."""

    def __init__(
        self,
        schema: ImportSchema,
        mapping: ColumnMapping,
        headers: list[str],
        *,
        list_delimiter: str = "|",
        fallback_year: Optional[int] = None,
    ) -> None:
        self._schema = schema
        self._mapping = mapping
        self._headers = list(headers)
        self._list_delimiter = list_delimiter
        self._fallback_year = fallback_year

    def lookup(self, row: list[str], key: str) -> str:
        """Cell bound to ``key`` with one outer quote pair stripped, or ''."""
        header = self._mapping.get(key)
        if header is None:
            return ""
        try:
            idx = self._headers.index(header)
        except ValueError:
            return ""
        if idx >= len(row):
            return ""
        return re.sub(r'^"|"$', "", row[idx]).strip()

    def clean(self, rule: FieldRule, raw: str) -> Any:
        if rule.kind == "money":
            num = parse_number(raw)
            return round_half_up(num) if rule.round_to_int else num
        if rule.kind == "integer":
            return parse_int(raw)
        if rule.kind == "boolean":
            return parse_bool(raw, rule.true_token)
        if rule.kind == "enum":
            return parse_enum(raw, rule.allowed, rule.default)
        if rule.kind == "list":
            return parse_list(raw, self._list_delimiter)
        if rule.kind == "period":
            return normalize_period(raw)
        return raw or rule.default

    def _resolve_year(self, parsed: Optional[int]) -> int:
        return parsed or self._fallback_year or date.today().year

    def transform(self, row: list[str], source_row_number: int) -> Any:
        """Return a typed record, or a RowError when a primary field is empty."""
        values: dict[str, Any] = {}
        for spec in self._schema.fields:
            values[spec.key] = self.clean(self._schema.rule_for(spec.key), self.lookup(row, spec.key))

        missing = [k for k in self._schema.primary_fields if _is_empty(values.get(k))]
        if missing:
            reason = f"Missing required fields ({' or '.join(self._schema.primary_fields)})"
            logger.debug("row_rejected", extra={"source_row": source_row_number, "missing": missing})
            return RowError(source_row_number=source_row_number, reason=reason)

        fields: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, PeriodDate):
                fields["period"] = value.label
                fields["year"] = self._resolve_year(value.year)
            else:
                fields[key] = value
        return self._schema.record_model(source_row_number=source_row_number, **fields)

    def transform_table(self, table: RawTable) -> TransformBatch:
        """Transform every row; rejected rows never stop the rest."""
        batch = TransformBatch()
        for offset, row in enumerate(table.rows):
            result = self.transform(row, offset + FIRST_DATA_ROW)
            if isinstance(result, RowError):
                batch.errors.append(result)
            else:
                batch.records.append(result)
        logger.info(
            "table_transformed",
            extra={
                "schema_name": self._schema.name,
                "records": len(batch.records),
                "rejected": len(batch.errors),
            },
        )
        return batch
