"""Header -> canonical field auto-mapping."""

from __future__ import annotations

from typing import Literal

from csvbridge.core.logging_config import get_logger
from csvbridge.models.schema_mapping import ColumnMapping, ImportSchema

logger = get_logger("ingest.mapper")

ConflictPolicy = Literal["last_wins", "first_wins"]


def _match_field(normalized: str, schema: ImportSchema) -> tuple[str | None, bool]:
    """Return (field key, exact?) for one normalized header."""
    if normalized in schema.keys:
        return normalized, True
    for rule in schema.heuristics:
        if rule.matches(normalized):
            return rule.field, False
    return None, False


def auto_detect(
    headers: list[str],
    schema: ImportSchema,
    policy: ConflictPolicy = "last_wins",
) -> ColumnMapping:
    """Propose a mapping for ``headers``, visited in file order.

    An exact (case-insensitive, trimmed) key match beats every heuristic and
    is never displaced by a later heuristic match. Otherwise, when two headers
    land on the same field, ``last_wins`` rebinds the field to the later header
    and ``first_wins`` keeps the earlier one unless only the later header is an
    exact key match.
    """
    mapping = ColumnMapping()
    exact_keys: set[str] = set()
    for header in headers:
        normalized = header.strip().lower()
        if not normalized:
            continue
        key, exact = _match_field(normalized, schema)
        if key is None:
            continue

        previous = mapping.get(key)
        if previous is not None:
            if policy == "first_wins":
                keep_previous = not exact or key in exact_keys
            else:
                keep_previous = key in exact_keys and not exact
            logger.warning(
                "mapping_collision",
                extra={
                    "field": key,
                    "policy": policy,
                    "kept_header": previous if keep_previous else header,
                    "dropped_header": header if keep_previous else previous,
                },
            )
            if keep_previous:
                continue

        mapping.bind(key, header)
        if exact:
            exact_keys.add(key)
        else:
            exact_keys.discard(key)

    logger.info(
        "mapping_detected",
        extra={"schema_name": schema.name, "bound": len(mapping.bindings), "headers": len(headers)},
    )
    return mapping
