"""Gap-fill merge of financial records into a chronological ledger."""

from __future__ import annotations

from collections.abc import Iterable

from csvbridge.core.logging_config import get_logger
from csvbridge.ingest.transformer import round_half_up
from csvbridge.models.records import AMOUNT_FIELDS, FinancialRecord
from csvbridge.models.schema_mapping import ColumnMapping

logger = get_logger("ingest.reconciler")


def period_key(record: FinancialRecord) -> str:
    return record.date_key


def _gap_fill(existing: FinancialRecord, incoming: FinancialRecord) -> FinancialRecord:
    """Keep every non-zero existing amount; take the incoming one otherwise."""
    updates = {
        name: getattr(existing, name) or getattr(incoming, name)
        for name in AMOUNT_FIELDS
    }
    return existing.model_copy(update=updates)


def chronological(records: Iterable[FinancialRecord]) -> list[FinancialRecord]:
    """Sort by (year, month index).

    Unresolved period labels get index -1 and keep their relative order,
    since the sort is stable.
    """
    return sorted(records, key=lambda r: (r.year, r.month_index))


def merge(
    existing: Iterable[FinancialRecord], incoming: Iterable[FinancialRecord],
) -> list[FinancialRecord]:
    """Merge ``incoming`` into ``existing``; at most one entry per period key."""
    ledger: dict[str, FinancialRecord] = {}
    for record in existing:
        ledger[period_key(record)] = record

    added = filled = 0
    for record in incoming:
        key = period_key(record)
        current = ledger.get(key)
        if current is None:
            ledger[key] = record
            added += 1
        else:
            ledger[key] = _gap_fill(current, record)
            filled += 1

    logger.info("ledger_merged", extra={"periods": len(ledger), "added": added, "merged": filled})
    return chronological(ledger.values())


def classify_upload(mapping: ColumnMapping) -> str:
    """Name what kind of P&L export an upload was, from the fields it mapped."""
    has_revenue = mapping.is_bound("revenue")
    has_marketing = mapping.is_bound("marketing")
    has_expenses = mapping.is_bound("operating_expenses") or mapping.is_bound("cogs")
    has_profit = mapping.is_bound("net_profit")

    if has_revenue and has_marketing and has_profit:
        return "complete"
    if has_marketing and not has_revenue:
        return "marketing"
    if has_expenses and not has_revenue:
        return "expenses"
    return "sales"


def ledger_totals(ledger: Iterable[FinancialRecord]) -> dict[str, int]:
    records = list(ledger)
    return {
        "revenue": round_half_up(sum(r.revenue for r in records)),
        "profit": round_half_up(sum(r.net_profit for r in records)),
    }


def yearly_summary(ledger: Iterable[FinancialRecord]) -> list[tuple[int, dict[str, float]]]:
    """Per-year totals, most recent year first."""
    summary: dict[int, dict[str, float]] = {}
    for r in ledger:
        year = summary.setdefault(
            r.year, {"revenue": 0.0, "profit": 0.0, "marketing": 0.0, "cogs": 0.0, "months": 0},
        )
        year["revenue"] += r.revenue
        year["profit"] += r.net_profit
        year["marketing"] += r.marketing
        year["cogs"] += r.cogs
        year["months"] += 1
    return sorted(summary.items(), key=lambda item: item[0], reverse=True)
