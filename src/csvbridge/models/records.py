"""Typed records produced by the row transformer.

Each record remembers the 1-based row of the source file it came from
(the header is row 1) so that write failures can be attributed.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

LISTING_STATUSES = ("draft", "pending_review", "active", "rejected", "sold")
BUSINESS_TYPES = ("saas", "ecommerce", "app", "content", "service", "marketplace", "agency", "other")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_index(label: str) -> int:
    """0-based position of ``label`` in the month-name table, -1 when unresolved."""
    lowered = label.strip().lower()
    for idx, name in enumerate(MONTH_NAMES):
        if name.lower() == lowered:
            return idx
    return -1


class ListingRecord(BaseModel):
    """One business listing parsed from a bulk import row."""

    model_config = {"frozen": True}

    source_row_number: int

    # --- Basic info ---
    title: str = ""
    description: Optional[str] = None
    business_type: str = "other"
    status: str = "draft"

    # --- Financials ---
    asking_price: int = 0
    annual_revenue: int = 0
    annual_profit: int = 0
    asking_price_reasoning: Optional[str] = None

    # --- Business details ---
    highlights: list[str] = Field(default_factory=list)
    employee_count: int = 0
    year_established: Optional[str] = None
    location: Optional[str] = None
    reason_for_selling: Optional[str] = None
    website_url: Optional[str] = None
    seller_email: Optional[str] = None
    customers: Optional[str] = None
    churn_rate: Optional[str] = None
    annual_growth: Optional[str] = None
    tech_stack: Optional[str] = None
    competitors: Optional[str] = None
    business_model: Optional[str] = None
    source_url: Optional[str] = None

    # --- Flags ---
    is_featured: bool = False
    requires_nda: bool = False
    is_verified: bool = False

    def to_item(self) -> dict[str, Any]:
        """Storage payload without engine bookkeeping."""
        return self.model_dump(exclude={"source_row_number", "seller_email"})


class FinancialRecord(BaseModel):
    """One month of P&L data keyed by (period, year)."""

    model_config = {"frozen": True}

    source_row_number: int = 0
    period: str
    year: int
    revenue: float = 0.0
    cogs: float = 0.0
    gross_profit: float = 0.0
    marketing: float = 0.0
    operating_expenses: float = 0.0
    net_profit: float = 0.0

    @property
    def date_key(self) -> str:
        return f"{self.period}-{self.year}"

    @property
    def month_index(self) -> int:
        return month_index(self.period)


AMOUNT_FIELDS = ("revenue", "cogs", "gross_profit", "marketing", "operating_expenses", "net_profit")


class RowError(BaseModel):
    """A row rejected by its schema's required-field gate."""

    model_config = {"frozen": True}

    source_row_number: int
    reason: str

    @property
    def message(self) -> str:
        return f"Row {self.source_row_number}: {self.reason}"


class TransformBatch(BaseModel):
    """Outcome of transforming every row of one table."""

    records: list[Any] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)

    @property
    def error_messages(self) -> list[str]:
        return [e.message for e in self.errors]
