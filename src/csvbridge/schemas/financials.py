"""Monthly P&L import schema."""

from __future__ import annotations

from csvbridge.models.records import FinancialRecord
from csvbridge.models.schema_mapping import FieldRule, FieldSpec, HeuristicRule, ImportSchema

DATE_FIELD = "date"
DATA_FIELDS = ("revenue", "cogs", "gross_profit", "marketing", "operating_expenses", "net_profit")

FINANCIAL_FIELDS = (
    FieldSpec(key=DATE_FIELD, label="Date", required=True),
    FieldSpec(key="revenue", label="Revenue / Sales"),
    FieldSpec(key="cogs", label="Cost of Goods Sold (COGS)"),
    FieldSpec(key="gross_profit", label="Gross Profit"),
    FieldSpec(key="marketing", label="Marketing / Advertising"),
    FieldSpec(key="operating_expenses", label="Operating Expenses"),
    FieldSpec(key="net_profit", label="Net Profit / Net Income"),
)

FINANCIAL_RULES = {
    DATE_FIELD: FieldRule(kind="period"),
    **{key: FieldRule(kind="money") for key in DATA_FIELDS},
}

FINANCIAL_HEURISTICS = (
    HeuristicRule(field=DATE_FIELD, any_of=("date", "month", "period")),
    HeuristicRule(field="revenue", any_of=("revenue", "sales"), none_of=("cost",)),
    HeuristicRule(field="revenue", all_of=("income",), none_of=("net",)),
    HeuristicRule(field="cogs", any_of=("cogs", "cost of goods", "cost of sales")),
    HeuristicRule(field="gross_profit", any_of=("gross profit", "gross margin")),
    HeuristicRule(field="marketing", any_of=("marketing", "advertising", "ads", "ad spend")),
    HeuristicRule(field="operating_expenses", any_of=("operating", "opex")),
    HeuristicRule(field="operating_expenses", all_of=("expenses",), none_of=("marketing",)),
    HeuristicRule(field="net_profit", any_of=("net profit", "net income", "bottom line")),
)

FINANCIAL_SCHEMA = ImportSchema(
    name="financials",
    fields=FINANCIAL_FIELDS,
    rules=FINANCIAL_RULES,
    heuristics=FINANCIAL_HEURISTICS,
    primary_fields=(DATE_FIELD,),
    record_model=FinancialRecord,
)
