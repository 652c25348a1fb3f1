"""Bulk listing import schema."""

from __future__ import annotations

from csvbridge.models.records import BUSINESS_TYPES, LISTING_STATUSES, ListingRecord
from csvbridge.models.schema_mapping import FieldRule, FieldSpec, HeuristicRule, ImportSchema

LISTING_FIELDS = (
    FieldSpec(key="title", label="Title", required=True),
    FieldSpec(key="asking_price", label="Asking Price", required=True),
    FieldSpec(key="business_type", label="Business Type"),
    FieldSpec(key="description", label="Description"),
    FieldSpec(key="annual_revenue", label="Annual Revenue"),
    FieldSpec(key="annual_profit", label="Annual Profit"),
    FieldSpec(key="highlights", label="Highlights"),
    FieldSpec(key="employee_count", label="Employee Count"),
    FieldSpec(key="year_established", label="Year Established"),
    FieldSpec(key="location", label="Location"),
    FieldSpec(key="reason_for_selling", label="Reason for Selling"),
    FieldSpec(key="website_url", label="Website URL"),
    FieldSpec(key="seller_email", label="Seller Email"),
    FieldSpec(key="customers", label="Customers"),
    FieldSpec(key="churn_rate", label="Churn Rate"),
    FieldSpec(key="annual_growth", label="Annual Growth"),
    FieldSpec(key="tech_stack", label="Tech Stack"),
    FieldSpec(key="competitors", label="Competitors"),
    FieldSpec(key="business_model", label="Business Model"),
    FieldSpec(key="asking_price_reasoning", label="Asking Price Reasoning"),
    FieldSpec(key="source_url", label="Source URL"),
    FieldSpec(key="status", label="Status"),
    FieldSpec(key="is_featured", label="Is Featured"),
    FieldSpec(key="requires_nda", label="Requires NDA"),
    FieldSpec(key="is_verified", label="Is Verified"),
)

LISTING_RULES = {
    "asking_price": FieldRule(kind="money", round_to_int=True),
    "annual_revenue": FieldRule(kind="money", round_to_int=True),
    "annual_profit": FieldRule(kind="money", round_to_int=True),
    "employee_count": FieldRule(kind="integer"),
    "highlights": FieldRule(kind="list"),
    "business_type": FieldRule(kind="enum", allowed=BUSINESS_TYPES, default="other"),
    "status": FieldRule(kind="enum", allowed=LISTING_STATUSES, default="draft"),
    "is_featured": FieldRule(kind="boolean"),
    "requires_nda": FieldRule(kind="boolean"),
    "is_verified": FieldRule(kind="boolean"),
    "title": FieldRule(default=""),
}

# Order matters: the first rule a header satisfies wins.
LISTING_HEURISTICS = (
    HeuristicRule(field="title", any_of=("title", "name", "business name")),
    HeuristicRule(field="asking_price", any_of=("asking", "price", "listing price")),
    HeuristicRule(field="business_type", any_of=("type", "category", "niche")),
    HeuristicRule(field="description", any_of=("description", "about", "summary")),
    HeuristicRule(field="annual_revenue", any_of=("revenue",), none_of=("profit",)),
    HeuristicRule(field="annual_profit", any_of=("profit", "earnings", "income")),
    HeuristicRule(field="highlights", any_of=("highlight", "feature", "selling point")),
    HeuristicRule(field="employee_count", any_of=("employee", "team size", "staff")),
    HeuristicRule(field="year_established", any_of=("established", "founded", "year")),
    HeuristicRule(field="location", any_of=("location", "country", "region")),
    HeuristicRule(field="reason_for_selling", any_of=("reason", "selling")),
    HeuristicRule(field="website_url", any_of=("website", "url", "domain")),
    HeuristicRule(field="seller_email", all_of=("seller", "email")),
    HeuristicRule(field="customers", any_of=("customer", "user", "client")),
    HeuristicRule(field="churn_rate", any_of=("churn",)),
    HeuristicRule(field="annual_growth", any_of=("growth",)),
    HeuristicRule(field="tech_stack", any_of=("tech", "stack", "technology")),
    HeuristicRule(field="competitors", any_of=("competitor",)),
    HeuristicRule(field="business_model", any_of=("model",), none_of=("business_model",)),
    HeuristicRule(field="asking_price_reasoning", any_of=("reasoning", "valuation", "justification")),
    HeuristicRule(field="source_url", any_of=("source",)),
    HeuristicRule(field="status", equals=("status",)),
    HeuristicRule(field="is_featured", any_of=("featured",)),
    HeuristicRule(field="requires_nda", any_of=("nda",)),
    HeuristicRule(field="is_verified", any_of=("verified",)),
)

LISTING_SCHEMA = ImportSchema(
    name="listings",
    fields=LISTING_FIELDS,
    rules=LISTING_RULES,
    heuristics=LISTING_HEURISTICS,
    primary_fields=("title", "asking_price"),
    record_model=ListingRecord,
)
