"""Import endpoints: preview, mapping, run, progress and cancel."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from pydantic import BaseModel, Field

from csvbridge.core.logging_config import get_logger
from csvbridge.models.pipeline import ImportSession, ProgressSnapshot
from csvbridge.services.financial_import import FinancialImportFlow
from csvbridge.services.listing_import import ListingImportFlow

logger = get_logger("api.imports")

router = APIRouter(tags=["imports"])


class UploadBody(BaseModel):
    filename: str
    content: str


class ListingRunBody(UploadBody):
    default_seller_id: str
    mapping: dict[str, str] = Field(default_factory=dict)
    seller_directory: dict[str, str] = Field(default_factory=dict)


class FinancialUploadBody(UploadBody):
    listing_id: str


class FinancialMergeBody(BaseModel):
    listing_id: str
    mapping: dict[str, str] = Field(default_factory=dict)
    manual_year: Optional[int] = None


def _listing_flow(request: Request, default_seller_id: str = "",
                  seller_directory: dict[str, str] | None = None) -> ListingImportFlow:
    state = request.app.state
    return ListingImportFlow(
        settings=state.settings,
        store=state.persistence.listing_store,
        default_seller_id=default_seller_id,
        seller_directory=seller_directory,
    )


def _financial_flow(request: Request, listing_id: str, create: bool = False) -> FinancialImportFlow:
    flows: dict[str, FinancialImportFlow] = request.app.state.financial_flows
    flow = flows.get(listing_id)
    if flow is None:
        if not create:
            raise HTTPException(status_code=404, detail=f"No ledger in progress for listing {listing_id!r}")
        flow = flows[listing_id] = FinancialImportFlow(
            settings=request.app.state.settings,
            store=request.app.state.persistence.financial_store,
            listing_id=listing_id,
        )
    return flow


async def _run_and_release(flow: ListingImportFlow, session: ImportSession, state: Any) -> None:
    """Run a listing import; the cached snapshot serves progress once it ends."""
    try:
        await flow.run(session, state.publisher)
    finally:
        state.registry.discard(session.session_id)


def _ledger_view(flow: FinancialImportFlow) -> dict[str, Any]:
    return {
        "listing_id": flow.listing_id,
        "ledger": [
            {"date_key": r.date_key, **r.model_dump(exclude={"source_row_number"})} for r in flow.ledger
        ],
        "totals": flow.totals(),
        "yearly_summary": [{"year": year, **values} for year, values in flow.yearly_summary()],
        "uploaded_files": [f.model_dump() for f in flow.uploaded_files],
    }


@router.post("/listings/preview")
async def preview_listings(body: UploadBody, request: Request) -> dict:
    """Tokenize an upload and propose a column mapping."""
    flow = _listing_flow(request)
    flow.load(body.filename, body.content)
    return flow.preview()


@router.post("/listings/run", status_code=202)
async def run_listings(body: ListingRunBody, request: Request, background: BackgroundTasks) -> dict:
    """Validate the upload and start writing listings in the background."""
    state = request.app.state
    flow = _listing_flow(request, body.default_seller_id, body.seller_directory)
    flow.load(body.filename, body.content)
    flow.apply_mapping(body.mapping)
    flow.ensure_ready()
    queued, _ = flow.prepare()

    session = ImportSession()
    key = f"{state.settings.s3.upload_prefix}{session.session_id}/{body.filename}"
    state.persistence.file_store.write(key, body.content.encode("utf-8"))
    state.registry.register(session)
    background.add_task(_run_and_release, flow, session, state)
    logger.info("import_accepted", extra={"session_id": session.session_id, "upload": body.filename})
    return {"session_id": session.session_id, "total": len(queued)}


@router.post("/financials/preview")
async def preview_financials(body: FinancialUploadBody, request: Request) -> dict:
    flow = _financial_flow(request, body.listing_id, create=True)
    flow.load(body.filename, body.content)
    return {**flow.preview(), "year_detected": flow.year_detected()}


@router.post("/financials/merge")
async def merge_financials(body: FinancialMergeBody, request: Request) -> dict:
    """Gap-fill the previewed upload into the listing's ledger."""
    flow = _financial_flow(request, body.listing_id)
    flow.apply_mapping(body.mapping)
    flow.set_manual_year(body.manual_year)
    batch = flow.merge()
    return {**_ledger_view(flow), "errors": batch.error_messages}


@router.get("/financials/{listing_id}")
async def get_ledger(listing_id: str, request: Request) -> dict:
    return _ledger_view(_financial_flow(request, listing_id))


@router.post("/financials/{listing_id}/save")
async def save_financials(listing_id: str, request: Request) -> dict:
    """Replace the stored ledger with the merged one."""
    flow = _financial_flow(request, listing_id)
    saved = flow.save()
    request.app.state.financial_flows.pop(listing_id, None)
    return {"listing_id": listing_id, "saved": saved}


@router.get("/{session_id}/progress")
async def get_progress(session_id: str, request: Request) -> ProgressSnapshot:
    state = request.app.state
    snapshot = state.publisher.read(session_id)
    if snapshot is None:
        snapshot = state.registry.get(session_id).snapshot()
    return snapshot


@router.post("/{session_id}/cancel")
async def cancel_import(session_id: str, request: Request) -> ProgressSnapshot:
    return request.app.state.registry.cancel(session_id).snapshot()
