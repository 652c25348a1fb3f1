"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    # TODO: probe DynamoDB and S3 once record stores expose a cheap describe call
    state = request.app.state
    if not hasattr(state, "persistence"):
        return {"status": "starting"}
    return {"status": "ready", "environment": state.settings.environment}
