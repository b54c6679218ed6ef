"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from txvault.constants import PROJECT_NAME, PROJECT_VERSION

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health_check() -> dict:
    return {
        "status": "ok",
        "service": PROJECT_NAME,
        "version": PROJECT_VERSION,
    }
