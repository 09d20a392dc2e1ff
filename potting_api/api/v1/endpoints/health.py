"""Liveness check for the potting service."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Report that the API process is up; no database or controller checks."""
    return {"status": "ok"}
