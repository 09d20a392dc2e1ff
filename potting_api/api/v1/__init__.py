"""API v1 router."""

from fastapi import APIRouter

from potting_api.api.v1.endpoints import batches, health, machine_state

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(machine_state.router, prefix="/machine-state", tags=["machine-state"])
api_router.include_router(batches.router, prefix="/batches", tags=["batches"])
