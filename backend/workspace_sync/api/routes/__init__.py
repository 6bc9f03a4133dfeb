"""API route registration."""

from fastapi import APIRouter

from workspace_sync.api.routes import health, records, sync, workspaces

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(workspaces.router, prefix="/workspaces", tags=["workspaces"])
api_router.include_router(records.router, tags=["records"])
api_router.include_router(sync.router, tags=["sync"])
