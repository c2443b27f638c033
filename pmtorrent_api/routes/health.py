"""
Health Check Route

Simple health check endpoint for liveness probes.
"""

from fastapi import APIRouter, Depends

from pmtorrent.repo import FileRepo
from pmtorrent_api.deps import get_repo
from pmtorrent_api.models.responses import HealthResponse


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(repo: FileRepo = Depends(get_repo)) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and the number of served files.
    """
    return HealthResponse(ok=True, files=len(repo))


@router.get("/", response_model=HealthResponse)
async def root(repo: FileRepo = Depends(get_repo)) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return HealthResponse(ok=True, files=len(repo))
