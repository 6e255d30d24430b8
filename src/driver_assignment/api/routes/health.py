"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/repository", status_code=status.HTTP_200_OK)
def check_repository(request: Request) -> dict:
    """Report which driver/assignment store backs the assignment engine."""
    service = getattr(request.app.state, "algorithms_service", None)
    repository = service.repository if service else None
    return {
        "backend": settings.repository_backend,
        "configured": repository is not None,
        "repository": type(repository).__name__ if repository is not None else None,
    }
