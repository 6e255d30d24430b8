"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import algorithms, health
from .config import settings
from .data.memory_repository import InMemoryAssignmentRepository
from .data.repository import AssignmentRepository
from .services.algorithms.service import AlgorithmsService


def build_repository() -> AssignmentRepository:
    if settings.repository_backend == "supabase":
        from .data.supabase_repository import SupabaseAssignmentRepository

        return SupabaseAssignmentRepository()
    return InMemoryAssignmentRepository()


def create_app(service: AlgorithmsService | None = None) -> FastAPI:
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.algorithms_service = service or AlgorithmsService(build_repository())
    logging.info(
        f"Assignment engine ready with {settings.repository_backend} repository, "
        f"default algorithm '{app.state.algorithms_service.default_algorithm}'"
    )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(algorithms.router, prefix=settings.api_prefix)
    return app


app = create_app()
