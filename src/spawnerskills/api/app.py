"""FastAPI application factory."""

from fastapi import FastAPI

from spawnerskills.api.routers import routing, skills
from spawnerskills.core.context import SharedContext


def create_app(context: SharedContext) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Spawner Skills API",
        description="Read-only HTTP API over the loaded skill collection",
        version="0.1.0",
    )
    app.state.context = context

    app.include_router(skills.router, prefix="/skills", tags=["skills"])
    app.include_router(routing.router, tags=["routing"])

    return app
