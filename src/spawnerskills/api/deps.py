"""FastAPI dependencies for API routers."""

from fastapi import Request

from spawnerskills.core.catalog import SkillCatalog
from spawnerskills.core.context import SharedContext


def get_context(request: Request) -> SharedContext:
    """Get SharedContext from app state."""
    return request.app.state.context


def get_catalog(request: Request) -> SkillCatalog:
    """Get the skill catalog from app state."""
    return request.app.state.context.catalog
