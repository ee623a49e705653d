"""Task routing, code checks and catalog maintenance."""

from fastapi import APIRouter, Depends, HTTPException

from spawnerskills.api.deps import get_catalog, get_context
from spawnerskills.api.schemas import (
    RouteRequest,
    RouteResult,
    SkillSummary,
    ValidateRequest,
    WatchOutRequest,
)
from spawnerskills.core.catalog import SharpEdgeHit, SkillCatalog, ValidationHit
from spawnerskills.core.context import SharedContext
from spawnerskills.core.exceptions import SkillError, SkillNotFoundError
from spawnerskills.core.skill_def import LoadReport

router = APIRouter()


@router.post("/route", response_model=list[RouteResult])
def route_task(
    data: RouteRequest, ctx: SharedContext = Depends(get_context)
) -> list[RouteResult]:
    """Select skills for a task description."""
    limit = data.limit if data.limit is not None else ctx.config.routing.limit
    try:
        routes = ctx.catalog.route_task(data.task, data.from_skill, limit=limit)
    except SkillNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return [
        RouteResult(
            skill=SkillSummary.from_record(route.skill),
            matched_keyword=route.matched_keyword,
            context=route.context,
            source=route.source,
            trigger_pattern=route.rule.trigger_pattern if route.rule else None,
        )
        for route in routes
    ]


@router.post("/watch-out", response_model=list[SharpEdgeHit])
def watch_out(
    data: WatchOutRequest, catalog: SkillCatalog = Depends(get_catalog)
) -> list[SharpEdgeHit]:
    """Scan code for known sharp edges."""
    try:
        return catalog.watch_out(data.code, data.skill)
    except SkillNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/validate", response_model=list[ValidationHit])
def validate_code(
    data: ValidateRequest, catalog: SkillCatalog = Depends(get_catalog)
) -> list[ValidationHit]:
    """Run skill validation rules against code."""
    try:
        return catalog.validate_code(data.code, data.skill)
    except SkillNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/report", response_model=LoadReport)
def get_report(catalog: SkillCatalog = Depends(get_catalog)) -> LoadReport:
    """Diagnostics from the last load."""
    return catalog.report


@router.post("/reload", response_model=LoadReport)
def reload_catalog(catalog: SkillCatalog = Depends(get_catalog)) -> LoadReport:
    """Reload skills from disk. The previous skill set stays on failure."""
    try:
        return catalog.reload()
    except SkillError as e:
        raise HTTPException(status_code=409, detail=str(e))
