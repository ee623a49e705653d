"""Skill resource router."""

from fastapi import APIRouter, Depends, HTTPException

from spawnerskills.api.deps import get_catalog
from spawnerskills.api.schemas import SkillSummary
from spawnerskills.core.catalog import Collaborators, SharpEdgeHit, SkillCatalog
from spawnerskills.core.exceptions import SkillNotFoundError
from spawnerskills.core.skill_def import Severity, SkillRecord

router = APIRouter()


@router.get("", response_model=list[SkillSummary])
def list_skills(
    category: str | None = None, catalog: SkillCatalog = Depends(get_catalog)
) -> list[SkillSummary]:
    """List all skills."""
    return [SkillSummary.from_record(r) for r in catalog.list_skills(category)]


@router.get("/search", response_model=list[SkillSummary])
def search_skills(
    q: str, category: str | None = None, catalog: SkillCatalog = Depends(get_catalog)
) -> list[SkillSummary]:
    """Search skills by name, title, summary, category or tags."""
    return [SkillSummary.from_record(r) for r in catalog.search_skills(q, category)]


@router.get("/{name}", response_model=SkillRecord)
def get_skill(name: str, catalog: SkillCatalog = Depends(get_catalog)) -> SkillRecord:
    """Get skill by name."""
    try:
        return catalog.store.get(name)
    except SkillNotFoundError:
        raise HTTPException(status_code=404, detail=f"Skill not found: {name}")


@router.get("/{name}/collaborators", response_model=Collaborators)
def get_collaborators(
    name: str, catalog: SkillCatalog = Depends(get_catalog)
) -> Collaborators:
    """Get who a skill receives work from, hands off to and works with."""
    try:
        return catalog.get_collaborators(name)
    except SkillNotFoundError:
        raise HTTPException(status_code=404, detail=f"Skill not found: {name}")


@router.get("/{name}/sharp-edges", response_model=list[SharpEdgeHit])
def get_sharp_edges(
    name: str,
    min_severity: Severity | None = None,
    catalog: SkillCatalog = Depends(get_catalog),
) -> list[SharpEdgeHit]:
    """Get a skill's sharp edges, most severe first."""
    try:
        return catalog.sharp_edges(name, min_severity=min_severity)
    except SkillNotFoundError:
        raise HTTPException(status_code=404, detail=f"Skill not found: {name}")
