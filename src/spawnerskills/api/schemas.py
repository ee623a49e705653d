"""Pydantic schemas for API request/response models."""

from pydantic import BaseModel, Field

from spawnerskills.core.skill_def import SkillRecord


class SkillSummary(BaseModel):
    """Lightweight skill info for listings."""

    name: str
    title: str
    category: str
    summary: str

    @classmethod
    def from_record(cls, record: SkillRecord) -> "SkillSummary":
        summary = record.summary
        if len(summary) > 200:
            summary = summary[:200] + "..."
        return cls(
            name=record.name,
            title=record.title,
            category=record.category,
            summary=summary,
        )


class RouteRequest(BaseModel):
    """Request body for routing a task."""

    task: str = Field(min_length=1)
    from_skill: str | None = None
    limit: int | None = Field(default=None, gt=0)


class RouteResult(BaseModel):
    """One routing decision."""

    skill: SkillSummary
    matched_keyword: str
    context: str
    source: str
    trigger_pattern: str | None = None


class WatchOutRequest(BaseModel):
    """Request body for scanning code for sharp edges."""

    code: str
    skill: str | None = None


class ValidateRequest(BaseModel):
    """Request body for running validation rules against code."""

    code: str
    skill: str | None = None
