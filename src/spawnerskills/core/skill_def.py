"""Skill definition models."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    """Sharp edge severity, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Parse a bracket label such as ``CRITICAL`` (case-insensitive).

        Raises:
            ValueError: If the label is not a known severity
        """
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown severity '{value.strip()}'") from None


class Pattern(BaseModel):
    """A recommended approach."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: str = ""
    when_to_use: str = ""


class AntiPattern(BaseModel):
    """An approach to avoid, with what to do instead."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: str = ""
    instead: str = ""


class SharpEdge(BaseModel):
    """A documented production gotcha."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    severity: Severity
    title: str
    situation: str = ""
    why_it_happens: str = ""
    solution: str = ""
    symptoms: tuple[str, ...] = ()
    detection: str | None = None


class ValidationRule(BaseModel):
    """A regex check run against code, with the message to show on a hit."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    severity: Severity
    pattern: str
    message: str
    fix_action: str = ""


class HandoffRule(BaseModel):
    """Delegate to another skill when the trigger matches the task."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trigger_pattern: str
    delegate_to: str
    context: str = ""

    @property
    def keywords(self) -> tuple[str, ...]:
        return split_keywords(self.trigger_pattern)


class SkillRecord(BaseModel):
    """A parsed skill document. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    title: str
    summary: str = ""
    category: str = ""
    version: str = ""
    tags: tuple[str, ...] = ()
    triggers: tuple[str, ...] = ()
    identity: str = ""
    expertise: tuple[str, ...] = ()
    patterns: tuple[Pattern, ...] = ()
    anti_patterns: tuple[AntiPattern, ...] = ()
    sharp_edges: tuple[SharpEdge, ...] = ()
    validations: tuple[ValidationRule, ...] = ()
    handoff_rules: tuple[HandoffRule, ...] = ()
    receives_from: tuple[str, ...] = ()
    works_well_with: tuple[str, ...] = ()
    source: str | None = None


class ParseIssue(BaseModel):
    """A problem found while parsing or validating a skill document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str
    section: str
    message: str
    level: Literal["error", "warning"] = "error"
    item: str | None = None

    def __str__(self) -> str:
        where = f"{self.section}: {self.item}" if self.item else self.section
        return f"{self.source} [{where}] {self.message}"


class LoadReport(BaseModel):
    """Batch diagnostics for one load cycle."""

    model_config = ConfigDict(frozen=True)

    loaded: int = 0
    issues: tuple[ParseIssue, ...] = ()
    failed: tuple[str, ...] = Field(
        default=(), description="Sources that produced no record"
    )

    @property
    def errors(self) -> list[ParseIssue]:
        return [issue for issue in self.issues if issue.level == "error"]

    @property
    def warnings(self) -> list[ParseIssue]:
        return [issue for issue in self.issues if issue.level == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors and not self.failed


def split_keywords(trigger_pattern: str) -> tuple[str, ...]:
    """Split a pipe-delimited trigger into lower-cased keyword alternatives."""
    keywords: list[str] = []
    for part in trigger_pattern.split("|"):
        keyword = part.strip().strip("`'\"").strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return tuple(keywords)
