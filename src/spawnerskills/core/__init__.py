"""Core skill loading and selection."""

from .catalog import (
    Collaborators,
    RouteMatch,
    SharpEdgeHit,
    SkillCatalog,
    ValidationHit,
)
from .collaboration import CollaborationGraph
from .context import SharedContext
from .exceptions import (
    DuplicateSkillError,
    LoadTimeoutError,
    SkillError,
    SkillLoadError,
    SkillNotFoundError,
    SkillParseError,
)
from .skill_def import (
    AntiPattern,
    HandoffRule,
    LoadReport,
    ParseIssue,
    Pattern,
    Severity,
    SharpEdge,
    SkillRecord,
    ValidationRule,
)
from .skill_parser import ParsedSkill, parse_skill, render_skill
from .skill_store import SkillStore
from .trigger_matcher import TriggerMatch, TriggerMatcher, TriggerRule

__all__ = [
    "AntiPattern",
    "CollaborationGraph",
    "Collaborators",
    "DuplicateSkillError",
    "HandoffRule",
    "LoadReport",
    "LoadTimeoutError",
    "ParseIssue",
    "ParsedSkill",
    "Pattern",
    "RouteMatch",
    "Severity",
    "SharedContext",
    "SharpEdge",
    "SharpEdgeHit",
    "SkillCatalog",
    "SkillError",
    "SkillLoadError",
    "SkillNotFoundError",
    "SkillParseError",
    "SkillRecord",
    "SkillStore",
    "TriggerMatch",
    "TriggerMatcher",
    "TriggerRule",
    "ValidationHit",
    "ValidationRule",
    "parse_skill",
    "render_skill",
]
