"""Utilities package."""

from spawnerskills.utils.def_loader import (
    discover_skill_files,
    parse_frontmatter,
    slugify,
)
from spawnerskills.utils.logging import setup_logging

__all__ = [
    "discover_skill_files",
    "parse_frontmatter",
    "setup_logging",
    "slugify",
]
