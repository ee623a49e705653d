"""Shared utilities for locating and reading skill definition files."""

import logging
import re
from pathlib import Path
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE = ("README.md",)


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split raw frontmatter text from the body without parsing it."""
    if not content.startswith("---\n"):
        return None, content

    end_delimiter = content.find("\n---\n", 4)
    if end_delimiter == -1:
        return None, content

    return content[4:end_delimiter], content[end_delimiter + 5 :]


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split optional YAML frontmatter from a markdown body.

    Args:
        content: Raw file content

    Returns:
        Tuple of (frontmatter dict, body). The dict is empty when the
        content has no frontmatter block.

    Raises:
        yaml.YAMLError: If the frontmatter block is not valid YAML
        ValueError: If the frontmatter is valid YAML but not a mapping
    """
    frontmatter_text, body = split_frontmatter(content)
    if frontmatter_text is None:
        return {}, body

    raw_dict = yaml.safe_load(frontmatter_text) or {}
    if not isinstance(raw_dict, dict):
        raise ValueError("frontmatter must be a mapping")
    return raw_dict, body


def discover_skill_files(
    path: Path,
    pattern: str = "**/*.md",
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
) -> list[Path]:
    """
    Scan a directory tree for skill documents.

    Args:
        path: Root of the skill collection (``<category>/<skill>.md``)
        pattern: Glob pattern relative to ``path``
        exclude: File names to skip (e.g. "README.md")

    Returns:
        Sorted list of matching file paths
    """
    if not path.exists():
        logger.warning(f"Skills directory not found: {path}")
        return []

    excluded = set(exclude)
    results = []
    for skill_file in sorted(path.glob(pattern)):
        if not skill_file.is_file():
            continue
        if skill_file.name in excluded:
            continue
        if any(part.startswith(".") for part in skill_file.relative_to(path).parts):
            continue
        results.append(skill_file)
    return results


def read_definition(path: Path) -> str:
    """Read a skill document as UTF-8 text."""
    return path.read_text(encoding="utf-8")


def slugify(text: str) -> str:
    """
    Turn a title or reference into a skill name.

    "Caching Patterns" -> "caching-patterns"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", text.strip().lower())
    return slug.strip("-")
