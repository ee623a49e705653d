"""Custom exceptions for spawner-skills."""

from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

if TYPE_CHECKING:
    from spawnerskills.core.skill_def import ParseIssue


class SkillError(Exception):
    """Base class for skill loading and lookup errors."""


class SkillNotFoundError(SkillError):
    """Raised when a skill is not found."""

    def __init__(self, name: str):
        super().__init__(f"Skill not found: {name}")
        self.name = name


class SkillParseError(SkillError):
    """A skill document could not be turned into a record."""

    def __init__(self, source: str, issues: Sequence["ParseIssue"]):
        reasons = "; ".join(issue.message for issue in issues if issue.level == "error")
        super().__init__(f"Invalid skill '{source}': {reasons or 'unparseable'}")
        self.source = source
        self.issues = list(issues)


class DuplicateSkillError(SkillError):
    """Two or more documents derive the same skill name."""

    def __init__(
        self,
        duplicates: Mapping[str, Sequence[str]],
        issues: Iterable["ParseIssue"] = (),
    ):
        self.duplicates = {name: list(paths) for name, paths in duplicates.items()}
        self.issues = list(issues)
        message = f"Duplicate skill: {_describe_duplicates(self.duplicates)}"
        errors = _describe_errors(self.issues)
        if errors:
            message += f"; parse errors: {errors}"
        super().__init__(message)


class SkillLoadError(SkillError):
    """
    One or more skill files could not be read.

    Duplicate names and parse issues found among the readable files are
    attached as well.
    """

    def __init__(
        self,
        failures: Mapping[str, str],
        duplicates: Mapping[str, Sequence[str]] | None = None,
        issues: Iterable["ParseIssue"] = (),
    ):
        self.failures = dict(failures)
        self.duplicates = {
            name: list(paths) for name, paths in (duplicates or {}).items()
        }
        self.issues = list(issues)

        details = "; ".join(f"{path}: {reason}" for path, reason in failures.items())
        parts = [f"Failed to read {len(failures)} skill file(s): {details}"]
        if self.duplicates:
            parts.append(f"duplicate skill: {_describe_duplicates(self.duplicates)}")
        errors = _describe_errors(self.issues)
        if errors:
            parts.append(f"parse errors: {errors}")
        super().__init__("; ".join(parts))


class LoadTimeoutError(SkillError):
    """Loading did not finish within the configured timeout."""

    def __init__(self, timeout: float, pending: Iterable[str]):
        self.timeout = timeout
        self.pending = sorted(pending)
        super().__init__(
            f"Skill loading timed out after {timeout}s "
            f"({len(self.pending)} file(s) pending)"
        )


def _describe_duplicates(duplicates: Mapping[str, Sequence[str]]) -> str:
    return "; ".join(
        f"'{name}' defined in {', '.join(paths)}" for name, paths in duplicates.items()
    )


def _describe_errors(issues: Sequence["ParseIssue"]) -> str:
    return "; ".join(str(issue) for issue in issues if issue.level == "error")
