"""Skill record store: parallel load, immutable lookup."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Iterator

from spawnerskills.core.collaboration import CollaborationGraph
from spawnerskills.core.exceptions import (
    DuplicateSkillError,
    LoadTimeoutError,
    SkillLoadError,
    SkillNotFoundError,
    SkillParseError,
)
from spawnerskills.core.skill_def import LoadReport, ParseIssue, SkillRecord
from spawnerskills.core.skill_parser import ParsedSkill, parse_skill
from spawnerskills.utils.def_loader import (
    DEFAULT_EXCLUDE,
    discover_skill_files,
    read_definition,
)

if TYPE_CHECKING:
    from spawnerskills.utils.config import Config

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class _FileOutcome:
    path: Path
    parsed: ParsedSkill | None = None
    issues: list[ParseIssue] = field(default_factory=list)
    read_error: str | None = None


def _category_for(path: Path, root: Path | None) -> str | None:
    """``<category>/<skill>.md`` -> category, relative to the collection root."""
    if root is not None:
        try:
            parts = path.relative_to(root).parts
        except ValueError:
            parts = ()
        return parts[0] if len(parts) > 1 else None
    return path.parent.name or None


def _load_file(path: Path, root: Path | None) -> _FileOutcome:
    outcome = _FileOutcome(path=path)
    try:
        content = read_definition(path)
    except (OSError, UnicodeDecodeError) as e:
        outcome.read_error = str(e)
        return outcome

    try:
        outcome.parsed = parse_skill(
            content, source=path, category=_category_for(path, root)
        )
        outcome.issues = list(outcome.parsed.issues)
    except SkillParseError as e:
        outcome.issues = list(e.issues)
    return outcome


class SkillStore:
    """
    Immutable name -> SkillRecord mapping.

    A store is built once per load cycle and never mutated; reloading builds
    a new store.
    """

    def __init__(
        self,
        records: Iterable[SkillRecord] = (),
        report: LoadReport | None = None,
    ):
        index: dict[str, SkillRecord] = {}
        for record in records:
            if record.name in index:
                raise DuplicateSkillError(
                    {
                        record.name: [
                            index[record.name].source or "<unknown>",
                            record.source or "<unknown>",
                        ]
                    }
                )
            index[record.name] = record
        self._records = MappingProxyType(index)
        self.report = report or LoadReport(loaded=len(index))

    @staticmethod
    def from_config(config: "Config") -> "SkillStore":
        """Create SkillStore from the configured skills directory."""
        return SkillStore.from_directory(
            config.skills_path,
            max_workers=config.loader.max_workers,
            timeout=config.loader.timeout,
            exclude=config.loader.exclude,
        )

    @classmethod
    def from_directory(
        cls,
        path: Path,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: float | None = None,
        exclude: Iterable[str] = DEFAULT_EXCLUDE,
    ) -> "SkillStore":
        """Discover ``<category>/<skill>.md`` files under ``path`` and load them."""
        paths = discover_skill_files(path, exclude=exclude)
        return cls.load(paths, max_workers=max_workers, timeout=timeout, root=path)

    @classmethod
    def load(
        cls,
        paths: Iterable[Path | str],
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: float | None = None,
        root: Path | None = None,
    ) -> "SkillStore":
        """
        Parse every file and publish them as one store.

        Files are parsed in parallel; results are merged in input order.
        Parse errors are collected in ``store.report`` and do not stop the
        load. Unreadable files and duplicate names are fatal, and every
        offender is listed in the raised error.

        Args:
            paths: Skill documents to load
            max_workers: Size of the parsing thread pool
            timeout: Overall load timeout in seconds, or None for no limit
            root: Collection root used to derive categories

        Raises:
            SkillLoadError: If any file cannot be read
            DuplicateSkillError: If two files derive the same skill name
            LoadTimeoutError: If parsing does not finish within ``timeout``
        """
        file_paths = [Path(p) for p in paths]
        outcomes = cls._parse_all(file_paths, max_workers, timeout, root)

        records: list[SkillRecord] = []
        issues: list[ParseIssue] = []
        failed: list[str] = []
        failures: dict[str, str] = {}
        sources: dict[str, list[str]] = {}
        for outcome in outcomes:
            if outcome.read_error is not None:
                failures[str(outcome.path)] = outcome.read_error
                continue
            issues.extend(outcome.issues)
            if outcome.parsed is None:
                failed.append(str(outcome.path))
                continue
            record = outcome.parsed.record
            sources.setdefault(record.name, []).append(str(outcome.path))
            records.append(record)

        # Every fatal problem is collected before raising
        duplicates = {name: paths for name, paths in sources.items() if len(paths) > 1}
        if failures:
            raise SkillLoadError(failures, duplicates=duplicates, issues=issues)
        if duplicates:
            raise DuplicateSkillError(duplicates, issues=issues)

        issues.extend(cls._reference_warnings(records))
        for issue in issues:
            if issue.level == "error":
                logger.warning(str(issue))
            else:
                logger.info(str(issue))

        report = LoadReport(loaded=len(records), issues=tuple(issues), failed=tuple(failed))
        logger.info(
            f"Loaded {report.loaded} skill(s) with {len(report.errors)} error(s) "
            f"and {len(report.warnings)} warning(s)"
        )
        return cls(records, report)

    @staticmethod
    def _parse_all(
        paths: list[Path],
        max_workers: int,
        timeout: float | None,
        root: Path | None,
    ) -> list[_FileOutcome]:
        if not paths:
            return []

        executor = ThreadPoolExecutor(max_workers=max_workers)
        futures = [executor.submit(_load_file, path, root) for path in paths]
        _, pending = wait(futures, timeout=timeout)
        if pending:
            executor.shutdown(wait=False, cancel_futures=True)
            pending_paths = [
                str(path) for path, future in zip(paths, futures) if future in pending
            ]
            raise LoadTimeoutError(timeout or 0.0, pending_paths)
        executor.shutdown()
        return [future.result() for future in futures]

    @staticmethod
    def _reference_warnings(records: list[SkillRecord]) -> list[ParseIssue]:
        known = {record.name for record in records}
        sources = {record.name: record.source or record.name for record in records}
        graph = CollaborationGraph(records)

        warnings = []
        for edge in graph.dangling_references(known):
            owner, missing = (
                (edge.target, edge.source)
                if edge.relation == "receives_from"
                else (edge.source, edge.target)
            )
            warnings.append(
                ParseIssue(
                    source=sources.get(owner, owner),
                    section="Collaboration",
                    message=f"{edge.relation} references unknown skill '{missing}'",
                    level="warning",
                    item=missing,
                )
            )
        return warnings

    def get(self, name: str) -> SkillRecord:
        """
        Look up a skill by name.

        Raises:
            SkillNotFoundError: If no skill has this name
        """
        try:
            return self._records[name]
        except KeyError:
            raise SkillNotFoundError(name) from None

    def all(self) -> tuple[SkillRecord, ...]:
        """All records in insertion order."""
        return tuple(self._records.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._records)

    def categories(self) -> list[str]:
        return sorted({record.category for record in self._records.values() if record.category})

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[SkillRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)
