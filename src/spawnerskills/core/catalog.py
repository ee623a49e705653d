"""Read-only query API over the loaded skills."""

import logging
import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict

from spawnerskills.core.collaboration import CollaborationGraph
from spawnerskills.core.exceptions import SkillNotFoundError
from spawnerskills.core.skill_def import (
    HandoffRule,
    LoadReport,
    Severity,
    SharpEdge,
    SkillRecord,
    ValidationRule,
)
from spawnerskills.core.skill_store import SkillStore
from spawnerskills.core.trigger_matcher import TriggerMatcher

if TYPE_CHECKING:
    from spawnerskills.utils.config import Config

logger = logging.getLogger(__name__)


class RouteMatch(BaseModel):
    """A skill selected for a task, and the rule that selected it."""

    model_config = ConfigDict(frozen=True)

    skill: SkillRecord
    matched_keyword: str
    context: str
    source: str
    rule: HandoffRule | None = None


class Collaborators(BaseModel):
    """Who a skill works with."""

    model_config = ConfigDict(frozen=True)

    name: str
    receives_from: tuple[str, ...]
    works_well_with: tuple[str, ...]
    handoff_targets: tuple[str, ...]
    upstream: tuple[str, ...]
    downstream: tuple[str, ...]
    chain: tuple[str, ...] = ()


class SharpEdgeHit(BaseModel):
    """A sharp edge together with the skill that documents it."""

    model_config = ConfigDict(frozen=True)

    skill: str
    edge: SharpEdge


class ValidationHit(BaseModel):
    """A validation rule that matched, and the skill that declares it."""

    model_config = ConfigDict(frozen=True)

    skill: str
    rule: ValidationRule


@dataclass(frozen=True)
class CatalogSnapshot:
    """Everything derived from one load cycle."""

    store: SkillStore
    graph: CollaborationGraph
    matcher: TriggerMatcher

    @classmethod
    def build(cls, store: SkillStore) -> "CatalogSnapshot":
        records = store.all()
        return cls(
            store=store,
            graph=CollaborationGraph(records),
            matcher=TriggerMatcher.from_records(records),
        )


@lru_cache(maxsize=512)
def _detection_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=512)
def _validation_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


class SkillCatalog:
    """
    Stateless read API over an immutable snapshot.

    ``reload()`` builds a complete new snapshot and then swaps a single
    reference, so readers see either the old or the new skill set, never a
    mix. Every query reads the snapshot reference once.
    """

    def __init__(
        self,
        store: SkillStore,
        loader: Callable[[], SkillStore] | None = None,
    ):
        self._snapshot = CatalogSnapshot.build(store)
        self._loader = loader
        self._reload_lock = threading.Lock()

    @staticmethod
    def from_config(config: "Config") -> "SkillCatalog":
        """Create SkillCatalog that loads (and reloads) the configured skills."""
        return SkillCatalog(
            SkillStore.from_config(config),
            loader=lambda: SkillStore.from_config(config),
        )

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def store(self) -> SkillStore:
        return self._snapshot.store

    @property
    def graph(self) -> CollaborationGraph:
        return self._snapshot.graph

    @property
    def report(self) -> LoadReport:
        return self._snapshot.store.report

    def reload(self) -> LoadReport:
        """
        Reload skills and publish the new snapshot.

        On failure the previous snapshot stays in place and the error
        propagates.
        """
        if self._loader is None:
            raise RuntimeError("Catalog was created without a loader")
        with self._reload_lock:
            snapshot = CatalogSnapshot.build(self._loader())
            self._snapshot = snapshot
        logger.info(f"Catalog reloaded with {len(snapshot.store)} skill(s)")
        return snapshot.store.report

    def list_skills(self, category: str | None = None) -> list[SkillRecord]:
        """List skills, optionally only one category."""
        return [
            record
            for record in self._snapshot.store
            if category is None or record.category == category
        ]

    def search_skills(
        self, query: str, category: str | None = None
    ) -> list[SkillRecord]:
        """
        Search skills by words.

        Every word of the query must appear (case-insensitively) in the
        skill's name, title, summary, category or tags.
        """
        words = query.lower().split()
        if not words:
            return []

        results = []
        for record in self._snapshot.store:
            if category is not None and record.category != category:
                continue
            haystack = " ".join(
                [record.name, record.title, record.summary, record.category, *record.tags]
            ).lower()
            if all(word in haystack for word in words):
                results.append(record)
        return results

    def find_skill(self, name_or_keyword: str) -> SkillRecord:
        """
        Find one skill by exact name, then name/title, then search.

        Raises:
            SkillNotFoundError: If nothing matches
        """
        store = self._snapshot.store
        if name_or_keyword in store:
            return store.get(name_or_keyword)

        wanted = name_or_keyword.strip().lower()
        for record in store:
            if record.name.lower() == wanted or record.title.lower() == wanted:
                return record

        results = self.search_skills(name_or_keyword)
        if results:
            return results[0]
        raise SkillNotFoundError(name_or_keyword)

    def route_task(
        self,
        description: str,
        from_skill: str | None = None,
        limit: int | None = None,
    ) -> list[RouteMatch]:
        """
        Select skills for a task description.

        Args:
            description: Free-text task description
            from_skill: Only follow this skill's hand-off rules
            limit: Maximum number of results

        Returns:
            Ranked matches, one per target skill. Targets that are not loaded
            are dropped. Empty when nothing matches.

        Raises:
            SkillNotFoundError: If ``from_skill`` is not loaded
        """
        snapshot = self._snapshot
        if from_skill is not None:
            snapshot.store.get(from_skill)

        routes: list[RouteMatch] = []
        seen: set[str] = set()
        for match in snapshot.matcher.match(description, source=from_skill):
            if match.delegate_to in seen:
                continue
            if match.delegate_to not in snapshot.store:
                logger.debug(
                    f"Dropping route to unknown skill '{match.delegate_to}' "
                    f"from '{match.source}'"
                )
                continue
            seen.add(match.delegate_to)
            routes.append(
                RouteMatch(
                    skill=snapshot.store.get(match.delegate_to),
                    matched_keyword=match.matched_keyword,
                    context=match.context,
                    source=match.source,
                    rule=match.rule,
                )
            )
            if limit is not None and len(routes) >= limit:
                break
        return routes

    def get_collaborators(self, name: str) -> Collaborators:
        """
        Collaboration info for one skill.

        Raises:
            SkillNotFoundError: If the skill is not loaded
        """
        snapshot = self._snapshot
        record = snapshot.store.get(name)
        return Collaborators(
            name=record.name,
            receives_from=record.receives_from,
            works_well_with=record.works_well_with,
            handoff_targets=snapshot.graph.handoff_targets(name),
            upstream=tuple(sorted(snapshot.graph.upstream_of(name))),
            downstream=tuple(sorted(snapshot.graph.downstream_of(name))),
            chain=snapshot.graph.reachable_from(name),
        )

    def sharp_edges(
        self,
        skill: str | None = None,
        min_severity: Severity | None = None,
    ) -> list[SharpEdgeHit]:
        """List sharp edges, most severe first.

        Raises:
            SkillNotFoundError: If ``skill`` is given and not loaded
        """
        store = self._snapshot.store
        records = [store.get(skill)] if skill is not None else list(store)
        hits = [
            SharpEdgeHit(skill=record.name, edge=edge)
            for record in records
            for edge in record.sharp_edges
            if min_severity is None or edge.severity.rank >= min_severity.rank
        ]
        # sort is stable, so declaration order is kept within a severity
        hits.sort(key=lambda hit: -hit.edge.severity.rank)
        return hits

    def watch_out(self, code: str, skill: str | None = None) -> list[SharpEdgeHit]:
        """Sharp edges whose detection pattern matches ``code``."""
        hits = []
        for hit in self.sharp_edges(skill):
            if not hit.edge.detection:
                continue
            try:
                pattern = _detection_regex(hit.edge.detection)
            except re.error as e:
                logger.warning(
                    f"Skipping detection pattern of '{hit.edge.title}' "
                    f"({hit.skill}): {e}"
                )
                continue
            if pattern.search(code):
                hits.append(hit)
        return hits

    def validate_code(self, code: str, skill: str | None = None) -> list[ValidationHit]:
        """
        Run the validation rules against ``code``.

        Patterns are case-sensitive. Hits are ordered most severe first, then
        by skill load order and rule order.

        Raises:
            SkillNotFoundError: If ``skill`` is given and not loaded
        """
        store = self._snapshot.store
        records = [store.get(skill)] if skill is not None else list(store)
        hits = []
        for record in records:
            for rule in record.validations:
                try:
                    pattern = _validation_regex(rule.pattern)
                except re.error as e:
                    logger.warning(
                        f"Skipping validation '{rule.id}' ({record.name}): {e}"
                    )
                    continue
                if pattern.search(code):
                    hits.append(ValidationHit(skill=record.name, rule=rule))
        hits.sort(key=lambda hit: -hit.rule.severity.rank)
        return hits
