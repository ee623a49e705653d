"""Collaboration graph of hand-offs between skills."""

import logging
from collections import deque
from typing import Iterable, Literal, NamedTuple

from spawnerskills.core.skill_def import SkillRecord

logger = logging.getLogger(__name__)

Relation = Literal["handoff", "receives_from", "works_well_with"]


class Edge(NamedTuple):
    source: str
    target: str
    relation: Relation


class CollaborationGraph:
    """
    Directed graph of which skills hand work to which.

    ``X -> Y`` exists when X has a hand-off rule delegating to Y, or when Y
    lists X under "Receives Work From". Cycles are expected (backend and
    frontend hand work to each other), so no acyclicity is enforced.
    """

    def __init__(self, records: Iterable[SkillRecord]):
        self._downstream: dict[str, dict[str, None]] = {}
        self._upstream: dict[str, dict[str, None]] = {}
        self._handoff_targets: dict[str, tuple[str, ...]] = {}
        self._edges: list[Edge] = []

        for record in records:
            self._add_node(record.name)
            targets: dict[str, None] = {}
            for rule in record.handoff_rules:
                targets[rule.delegate_to] = None
                self._add_edge(record.name, rule.delegate_to, "handoff")
            self._handoff_targets[record.name] = tuple(targets)
            for sender in record.receives_from:
                self._add_edge(sender, record.name, "receives_from")
            for peer in record.works_well_with:
                # Peers are not routing edges, only recorded for validation
                self._edges.append(Edge(record.name, peer, "works_well_with"))

    def _add_node(self, name: str) -> None:
        self._downstream.setdefault(name, {})
        self._upstream.setdefault(name, {})

    def _add_edge(self, source: str, target: str, relation: Relation) -> None:
        self._add_node(source)
        self._add_node(target)
        self._downstream[source][target] = None
        self._upstream[target][source] = None
        self._edges.append(Edge(source, target, relation))

    def __contains__(self, name: object) -> bool:
        return name in self._downstream

    def downstream_of(self, name: str) -> frozenset[str]:
        """Skills this skill can delegate to."""
        return frozenset(self._downstream.get(name, ()))

    def upstream_of(self, name: str) -> frozenset[str]:
        """Skills that commonly hand off to this one."""
        return frozenset(self._upstream.get(name, ()))

    def handoff_targets(self, name: str) -> tuple[str, ...]:
        """Targets of the skill's own hand-off rules, in declaration order."""
        return self._handoff_targets.get(name, ())

    def reachable_from(self, name: str) -> tuple[str, ...]:
        """Breadth-first chain of skills reachable by following hand-offs.

        The starting skill is not included unless a cycle leads back to it.
        """
        seen: dict[str, None] = {}
        queue = deque(self._downstream.get(name, ()))
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen[current] = None
            queue.extend(self._downstream.get(current, ()))
        return tuple(seen)

    def dangling_references(self, known: Iterable[str]) -> list[Edge]:
        """Edges whose other end is not a loaded skill."""
        known_names = set(known)
        return [
            edge
            for edge in self._edges
            if edge.source not in known_names or edge.target not in known_names
        ]
