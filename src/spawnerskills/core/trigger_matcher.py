"""Match free-text task descriptions against hand-off triggers."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from spawnerskills.core.skill_def import HandoffRule, SkillRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerRule:
    """One rule as an explicit list of keyword alternatives."""

    source: str
    delegate_to: str
    keywords: tuple[str, ...]
    context: str = ""
    order: int = 0
    rule: HandoffRule | None = None


@dataclass(frozen=True)
class TriggerMatch:
    """A rule that fired, with the keyword that made it fire."""

    delegate_to: str
    matched_keyword: str
    context: str
    source: str
    rule: HandoffRule | None
    position: int
    order: int


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.IGNORECASE)


class TriggerMatcher:
    """
    Rank hand-off rules against a task description.

    Keywords match case-insensitively as whole words. Within a rule the
    reported keyword is the leftmost hit in the text (longest wins at the same
    position). Rules are ranked by the length of their matched keyword, longest
    first, then by declaration order.
    """

    def __init__(self, rules: Iterable[TriggerRule]):
        self._rules = tuple(rules)
        self._patterns = {
            keyword: _keyword_pattern(keyword)
            for rule in self._rules
            for keyword in rule.keywords
        }

    @classmethod
    def from_records(cls, records: Iterable[SkillRecord]) -> "TriggerMatcher":
        """Build rules from records in load order.

        A skill's own triggers route to the skill itself and come before its
        hand-off rules.
        """
        rules = []
        for record in records:
            if record.triggers:
                rules.append(
                    TriggerRule(
                        source=record.name,
                        delegate_to=record.name,
                        keywords=record.triggers,
                        context=record.summary,
                        order=len(rules),
                    )
                )
            for rule in record.handoff_rules:
                if not rule.keywords:
                    continue
                rules.append(
                    TriggerRule(
                        source=record.name,
                        delegate_to=rule.delegate_to,
                        keywords=rule.keywords,
                        context=rule.context,
                        order=len(rules),
                        rule=rule,
                    )
                )
        return cls(rules)

    @property
    def rules(self) -> tuple[TriggerRule, ...]:
        return self._rules

    def _first_hit(self, rule: TriggerRule, text: str) -> tuple[int, str] | None:
        best: tuple[int, str] | None = None
        for keyword in rule.keywords:
            found = self._patterns[keyword].search(text)
            if found is None:
                continue
            position = found.start()
            if (
                best is None
                or position < best[0]
                or (position == best[0] and len(keyword) > len(best[1]))
            ):
                best = (position, keyword)
        return best

    def match(self, text: str, source: str | None = None) -> list[TriggerMatch]:
        """
        Find the rules whose trigger matches ``text``.

        Args:
            text: Free-text task context
            source: Only consider hand-off rules declared by this skill

        Returns:
            Ranked list of matches; empty when nothing matches
        """
        if not text:
            return []

        matches = []
        for rule in self._rules:
            if source is not None and (rule.source != source or rule.rule is None):
                continue
            hit = self._first_hit(rule, text)
            if hit is None:
                continue
            position, keyword = hit
            matches.append(
                TriggerMatch(
                    delegate_to=rule.delegate_to,
                    matched_keyword=keyword,
                    context=rule.context,
                    source=rule.source,
                    rule=rule.rule,
                    position=position,
                    order=rule.order,
                )
            )

        matches.sort(key=lambda m: (-len(m.matched_keyword), m.order))
        logger.debug(f"{len(matches)} trigger(s) matched")
        return matches
