"""Tests for the SkillCatalog query API."""

import pytest

from spawnerskills.core.catalog import SkillCatalog
from spawnerskills.core.exceptions import DuplicateSkillError, SkillNotFoundError
from spawnerskills.core.skill_def import (
    Severity,
    SharpEdge,
    SkillRecord,
    ValidationRule,
)
from spawnerskills.core.skill_store import SkillStore

from tests.conftest import BACKEND_MD


class TestRouteTask:
    def test_basic_routing(self, write_skill, tmp_path):
        """A skill's own triggers route the task to that skill."""
        write_skill("backend/backend.md", "# Backend\n\n## Identity\n\nServices.\n")
        write_skill(
            "frontend/frontend.md",
            "# Frontend\n\n**Triggers:** ui|component|react\n",
        )
        catalog = SkillCatalog(SkillStore.from_directory(tmp_path / "skills"))

        routes = catalog.route_task("need a new React component")

        assert [(r.skill.name, r.matched_keyword) for r in routes] == [
            ("frontend", "react")
        ]
        assert routes[0].rule is None

    def test_handoff_rule_routes_to_delegate(self, catalog):
        routes = catalog.route_task("add an endpoint to the api")

        assert [r.skill.name for r in routes] == ["backend"]
        assert routes[0].source == "frontend"
        assert routes[0].rule.trigger_pattern == "backend|api|server"
        assert routes[0].context == "Needs a new endpoint"

    def test_unknown_delegates_are_dropped(self, catalog):
        """backend hands deploy work to devops, which is not loaded."""
        assert catalog.route_task("deploy with docker") == []

    def test_one_result_per_target_skill(self, catalog):
        # backend's hand-off and frontend's own triggers both point at frontend
        routes = catalog.route_task("a ui component for the react page")

        assert [r.skill.name for r in routes] == ["frontend"]
        assert routes[0].matched_keyword == "ui"
        assert routes[0].source == "backend"

    def test_from_skill_restricts_rules(self, catalog):
        routes = catalog.route_task("component for the api", from_skill="backend")

        assert [r.skill.name for r in routes] == ["frontend"]

    def test_from_unknown_skill_raises(self, catalog):
        with pytest.raises(SkillNotFoundError):
            catalog.route_task("anything", from_skill="ghost")

    def test_limit(self, catalog):
        routes = catalog.route_task("react component with an api", limit=1)

        assert len(routes) == 1

    def test_no_match_is_empty(self, catalog):
        assert catalog.route_task("write a poem") == []

    def test_routing_is_deterministic(self, catalog):
        text = "react component calling the api server"

        first = catalog.route_task(text)

        for _ in range(5):
            assert catalog.route_task(text) == first


class TestFindAndSearch:
    def test_find_by_exact_name(self, catalog):
        assert catalog.find_skill("caching-patterns").title == "Caching Patterns"

    def test_find_by_title(self, catalog):
        assert catalog.find_skill("frontend engineering").name == "frontend"

    def test_find_by_keyword(self, catalog):
        assert catalog.find_skill("redis").name == "caching-patterns"

    def test_find_unknown_raises(self, catalog):
        with pytest.raises(SkillNotFoundError):
            catalog.find_skill("quantum")

    def test_search_requires_every_word(self, catalog):
        assert [r.name for r in catalog.search_skills("caching redis")] == [
            "caching-patterns"
        ]
        assert catalog.search_skills("caching react") == []

    def test_search_with_category(self, catalog):
        assert [r.name for r in catalog.search_skills("engineering")] == [
            "backend",
            "frontend",
        ]
        assert [
            r.name for r in catalog.search_skills("engineering", category="frontend")
        ] == ["frontend"]

    def test_blank_search_is_empty(self, catalog):
        assert catalog.search_skills("   ") == []

    def test_list_by_category(self, catalog):
        assert [r.name for r in catalog.list_skills("backend")] == [
            "backend",
            "caching-patterns",
        ]
        assert len(catalog.list_skills()) == 3


class TestCollaborators:
    def test_get_collaborators(self, catalog):
        info = catalog.get_collaborators("backend")

        assert info.handoff_targets == ("frontend", "devops")
        assert info.receives_from == ("frontend",)
        assert info.upstream == ("frontend",)
        assert info.downstream == ("devops", "frontend")

    def test_handoff_chain_follows_cycles(self, catalog):
        assert catalog.get_collaborators("frontend").chain == (
            "backend",
            "frontend",
            "devops",
        )
        assert catalog.get_collaborators("caching-patterns").chain == ()

    def test_unknown_skill(self, catalog):
        with pytest.raises(SkillNotFoundError):
            catalog.get_collaborators("ghost")


class TestSharpEdges:
    def test_most_severe_first(self, catalog):
        hits = catalog.sharp_edges()

        assert [hit.edge.severity for hit in hits] == [Severity.CRITICAL, Severity.LOW]
        assert {hit.skill for hit in hits} == {"caching-patterns"}

    def test_min_severity(self, catalog):
        hits = catalog.sharp_edges(min_severity=Severity.HIGH)

        assert [hit.edge.title for hit in hits] == ["Thundering herd on expiry"]

    def test_watch_out_uses_detection_pattern(self, catalog):
        hits = catalog.watch_out("def invalidate(key):\n    cache.delete(key)\n")

        assert [hit.edge.title for hit in hits] == ["Thundering herd on expiry"]
        assert catalog.watch_out("print('hello')") == []

    def test_watch_out_for_one_skill(self, catalog):
        assert catalog.watch_out("cache.delete(k)", skill="frontend") == []

    def test_invalid_detection_pattern_is_skipped(self):
        record = SkillRecord(
            name="regex",
            title="Regex",
            sharp_edges=(
                SharpEdge(severity=Severity.HIGH, title="Broken", detection="(unclosed"),
                SharpEdge(severity=Severity.LOW, title="Eval", detection=r"\beval\("),
            ),
        )
        catalog = SkillCatalog(SkillStore([record]))

        assert [hit.edge.title for hit in catalog.watch_out("eval(x)")] == ["Eval"]


class TestValidateCode:
    def test_hits_most_severe_first(self, catalog):
        hits = catalog.validate_code("pickle.dumps(v)\ncache.set(key, value)\n")

        assert [hit.rule.id for hit in hits] == ["no-ttl", "pickle-in-cache"]
        assert {hit.skill for hit in hits} == {"caching-patterns"}
        assert hits[0].rule.message == "Cached values should expire."

    def test_negative_lookahead_respected(self, catalog):
        assert catalog.validate_code("cache.set(key, value, ttl=60)") == []

    def test_patterns_are_case_sensitive(self, catalog):
        assert catalog.validate_code("PICKLE.DUMPS(v)") == []

    def test_one_skill(self, catalog):
        assert catalog.validate_code("pickle.dumps(v)", skill="frontend") == []
        assert len(catalog.validate_code("pickle.dumps(v)", skill="caching-patterns")) == 1

    def test_unknown_skill_raises(self, catalog):
        with pytest.raises(SkillNotFoundError):
            catalog.validate_code("x", skill="ghost")

    def test_invalid_pattern_is_skipped(self):
        record = SkillRecord(
            name="regex",
            title="Regex",
            validations=(
                ValidationRule(
                    id="broken", name="Broken", severity=Severity.HIGH,
                    pattern="(unclosed", message="never",
                ),
                ValidationRule(
                    id="eval", name="Eval", severity=Severity.LOW,
                    pattern=r"\beval\(", message="avoid eval",
                ),
            ),
        )
        catalog = SkillCatalog(SkillStore([record]))

        assert [hit.rule.id for hit in catalog.validate_code("eval(x)")] == ["eval"]


class TestReload:
    def test_reload_publishes_new_snapshot(self, catalog, write_skill):
        before = catalog.snapshot
        write_skill("devops/devops.md", "# DevOps\n")

        report = catalog.reload()

        assert report.loaded == 4
        assert catalog.snapshot is not before
        assert [r.skill.name for r in catalog.route_task("deploy with docker")] == [
            "devops"
        ]

    def test_failed_reload_keeps_previous_snapshot(self, catalog, write_skill):
        before = catalog.snapshot
        write_skill("other/backend.md", BACKEND_MD)

        with pytest.raises(DuplicateSkillError):
            catalog.reload()

        assert catalog.snapshot is before
        assert len(catalog.store) == 3

    def test_reload_without_loader(self, store):
        with pytest.raises(RuntimeError):
            SkillCatalog(store).reload()
