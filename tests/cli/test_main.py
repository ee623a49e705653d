"""Tests for CLI main module."""

import yaml
from typer.testing import CliRunner

from spawnerskills.cli.main import app

runner = CliRunner()


def _invoke(workspace, *args):
    return runner.invoke(app, ["--workspace", str(workspace), *args])


def test_commands_registered():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in (
        "list", "show", "search", "route", "validate", "watch-out", "check", "serve"
    ):
        assert command in result.output


def test_invalid_config_exits(tmp_path):
    (tmp_path / "config.user.yaml").write_text(yaml.dump({"loader": {"max_workers": 0}}))

    result = _invoke(tmp_path, "list")

    assert result.exit_code == 1
    assert "Error loading config" in result.output


class TestQueries:
    def test_list(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "list")

        assert result.exit_code == 0
        assert "Available Skills: 3" in result.output
        assert "caching-patterns" in result.output

    def test_list_category(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "list", "--category", "frontend")

        assert "Available Skills: 1" in result.output

    def test_show_raw(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "show", "backend", "--raw")

        assert result.exit_code == 0
        assert "# Backend Engineering" in result.output

    def test_show_unknown(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "show", "quantum")

        assert result.exit_code == 1
        assert "Skill not found: quantum" in result.output
        assert "- frontend" in result.output

    def test_search(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "search", "redis")

        assert result.exit_code == 0
        assert "caching-patterns" in result.output

    def test_collaborators(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "collaborators", "backend")

        assert result.exit_code == 0
        assert "Hands off to: frontend, devops" in result.output

    def test_collaborators_shows_handoff_chain(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "collaborators", "backend")

        assert "Hand-off chain: frontend, devops, backend" in result.output


class TestRoute:
    def test_route_task(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "route", "need a new React component")

        assert result.exit_code == 0
        assert "frontend" in result.output

    def test_no_match(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "route", "write a poem")

        assert result.exit_code == 0
        assert "No skill matched this task" in result.output

    def test_unknown_from_skill(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "route", "anything", "--from", "ghost")

        assert result.exit_code == 1

    def test_limit_caps_results(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "route", "deploy the api and the ui", "--limit", "1")

        assert result.exit_code == 0
        assert "Needs a new endpoint" in result.output
        assert "Builds accessible" not in result.output

    def test_zero_limit_rejected(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "route", "need a new React component", "--limit", "0")

        assert result.exit_code == 2


class TestWatchOut:
    def test_detects_sharp_edge(self, skills_dir, tmp_path):
        code = tmp_path / "cache.py"
        code.write_text("cache.delete(key)\n")

        result = _invoke(tmp_path, "watch-out", str(code))

        assert result.exit_code == 0
        assert "Thundering herd on expiry" in result.output

    def test_clean_code(self, skills_dir, tmp_path):
        code = tmp_path / "hello.py"
        code.write_text("print('hello')\n")

        result = _invoke(tmp_path, "watch-out", str(code))

        assert "No sharp edges detected" in result.output

    def test_undecodable_file(self, skills_dir, tmp_path):
        code = tmp_path / "blob.bin"
        code.write_bytes(b"\xff\xfe\x00bad")

        result = _invoke(tmp_path, "watch-out", str(code))

        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output


class TestCheck:
    def test_reports_validation_hits(self, skills_dir, tmp_path):
        code = tmp_path / "cache.py"
        code.write_text("cache.set(key, value)\n")

        result = _invoke(tmp_path, "check", str(code))

        assert result.exit_code == 0
        assert "no-ttl" in result.output
        assert "Cached values should expire." in result.output
        assert "Fix: Pass `ttl=` to every `cache.set` call." in result.output

    def test_clean_code(self, skills_dir, tmp_path):
        code = tmp_path / "cache.py"
        code.write_text("cache.set(key, value, ttl=60)\n")

        result = _invoke(tmp_path, "check", str(code), "--skill", "caching-patterns")

        assert result.exit_code == 0
        assert "No validation issues found" in result.output

    def test_unknown_skill(self, skills_dir, tmp_path):
        code = tmp_path / "cache.py"
        code.write_text("x = 1\n")

        result = _invoke(tmp_path, "check", str(code), "--skill", "ghost")

        assert result.exit_code == 1

    def test_undecodable_file(self, skills_dir, tmp_path):
        code = tmp_path / "blob.bin"
        code.write_bytes(b"\xff\xfe\x00bad")

        result = _invoke(tmp_path, "check", str(code))

        assert result.exit_code == 1
        assert "not valid UTF-8" in result.output


class TestValidate:
    def test_reports_errors_and_fails(self, skills_dir, tmp_path):
        result = _invoke(tmp_path, "validate")

        assert result.exit_code == 1
        assert "3 skill(s) loaded, 1 error(s)" in result.output
        assert "Not a real severity" in result.output

    def test_clean_collection_passes(self, write_skill, tmp_path):
        write_skill("misc/fine.md", "# Fine\n\n## Identity\n\nAll good.\n")

        result = _invoke(tmp_path, "validate")

        assert result.exit_code == 0
        assert "1 skill(s) loaded, 0 error(s), 0 warning(s)" in result.output

    def test_duplicate_names_fail_loading(self, write_skill, tmp_path):
        write_skill("a/same.md", "# Same\n")
        write_skill("b/same.md", "# Same\n")

        result = _invoke(tmp_path, "validate")

        assert result.exit_code == 1
        assert "Duplicate skill" in result.output
