"""Tests for config loading, validation and path resolution."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from spawnerskills.utils.config import ApiConfig, Config, LoaderConfig, merge_layers


class TestPathResolution:
    """Tests for path resolution against workspace."""

    def test_resolves_default_paths_against_workspace(self):
        config = Config(workspace=Path("/workspace"))

        assert config.skills_path == Path("/workspace/skills")
        assert config.logging_path == Path("/workspace/.logs")

    def test_resolves_custom_relative_paths(self):
        config = Config(workspace=Path("/workspace"), skills_path=Path("vendor/skills"))

        assert config.skills_path == Path("/workspace/vendor/skills")

    def test_accepts_absolute_path_inside_workspace(self):
        config = Config(
            workspace=Path("/workspace"), skills_path=Path("/workspace/skills")
        )

        assert config.skills_path == Path("/workspace/skills")

    def test_rejects_absolute_path_outside_workspace(self):
        with pytest.raises(ValidationError) as exc:
            Config(workspace=Path("/workspace"), skills_path=Path("/etc/skills"))

        assert "skills_path must be relative" in str(exc.value)


class TestValidation:
    def test_defaults(self):
        config = Config(workspace=Path("/workspace"))

        assert config.loader.max_workers == 4
        assert config.loader.exclude == ["README.md"]
        assert config.routing.limit == 5
        assert config.api.port == 8000

    def test_max_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            LoaderConfig(max_workers=0)

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_range(self, port):
        with pytest.raises(ValidationError):
            ApiConfig(port=port)

    def test_empty_host_rejected(self):
        with pytest.raises(ValidationError) as exc:
            ApiConfig(host="  ")

        assert "host must not be empty" in str(exc.value)


class TestConfigFiles:
    def test_load_without_files_uses_defaults(self, tmp_path):
        config = Config.load(tmp_path)

        assert config.workspace == tmp_path
        assert config.skills_path == tmp_path / "skills"

    def test_runtime_overrides_user_config(self, tmp_path):
        (tmp_path / "config.user.yaml").write_text(
            yaml.dump({"loader": {"max_workers": 8, "timeout": 10}, "api": {"port": 9000}})
        )
        (tmp_path / "config.runtime.yaml").write_text(
            yaml.dump({"loader": {"max_workers": 2}})
        )

        config = Config.load(tmp_path)

        assert config.loader.max_workers == 2
        # sibling keys survive the deep merge
        assert config.loader.timeout == 10
        assert config.api.port == 9000

    def test_invalid_yaml_raises(self, tmp_path):
        (tmp_path / "config.user.yaml").write_text("loader: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            Config.load(tmp_path)

    def test_reload_picks_up_changes(self, tmp_path):
        config = Config.load(tmp_path)
        (tmp_path / "config.user.yaml").write_text(yaml.dump({"routing": {"limit": 2}}))

        assert config.reload() is True
        assert config.routing.limit == 2

    def test_failed_reload_keeps_previous_values(self, tmp_path):
        config = Config.load(tmp_path)
        (tmp_path / "config.user.yaml").write_text(
            yaml.dump({"loader": {"max_workers": -1}})
        )

        assert config.reload() is False
        assert config.loader.max_workers == 4


class TestLogConfig:
    def test_level_is_normalised(self):
        assert Config(workspace=Path("/w"), log={"level": "warning"}).log.level == "WARNING"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Config(workspace=Path("/w"), log={"level": "loud"})

        assert "unknown log level" in str(exc.value)


class TestMergeLayers:
    def test_nested_sections_merge_key_by_key(self):
        merged = merge_layers(
            {"loader": {"max_workers": 8, "timeout": 10}},
            {"loader": {"max_workers": 2}, "routing": {"limit": 1}},
        )

        assert merged == {
            "loader": {"max_workers": 2, "timeout": 10},
            "routing": {"limit": 1},
        }

    def test_inputs_are_not_mutated(self):
        base = {"loader": {"max_workers": 8}}

        merge_layers(base, {"loader": {"max_workers": 2}})

        assert base == {"loader": {"max_workers": 8}}

    def test_non_mapping_file_rejected(self, tmp_path):
        (tmp_path / "config.user.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            Config.load(tmp_path)
