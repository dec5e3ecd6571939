"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from voom.config import VoomConfig, load_config
from voom.exceptions import ConfigurationError


class TestLoadConfig:
    """Defaults, then YAML file, then environment."""

    def test_defaults(self, tmp_path) -> None:
        config = load_config(environ={"VOOM_CONFIG": str(tmp_path / "absent.yaml")})
        assert config == VoomConfig()
        assert config.manifest_name == "project.clj"

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("repos_home: /srv/repos\nmax_workers: 8\ngit_timeout: 12.5\n")

        config = load_config(path, environ={})

        assert config.repos_home == Path("/srv/repos")
        assert config.max_workers == 8
        assert config.git_timeout == 12.5

    def test_voom_config_variable(self, tmp_path) -> None:
        path = tmp_path / "elsewhere.yaml"
        path.write_text("box_dir: deps\n")
        assert load_config(environ={"VOOM_CONFIG": str(path)}).box_dir == "deps"

    def test_environment_wins(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("repos_home: /srv/repos\n")

        config = load_config(path, environ={
            "REPOS_HOME": "/data/repos",
            "VOOM_GIT_TIMEOUT": "60",
            "VOOM_MAX_WORKERS": "2",
        })

        assert config.repos_home == Path("/data/repos")
        assert config.git_timeout == 60.0
        assert config.max_workers == 2

    def test_home_expanded(self) -> None:
        config = load_config(Path("/dev/null"), environ={"REPOS_HOME": "~/repos"})
        assert "~" not in str(config.repos_home)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("")
        assert load_config(path, environ={}) == VoomConfig()


class TestInvalidConfig:

    def test_unknown_key(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("repos: x\n")
        with pytest.raises(ConfigurationError, match="Unknown config keys") as info:
            load_config(path, environ={})
        assert info.value.context["keys"] == ["repos"]

    def test_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(path, environ={})

    def test_bad_yaml(self, tmp_path) -> None:
        path = tmp_path / "voom.yaml"
        path.write_text("repos_home: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Cannot read config file"):
            load_config(path, environ={})

    def test_missing_explicit_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.yaml", environ={})

    @pytest.mark.parametrize(
        "environ",
        [
            {"VOOM_MAX_WORKERS": "many"},
            {"VOOM_MAX_WORKERS": "0"},
            {"VOOM_GIT_TIMEOUT": "-1"},
        ],
    )
    def test_bad_values(self, environ) -> None:
        with pytest.raises(ConfigurationError):
            load_config(Path("/dev/null"), environ=environ)
