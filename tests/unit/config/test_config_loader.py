"""Tests for covsubmit.config.loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from covsubmit.config.loader import (
    ConfigError,
    dict_to_config,
    expand_env_vars,
    find_project_config,
    get_default_config,
    load_config,
    merge_configs,
)
from covsubmit.config.models import DEFAULT_COVERALLS_URL


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Point COVSUBMIT_HOME at an empty directory so no global config leaks in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("COVSUBMIT_HOME", str(home))
    return home


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


class TestExpandEnvVars:
    """Tests for expand_env_vars."""

    def test_expands_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("TOKEN", "secret")
        assert expand_env_vars({"repo_token": "${TOKEN}"}) == {"repo_token": "secret"}

    def test_uses_default(self, monkeypatch) -> None:
        monkeypatch.delenv("UNSET_VAR", raising=False)
        assert expand_env_vars("${UNSET_VAR:-fallback}") == "fallback"

    def test_unset_without_default_is_empty(self, monkeypatch) -> None:
        monkeypatch.delenv("UNSET_VAR", raising=False)
        assert expand_env_vars("${UNSET_VAR}") == ""

    def test_recurses_into_lists_and_keeps_scalars(self, monkeypatch) -> None:
        monkeypatch.setenv("A", "x")
        assert expand_env_vars({"l": ["${A}", 1], "n": 2.5}) == {"l": ["x", 1], "n": 2.5}


class TestMergeConfigs:
    """Tests for merge_configs."""

    def test_overlay_wins(self) -> None:
        assert merge_configs({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_dicts_merge(self) -> None:
        result = merge_configs({"timeouts": {"connect": 1, "read": 2}}, {"timeouts": {"read": 5}})
        assert result == {"timeouts": {"connect": 1, "read": 5}}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        merge_configs(base, {"a": 2})
        assert base == {"a": 1}


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_defaults(self) -> None:
        config = dict_to_config({})
        assert config == get_default_config()
        assert config.coveralls_url == DEFAULT_COVERALLS_URL
        assert config.format == "jacoco"
        assert config.merge_policy == "sum"
        assert config.timeouts.connect == 10.0
        assert config.timeouts.read == 60.0
        assert config.insecure_tls is False

    def test_empty_strings_are_unset(self) -> None:
        config = dict_to_config({"repo_token": "", "coveralls_url": ""})
        assert config.repo_token is None
        assert config.coveralls_url == DEFAULT_COVERALLS_URL

    def test_merge_policy_lowercased(self) -> None:
        assert dict_to_config({"merge_policy": "ANY"}).merge_policy == "any"

    def test_timeouts(self) -> None:
        config = dict_to_config({"timeouts": {"connect": 2}})
        assert config.timeouts.connect == 2.0
        assert config.timeouts.read == 60.0


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_files(self, project: Path) -> None:
        config = load_config(project)
        assert config.repo_token is None
        assert config.config_sources == []

    def test_project_config(self, project: Path) -> None:
        (project / ".covsubmit.yml").write_text("repo_token: abc\nformat: cobertura\n")

        config = load_config(project)

        assert config.repo_token == "abc"
        assert config.format == "cobertura"
        assert config.config_sources == [f"project:{project / '.covsubmit.yml'}"]

    def test_precedence(self, project: Path, isolated_home: Path) -> None:
        (isolated_home / "config.yml").write_text("repo_token: global\nbranch: global\nparallel: true\n")
        (project / ".covsubmit.yml").write_text("repo_token: project\nbranch: project\n")

        config = load_config(project, cli_overrides={"branch": "cli"})

        assert config.parallel is True
        assert config.repo_token == "project"
        assert config.branch == "cli"
        assert [s.split(":")[0] for s in config.config_sources] == ["global", "project", "cli"]

    def test_custom_config_path(self, project: Path, tmp_path: Path) -> None:
        custom = tmp_path / "custom.yml"
        custom.write_text("service_name: jenkins\n")
        (project / ".covsubmit.yml").write_text("service_name: ignored\n")

        config = load_config(project, cli_config_path=custom)

        assert config.service_name == "jenkins"

    def test_missing_custom_config(self, project: Path, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(project, cli_config_path=tmp_path / "missing.yml")

    def test_invalid_yaml(self, project: Path) -> None:
        (project / ".covsubmit.yml").write_text("repo_token: [\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(project)

    def test_invalid_value(self, project: Path) -> None:
        (project / ".covsubmit.yml").write_text("format: clover\n")
        with pytest.raises(ConfigError, match="Invalid value 'clover'"):
            load_config(project)

    def test_unknown_source_encoding(self, project: Path) -> None:
        (project / ".covsubmit.yml").write_text("source_encoding: utf-99\n")
        with pytest.raises(ConfigError, match="Invalid value 'utf-99'"):
            load_config(project)

    def test_unknown_key_only_warns(self, project: Path, caplog) -> None:
        (project / ".covsubmit.yml").write_text("repo_tokn: abc\n")

        config = load_config(project)

        assert config.repo_token is None
        assert "did you mean 'repo_token'" in caplog.text

    def test_broken_global_config_is_ignored(self, project: Path, isolated_home: Path, caplog) -> None:
        (isolated_home / "config.yml").write_text("format: clover\n")

        config = load_config(project)

        assert config.format == "jacoco"
        assert "Failed to load global config" in caplog.text

    def test_env_expansion_in_file(self, project: Path, monkeypatch) -> None:
        monkeypatch.setenv("MY_TOKEN", "from-env")
        (project / ".covsubmit.yml").write_text("repo_token: ${MY_TOKEN}\n")

        assert load_config(project).repo_token == "from-env"


class TestFindProjectConfig:
    """Tests for find_project_config."""

    def test_finds_first_name(self, project: Path) -> None:
        (project / "covsubmit.yml").write_text("")
        (project / ".covsubmit.yaml").write_text("")
        assert find_project_config(project) == project / ".covsubmit.yaml"

    def test_none_when_absent(self, project: Path) -> None:
        assert find_project_config(project) is None
