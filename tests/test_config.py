"""Unit tests for ScaffoldConfig (mvnscaffold.config).

Tests cover:
- Defaults and field validation
- save/load round trip
- from_env with each recognised variable
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mvnscaffold.config import DEFAULT_REPOSITORY_URL, ScaffoldConfig

ENV_VARS = (
    "MVNSCAFFOLD_SHOW_BUILD_OUTPUT",
    "MVNSCAFFOLD_SKIP_INSTALL",
    "MVNSCAFFOLD_BUILD_COMMAND",
    "MVNSCAFFOLD_BUILD_TIMEOUT",
    "MVNSCAFFOLD_REPOSITORY_URL",
    "MVNSCAFFOLD_HTTP_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestScaffoldConfig:
    @pytest.mark.unit
    def test_defaults(self):
        config = ScaffoldConfig()
        assert config.show_build_output is True
        assert config.skip_install is False
        assert config.build_command == ["mvn", "clean", "verify"]
        assert config.build_timeout == 1800
        assert config.repository_url == DEFAULT_REPOSITORY_URL
        assert config.http_timeout == 30

    @pytest.mark.unit
    def test_build_timeout_lower_bound(self):
        with pytest.raises(ValidationError):
            ScaffoldConfig(build_timeout=10)

    @pytest.mark.unit
    def test_http_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScaffoldConfig(http_timeout=0)

    @pytest.mark.unit
    def test_build_command_default_not_shared(self):
        a = ScaffoldConfig()
        a.build_command.append("-o")
        assert ScaffoldConfig().build_command == ["mvn", "clean", "verify"]

    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        config = ScaffoldConfig(skip_install=True, build_command=["mvn", "install"], http_timeout=5)
        path = config.save(tmp_path / "nested" / "mvnscaffold.json")
        assert path.exists()
        assert ScaffoldConfig.load(path) == config

    @pytest.mark.unit
    def test_load_rejects_invalid(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text('{"build_timeout": 1}', encoding="utf-8")
        with pytest.raises(ValidationError):
            ScaffoldConfig.load(path)


class TestFromEnv:
    @pytest.mark.unit
    def test_without_variables(self, clean_env):
        assert ScaffoldConfig.from_env() == ScaffoldConfig()

    @pytest.mark.unit
    def test_all_variables(self, clean_env):
        clean_env.setenv("MVNSCAFFOLD_SHOW_BUILD_OUTPUT", "false")
        clean_env.setenv("MVNSCAFFOLD_SKIP_INSTALL", "yes")
        clean_env.setenv("MVNSCAFFOLD_BUILD_COMMAND", "mvn -B clean install")
        clean_env.setenv("MVNSCAFFOLD_BUILD_TIMEOUT", "600")
        clean_env.setenv("MVNSCAFFOLD_REPOSITORY_URL", "https://repo.example.com/maven2")
        clean_env.setenv("MVNSCAFFOLD_HTTP_TIMEOUT", "3")

        config = ScaffoldConfig.from_env()

        assert config.show_build_output is False
        assert config.skip_install is True
        assert config.build_command == ["mvn", "-B", "clean", "install"]
        assert config.build_timeout == 600
        assert config.repository_url == "https://repo.example.com/maven2"
        assert config.http_timeout == 3

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [("1", True), ("on", True), ("TRUE", True), ("0", False), ("no", False)])
    def test_flag_values(self, clean_env, value: str, expected: bool):
        clean_env.setenv("MVNSCAFFOLD_SKIP_INSTALL", value)
        assert ScaffoldConfig.from_env().skip_install is expected
