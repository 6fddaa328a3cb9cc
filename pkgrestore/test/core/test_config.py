"""Tests for pkgrestore.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgrestore.core.config import (
    ConfigError,
    RestoreConfig,
    load_config,
    load_config_or_default,
)
from pkgrestore.core.result import Err, Ok
from pkgrestore.packages.model import PackageManagerKind, PartialPolicy
from pkgrestore.platform.detection import Platform


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "restore.toml"
    path.write_text(content, encoding="utf-8")
    return path


class TestRestoreConfigDefaults:
    def test_defaults(self) -> None:
        config = RestoreConfig()
        assert config.timeout == 300.0
        assert config.bootstrap_timeout == 1800.0
        assert config.partial_policy is PartialPolicy.ALL
        assert config.refresh_index is True
        assert config.sudo is True
        assert config.exclude == {PackageManagerKind.NPM: ("lib",)}
        assert config.translations == ()

    def test_frozen(self) -> None:
        config = RestoreConfig()
        with pytest.raises(AttributeError):
            config.timeout = 1.0  # type: ignore[misc]


class TestFromDict:
    def test_empty_mapping_gives_defaults(self) -> None:
        assert RestoreConfig.from_dict({}) == RestoreConfig()

    def test_restore_section(self) -> None:
        config = RestoreConfig.from_dict(
            {
                "restore": {
                    "timeout": 60,
                    "bootstrap_timeout": 600.5,
                    "partial_policy": "ANY",
                    "refresh_index": False,
                    "sudo": False,
                }
            }
        )
        assert config.timeout == 60.0
        assert config.bootstrap_timeout == 600.5
        assert config.partial_policy is PartialPolicy.ANY
        assert config.refresh_index is False
        assert config.sudo is False

    @pytest.mark.parametrize("value", [0, -5, "300", True])
    def test_rejects_bad_timeout(self, value: object) -> None:
        with pytest.raises(ValueError, match="restore.timeout"):
            RestoreConfig.from_dict({"restore": {"timeout": value}})

    def test_rejects_unknown_policy(self) -> None:
        with pytest.raises(ValueError, match="partial_policy"):
            RestoreConfig.from_dict({"restore": {"partial_policy": "most"}})

    def test_rejects_non_bool_flag(self) -> None:
        with pytest.raises(ValueError, match="refresh_index"):
            RestoreConfig.from_dict({"restore": {"refresh_index": "yes"}})

    def test_exclude_overrides_per_kind(self) -> None:
        config = RestoreConfig.from_dict({"exclude": {"pip": ["pip", "setuptools"]}})
        assert config.exclude[PackageManagerKind.PIP] == ("pip", "setuptools")
        # Kinds not named keep their default.
        assert config.exclude[PackageManagerKind.NPM] == ("lib",)

    def test_exclude_can_clear_default(self) -> None:
        config = RestoreConfig.from_dict({"exclude": {"npm": []}})
        assert config.exclude[PackageManagerKind.NPM] == ()

    def test_exclude_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="unknown package manager kind"):
            RestoreConfig.from_dict({"exclude": {"snap": ["x"]}})

    def test_translations(self) -> None:
        config = RestoreConfig.from_dict({"translations": {"nodejs": {"mac": ["node", "npm"]}}})
        assert len(config.translations) == 1
        rule = config.translations[0]
        assert rule.platform is Platform.MAC
        assert rule.name == "nodejs"
        assert rule.packages == ("node", "npm")

    def test_translations_reject_unknown_platform(self) -> None:
        with pytest.raises(ValueError, match="unknown platform"):
            RestoreConfig.from_dict({"translations": {"nodejs": {"windows": "node"}}})


class TestWithOverrides:
    def test_none_keeps_values(self) -> None:
        config = RestoreConfig(timeout=10.0)
        assert config.with_overrides() == config

    def test_applies_values(self) -> None:
        config = RestoreConfig().with_overrides(
            timeout=5.0, partial_policy=PartialPolicy.ANY, refresh_index=False
        )
        assert config.timeout == 5.0
        assert config.partial_policy is PartialPolicy.ANY
        assert config.refresh_index is False


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            """
[restore]
timeout = 120
partial_policy = "any"

[exclude]
npm = ["lib", "corepack"]

[translations.fd]
wsl = "fd-find"
""",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        config = result.value
        assert config.timeout == 120.0
        assert config.partial_policy is PartialPolicy.ANY
        assert config.exclude[PackageManagerKind.NPM] == ("lib", "corepack")
        assert config.translations[0].packages == ("fd-find",)

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "restore.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "[restore\ntimeout = ")
        result = load_config(path)
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[restore]\npartial_policy = "some"\n')
        result = load_config(path)
        assert isinstance(result, Err)
        assert "partial_policy" in result.error.message
        assert result.error.hint is not None


class TestLoadConfigOrDefault:
    def test_absent_file_gives_defaults(self, tmp_path: Path) -> None:
        result = load_config_or_default(tmp_path / "restore.toml")
        assert result == Ok(RestoreConfig())

    def test_present_invalid_file_is_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "[restore]\ntimeout = -1\n")
        assert isinstance(load_config_or_default(path), Err)
