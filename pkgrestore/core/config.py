"""Typed configuration loading and access.

``restore.toml`` lives next to the package lists and is optional. Every key
has a default; a missing file means all defaults.

    [restore]
    timeout = 300
    bootstrap_timeout = 1800
    partial_policy = "all"
    refresh_index = true
    sudo = true

    [exclude]
    npm = ["lib"]

    [translations.nodejs]
    mac = ["node", "npm"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from pkgrestore.packages.adapters.base import DEFAULT_INSTALL_TIMEOUT
from pkgrestore.packages.bootstrap import DEFAULT_BOOTSTRAP_TIMEOUT
from pkgrestore.packages.model import PackageManagerKind, PartialPolicy
from pkgrestore.packages.translate import TranslationRule, parse_rules

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, as_str_list, get_bool, get_number, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "RestoreConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "restore.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


def _default_exclude() -> dict[PackageManagerKind, tuple[str, ...]]:
    # "lib" is the npm global prefix dir, picked up when lists came from `npm ls -g`
    return {PackageManagerKind.NPM: ("lib",)}


def _no_rules() -> tuple[TranslationRule, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class RestoreConfig:
    """Settings for one restore run.

    Attributes:
        timeout: Seconds allowed per package install.
        bootstrap_timeout: Seconds allowed per bootstrap step.
        partial_policy: How multi-package translations are judged.
        refresh_index: Refresh the system package index before its phase.
        sudo: Prefix privileged commands with sudo (ignored when root).
        exclude: Names dropped from the plan, per kind.
        translations: Extra rules layered over the shipped table.
    """

    timeout: float = DEFAULT_INSTALL_TIMEOUT
    bootstrap_timeout: float = DEFAULT_BOOTSTRAP_TIMEOUT
    partial_policy: PartialPolicy = PartialPolicy.ALL
    refresh_index: bool = True
    sudo: bool = True
    exclude: Mapping[PackageManagerKind, tuple[str, ...]] = field(default_factory=_default_exclude)
    translations: tuple[TranslationRule, ...] = field(default_factory=_no_rules)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, path: Path | None = None) -> RestoreConfig:
        """Create RestoreConfig from a mapping (parsed TOML).

        Raises:
            ValueError: A key holds a value of the wrong type or range.
        """
        restore: StrDict = get_table(data, "restore") or {}

        timeout = _positive(restore, "timeout", DEFAULT_INSTALL_TIMEOUT)
        bootstrap_timeout = _positive(restore, "bootstrap_timeout", DEFAULT_BOOTSTRAP_TIMEOUT)

        policy = PartialPolicy.ALL
        policy_name = get_str(restore, "partial_policy")
        if policy_name is not None:
            try:
                policy = PartialPolicy(policy_name.lower())
            except ValueError:
                raise ValueError(
                    f"restore.partial_policy must be 'all' or 'any', got {policy_name!r}"
                ) from None

        rules = parse_rules(data, path=path)
        if isinstance(rules, Err):
            raise ValueError(rules.error.message)

        return cls(
            timeout=timeout,
            bootstrap_timeout=bootstrap_timeout,
            partial_policy=policy,
            refresh_index=_flag(restore, "refresh_index", True),
            sudo=_flag(restore, "sudo", True),
            exclude=_parse_exclude(data),
            translations=tuple(rules.value),
        )

    def with_overrides(
        self,
        *,
        timeout: float | None = None,
        partial_policy: PartialPolicy | None = None,
        refresh_index: bool | None = None,
    ) -> RestoreConfig:
        """Copy with command-line values applied; None keeps the file value."""
        return replace(
            self,
            timeout=self.timeout if timeout is None else timeout,
            partial_policy=self.partial_policy if partial_policy is None else partial_policy,
            refresh_index=self.refresh_index if refresh_index is None else refresh_index,
        )


def _positive(table: Mapping[str, object], key: str, default: float) -> float:
    if key not in table:
        return default
    value = get_number(table, key)
    if value is None or value <= 0:
        raise ValueError(f"restore.{key} must be a positive number of seconds")
    return value


def _flag(table: Mapping[str, object], key: str, default: bool) -> bool:
    if key not in table:
        return default
    value = get_bool(table, key)
    if value is None:
        raise ValueError(f"restore.{key} must be true or false")
    return value


def _parse_exclude(data: Mapping[str, object]) -> dict[PackageManagerKind, tuple[str, ...]]:
    """Per-kind exclusions; kinds given in the file replace the defaults for that kind."""
    exclude = _default_exclude()
    if "exclude" not in data:
        return exclude

    section = get_table(data, "exclude")
    if section is None:
        raise ValueError("[exclude] must be a table")

    for key, value in section.items():
        kind = PackageManagerKind.parse(key)
        if kind is None:
            raise ValueError(f"exclude.{key}: unknown package manager kind")
        names = as_str_list(value)
        if names is None:
            raise ValueError(f"exclude.{key} must be a list of package names")
        exclude[kind] = tuple(names)
    return exclude


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[RestoreConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to restore.toml

    Returns:
        Ok(RestoreConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(RestoreConfig.from_dict(result.value, path=path))
    except ValueError as e:
        return Err(
            ConfigError(
                f"Invalid config: {e}",
                path=path,
                hint=f"Fix or remove {path}",
            )
        )


def load_config_or_default(path: Path) -> Result[RestoreConfig, ConfigError]:
    """Like load_config, but a missing file yields the defaults.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(RestoreConfig())
    return load_config(path)
