"""Cross-platform package name translation.

Structure mirrors translations.toml:

    [translations.nodejs]
    wsl = ["nodejs", "npm"]
    mac = "node"

``translate`` is total: a name without a rule for the platform resolves to
itself. Adding a platform or a concept is an edit to the data file (or to the
user's restore.toml), never to this module.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.core.structured import as_str_dict, as_str_list, get_table
from pkgrestore.packages.model import normalize_name
from pkgrestore.platform.detection import Platform

__all__ = [
    "TranslationError",
    "TranslationRule",
    "TranslationTable",
    "default_translations_path",
    "load_translations",
    "parse_rules",
]


@dataclass(frozen=True, slots=True)
class TranslationRule:
    """(platform, abstract name) -> concrete package names."""

    platform: Platform
    name: str
    packages: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TranslationError:
    message: str
    path: Path | None = None


class TranslationTable:
    """Lookup table built from TranslationRules.

    Later rules for the same (platform, name) replace earlier ones, which is
    how user rules override the shipped ones.
    """

    def __init__(self, rules: Iterable[TranslationRule] = ()) -> None:
        self._rules: dict[tuple[Platform, str], tuple[str, ...]] = {}
        for rule in rules:
            self._rules[(rule.platform, normalize_name(rule.name))] = rule.packages

    def __len__(self) -> int:
        return len(self._rules)

    def rules(self) -> list[TranslationRule]:
        return [
            TranslationRule(platform=platform, name=name, packages=packages)
            for (platform, name), packages in self._rules.items()
        ]

    def translate(self, platform: Platform, name: str) -> list[str]:
        """Concrete packages for ``name`` on ``platform``.

        Returns ``[name]`` when no rule applies. May return an empty list
        when a rule says the concept needs nothing on this platform.
        """
        packages = self._rules.get((platform, normalize_name(name)))
        if packages is None:
            return [name.strip()]
        return list(packages)

    def merged(self, other: Iterable[TranslationRule]) -> TranslationTable:
        """New table with ``other`` layered on top of this one."""
        return TranslationTable([*self.rules(), *other])


def parse_rules(
    data: Mapping[str, object], *, path: Path | None = None
) -> Result[list[TranslationRule], TranslationError]:
    """Parse the ``[translations]`` table of a TOML document.

    Example:
        {"translations": {"nodejs": {"mac": "node"}}}
        -> [TranslationRule(Platform.MAC, "nodejs", ("node",))]
    """
    section = get_table(data, "translations")
    if section is None:
        if "translations" in data:
            return Err(TranslationError("[translations] must be a table", path=path))
        return Ok([])

    rules: list[TranslationRule] = []
    for name, entry in section.items():
        entry_dict = as_str_dict(entry)
        if entry_dict is None:
            return Err(TranslationError(f"translations.{name} must be a table", path=path))
        for platform_key, value in entry_dict.items():
            platform = Platform.parse(platform_key)
            if platform is None:
                return Err(
                    TranslationError(
                        f"translations.{name}: unknown platform {platform_key!r}", path=path
                    )
                )
            packages = as_str_list(value)
            if packages is None:
                return Err(
                    TranslationError(
                        f"translations.{name}.{platform_key} must be a string or list of strings",
                        path=path,
                    )
                )
            rules.append(TranslationRule(platform=platform, name=name, packages=tuple(packages)))
    return Ok(rules)


def default_translations_path() -> Path:
    # pkgrestore/packages/translate.py -> pkgrestore/data/translations.toml
    return Path(__file__).parent.parent / "data" / "translations.toml"


def load_translations(path: Path | None = None) -> Result[TranslationTable, TranslationError]:
    """Load a translation table from TOML (default: the shipped table)."""
    if path is None:
        path = default_translations_path()

    try:
        data: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(TranslationError(f"Translation table not found: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(TranslationError(f"Error reading translations: {e}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(TranslationError(f"Invalid TOML syntax: {e}", path=path))

    table = as_str_dict(data)
    if table is None:
        return Err(TranslationError("Translation file root must be a table", path=path))

    return parse_rules(table, path=path).map(TranslationTable)
