"""Package list sources.

A backup directory holds one newline-delimited list per manager kind,
``packages.<kind>``. System packages were historically split over three
files (``packages.system``, ``packages.curated``, ``packages.dotfile-deps``);
all three feed the system kind, in that order.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.packages.model import PHASE_ORDER, PackageManagerKind, PackageSpec

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ConfigSourceMissing",
    "ListSource",
    "default_sources",
    "parse_list",
    "read_source",
]

DEFAULT_CONFIG_DIR = Path("config")

_EXTRA_FILES: dict[PackageManagerKind, tuple[str, ...]] = {
    PackageManagerKind.SYSTEM: ("packages.curated", "packages.dotfile-deps"),
}


@dataclass(frozen=True, slots=True)
class ListSource:
    """One list file feeding one manager kind."""

    kind: PackageManagerKind
    path: Path


@dataclass(frozen=True, slots=True)
class ConfigSourceMissing:
    """A list file is absent or has no entries. Nothing to do for it."""

    kind: PackageManagerKind
    path: Path

    @property
    def message(self) -> str:
        return f"no {self.kind} packages in {self.path.name}"


def default_sources(config_dir: Path) -> list[ListSource]:
    """All list files a backup may contain, in phase order."""
    sources: list[ListSource] = []
    for kind in PHASE_ORDER:
        sources.append(ListSource(kind=kind, path=config_dir / f"packages.{kind}"))
        for extra in _EXTRA_FILES.get(kind, ()):
            sources.append(ListSource(kind=kind, path=config_dir / extra))
    return sources


def parse_list(text: str) -> list[str]:
    """Entries of a list file.

    Blank lines and lines whose first non-blank character is ``#`` are
    dropped; surrounding whitespace (including CR from CRLF files) is removed.
    Duplicates are kept; deduplication is the planner's job.
    """
    entries: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        entries.append(stripped)
    return entries


def read_source(source: ListSource) -> Result[list[PackageSpec], ConfigSourceMissing]:
    """Read a list file into PackageSpecs.

    A missing, unreadable or entry-less file is ``ConfigSourceMissing``.
    """
    try:
        text = source.path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return Err(ConfigSourceMissing(kind=source.kind, path=source.path))

    names = parse_list(text)
    if not names:
        return Err(ConfigSourceMissing(kind=source.kind, path=source.path))

    return Ok([PackageSpec(name=name, kind=source.kind, source=source.path) for name in names])
