"""Host capability snapshots.

Which package managers a run can use depends on what is on PATH, and that
changes while the run is going: the system phase may install ``npm`` or
``pip3``, a bootstrap may install ``cargo`` under ``~/.cargo/bin``. Instead of
sourcing shell profiles into the current process, the executor takes an
immutable ``Capabilities`` snapshot at defined points and hands its PATH to
every child process explicitly.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

__all__ = [
    "TRACKED_EXECUTABLES",
    "Capabilities",
    "CapabilityProbe",
    "HostCapabilityProbe",
    "extra_path_dirs",
    "probe",
    "refreshed_path",
]

TRACKED_EXECUTABLES: tuple[str, ...] = (
    "sudo",
    "apt-get",
    "dpkg-query",
    "pacman",
    "yay",
    "paru",
    "git",
    "makepkg",
    "brew",
    "mas",
    "cargo",
    "pip3",
    "npm",
    "curl",
)


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Executables found on a given search path at one point in time."""

    path: str
    executables: frozenset[str]

    def has(self, name: str) -> bool:
        return name in self.executables

    def first(self, *names: str) -> str | None:
        """Return the first of ``names`` that is available."""
        for name in names:
            if name in self.executables:
                return name
        return None

    def env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Child-process environment: ``base`` (default os.environ) with this PATH."""
        env = dict(os.environ if base is None else base)
        env["PATH"] = self.path
        return env


def extra_path_dirs(home: Path) -> list[Path]:
    """Directories installers drop binaries into that may not be on PATH yet.

    rustup installs into ~/.cargo/bin, ``pip --user`` into ~/.local/bin and
    Homebrew into /opt/homebrew/bin (Apple silicon) or /usr/local/bin.
    """
    return [
        home / ".cargo" / "bin",
        home / ".local" / "bin",
        Path("/opt/homebrew/bin"),
        Path("/usr/local/bin"),
    ]


def refreshed_path(base_path: str, candidates: Iterable[Path]) -> str:
    """Prepend existing candidate dirs to ``base_path``, skipping ones already on it."""
    entries = [p for p in base_path.split(os.pathsep) if p]
    present = set(entries)
    prefix: list[str] = []
    for candidate in candidates:
        text = str(candidate)
        if text in present or not candidate.is_dir():
            continue
        prefix.append(text)
        present.add(text)
    return os.pathsep.join([*prefix, *entries])


def probe(path: str, names: Iterable[str] = TRACKED_EXECUTABLES) -> Capabilities:
    """Snapshot which of ``names`` resolve on ``path``."""
    found = frozenset(name for name in names if shutil.which(name, path=path))
    return Capabilities(path=path, executables=found)


class CapabilityProbe(Protocol):
    """Source of capability snapshots; re-queried by the executor."""

    def snapshot(self) -> Capabilities: ...


class HostCapabilityProbe:
    """Probe the real host: PATH from the environment plus installer dirs."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
        names: Iterable[str] = TRACKED_EXECUTABLES,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._home = home
        self._names = tuple(names)

    def snapshot(self) -> Capabilities:
        home = self._home
        if home is None:
            home_env = self._environ.get("HOME")
            home = Path(home_env) if home_env else Path.home()
        base = self._environ.get("PATH", os.defpath)
        path = refreshed_path(base, extra_path_dirs(home))
        return probe(path, self._names)
