"""Installation planning.

Turns list sources into ordered, deduplicated installation phases. The
planner only reads files; it never runs an installer, so everything here is
testable without faking subprocesses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

from pkgrestore.core.result import Err
from pkgrestore.packages.model import (
    PHASE_ORDER,
    PackageManagerKind,
    PackageSpec,
    normalize_name,
)
from pkgrestore.packages.sources import ConfigSourceMissing, ListSource, read_source

__all__ = [
    "InstallPlan",
    "InstallationPhase",
    "PhaseState",
    "build_phases",
    "plan",
]


class PhaseState(Enum):
    """Lifecycle of a phase during execution. There is no failed state."""

    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class InstallationPhase:
    """Packages installed through one manager kind, in install order."""

    kind: PackageManagerKind
    packages: tuple[PackageSpec, ...]

    def __len__(self) -> int:
        return len(self.packages)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.packages]


def _empty_missing() -> tuple[ConfigSourceMissing, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class InstallPlan:
    """Ordered phases plus the list files that had nothing to contribute."""

    phases: tuple[InstallationPhase, ...]
    missing: tuple[ConfigSourceMissing, ...] = field(default_factory=_empty_missing)

    @property
    def is_empty(self) -> bool:
        return not self.phases

    @property
    def total(self) -> int:
        return sum(len(p) for p in self.phases)

    @property
    def kinds(self) -> list[PackageManagerKind]:
        return [p.kind for p in self.phases]

    def phase(self, kind: PackageManagerKind) -> InstallationPhase | None:
        for p in self.phases:
            if p.kind == kind:
                return p
        return None


def build_phases(
    specs: Iterable[PackageSpec],
    *,
    exclude: Mapping[PackageManagerKind, Iterable[str]] | None = None,
) -> tuple[InstallationPhase, ...]:
    """Group specs by kind, dedupe, and order phases.

    The first occurrence of a (kind, normalized name) wins and keeps its
    position; later duplicates are dropped. Phases come out in PHASE_ORDER
    whatever order the specs arrive in. Kinds with no packages produce no
    phase.
    """
    excluded: set[tuple[PackageManagerKind, str]] = set()
    for kind, names in (exclude or {}).items():
        excluded.update((kind, normalize_name(n)) for n in names)

    seen: set[tuple[PackageManagerKind, str]] = set()
    buckets: dict[PackageManagerKind, list[PackageSpec]] = {}
    for spec in specs:
        key = spec.key
        if key in seen or key in excluded:
            continue
        seen.add(key)
        buckets.setdefault(spec.kind, []).append(spec)

    return tuple(
        InstallationPhase(kind=kind, packages=tuple(buckets[kind]))
        for kind in PHASE_ORDER
        if buckets.get(kind)
    )


def plan(
    sources: Iterable[ListSource],
    *,
    exclude: Mapping[PackageManagerKind, Iterable[str]] | None = None,
) -> InstallPlan:
    """Read every source and build the installation plan.

    Sources are read in the order given, which decides which spelling of a
    duplicate survives.
    """
    specs: list[PackageSpec] = []
    missing: list[ConfigSourceMissing] = []
    for source in sources:
        result = read_source(source)
        if isinstance(result, Err):
            missing.append(result.error)
            continue
        specs.extend(result.value)

    return InstallPlan(phases=build_phases(specs, exclude=exclude), missing=tuple(missing))
