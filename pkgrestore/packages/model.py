"""Package model: manager kinds, specs, and install outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

__all__ = [
    "PHASE_ORDER",
    "FailureReason",
    "InstallResult",
    "InstallStatus",
    "PackageInstallFailure",
    "PackageManagerKind",
    "PackageSpec",
    "PartialPolicy",
    "PhaseGroup",
    "normalize_name",
]


class PhaseGroup(Enum):
    """Coarse ordering bucket for manager kinds.

    SYSTEM installs language runtimes that LANGUAGE managers need;
    STORE (app stores, casks, AUR) goes last.
    """

    SYSTEM = 0
    LANGUAGE = 1
    STORE = 2


class PackageManagerKind(Enum):
    """Which manager a package list is meant for."""

    SYSTEM = "system"
    CARGO = "cargo"
    PIP = "pip"
    NPM = "npm"
    BREW = "brew"
    CASK = "cask"
    MAS = "mas"
    AUR = "aur"

    def __str__(self) -> str:
        return self.value

    @property
    def group(self) -> PhaseGroup:
        if self is PackageManagerKind.SYSTEM:
            return PhaseGroup.SYSTEM
        if self in (PackageManagerKind.CARGO, PackageManagerKind.PIP, PackageManagerKind.NPM):
            return PhaseGroup.LANGUAGE
        return PhaseGroup.STORE

    @property
    def order(self) -> int:
        """Position in the fixed phase order."""
        return PHASE_ORDER.index(self)

    @property
    def translatable(self) -> bool:
        """Whether names of this kind go through the translation table."""
        return self is PackageManagerKind.SYSTEM

    @classmethod
    def parse(cls, value: str) -> PackageManagerKind | None:
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


PHASE_ORDER: tuple[PackageManagerKind, ...] = (
    PackageManagerKind.SYSTEM,
    PackageManagerKind.CARGO,
    PackageManagerKind.PIP,
    PackageManagerKind.NPM,
    PackageManagerKind.BREW,
    PackageManagerKind.CASK,
    PackageManagerKind.MAS,
    PackageManagerKind.AUR,
)


def normalize_name(name: str) -> str:
    """Dedupe key for a package identifier."""
    return name.strip().casefold()


@dataclass(frozen=True, slots=True)
class PackageSpec:
    """A package as written in a list file.

    Attributes:
        name: Identifier as first seen (whitespace-stripped).
        kind: Manager kind of the list it came from.
        source: List file path, None when built in code.
    """

    name: str
    kind: PackageManagerKind
    source: Path | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Package name cannot be empty")

    @property
    def key(self) -> tuple[PackageManagerKind, str]:
        return (self.kind, normalize_name(self.name))


class PartialPolicy(Enum):
    """How to judge an abstract package that expands to several concrete ones.

    ALL: failed if any concrete install failed.
    ANY: failed only if every concrete install failed.
    """

    ALL = "all"
    ANY = "any"

    def __str__(self) -> str:
        return self.value


class InstallStatus(Enum):
    INSTALLED = "installed"
    ALREADY_PRESENT = "already-present"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class FailureReason(Enum):
    """Why a package did not install."""

    EXIT = auto()  # installer exited non-zero
    TIMEOUT = auto()
    TOOL_MISSING = auto()  # manager executable not on PATH
    BOOTSTRAP = auto()  # manager could not be installed
    UNSUPPORTED = auto()  # no manager for this kind on this platform

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class PackageInstallFailure:
    package: str
    reason: FailureReason
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.reason}: {self.detail}"
        return str(self.reason)


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Outcome of installing one concrete package."""

    package: str
    status: InstallStatus
    failure: PackageInstallFailure | None = None

    @property
    def ok(self) -> bool:
        return self.status != InstallStatus.FAILED

    @classmethod
    def installed(cls, package: str) -> InstallResult:
        return cls(package=package, status=InstallStatus.INSTALLED)

    @classmethod
    def present(cls, package: str) -> InstallResult:
        return cls(package=package, status=InstallStatus.ALREADY_PRESENT)

    @classmethod
    def failed(cls, package: str, reason: FailureReason, detail: str = "") -> InstallResult:
        return cls(
            package=package,
            status=InstallStatus.FAILED,
            failure=PackageInstallFailure(package=package, reason=reason, detail=detail),
        )
