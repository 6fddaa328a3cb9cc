"""Host platform detection.

A restore targets exactly one of three hosts: Ubuntu under WSL, macOS, or
Arch Linux. Detection is split into a probe that reads the environment and
a pure ``classify`` step so every branch can be tested without touching the
real machine.
"""

from __future__ import annotations

import os as _os
import sys as _sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pkgrestore.core.result import Err, Ok, Result

__all__ = [
    "Platform",
    "HostProbe",
    "UnsupportedPlatform",
    "classify",
    "detect",
    "probe_host",
]

_PROC_VERSION = Path("/proc/version")
_ARCH_RELEASE = Path("/etc/arch-release")


class Platform(Enum):
    """Supported restore targets."""

    WSL = "wsl"
    MAC = "mac"
    ARCH = "arch"

    def __str__(self) -> str:
        return self.value

    @property
    def system_manager(self) -> str:
        """Executable of the native package manager."""
        return {
            Platform.WSL: "apt-get",
            Platform.MAC: "brew",
            Platform.ARCH: "pacman",
        }[self]

    @classmethod
    def parse(cls, value: str) -> Platform | None:
        """Parse a platform name case-insensitively, or return None."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    """The host is none of wsl, mac or arch."""

    system: str
    message: str = "Unsupported platform"
    hint: str | None = "pkgrestore supports Ubuntu on WSL, macOS and Arch Linux"


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class HostProbe:
    """Raw signals used to classify the host.

    Attributes:
        system: ``sys.platform`` value (e.g. "linux", "darwin").
        environ: Process environment.
        proc_version: Contents of /proc/version, None if unreadable.
        arch_release: Whether /etc/arch-release exists.
    """

    system: str
    environ: Mapping[str, str] = field(default_factory=_empty_env)
    proc_version: str | None = None
    arch_release: bool = False


def _read_proc_version() -> str | None:
    try:
        return _PROC_VERSION.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def probe_host() -> HostProbe:
    """Collect detection signals from the running host."""
    system = _sys.platform.lower()
    is_linux = system.startswith("linux")
    return HostProbe(
        system=system,
        environ=dict(_os.environ),
        proc_version=_read_proc_version() if is_linux else None,
        arch_release=is_linux and _ARCH_RELEASE.exists(),
    )


def _is_wsl(probe: HostProbe) -> bool:
    if probe.environ.get("WSL_DISTRO_NAME"):
        return True
    version = (probe.proc_version or "").lower()
    return "microsoft" in version or "wsl" in version


def classify(probe: HostProbe) -> Result[Platform, UnsupportedPlatform]:
    """Map probe signals to a Platform.

    WSL is checked first since a WSL kernel is also a Linux kernel.
    """
    if probe.system.startswith("linux"):
        if _is_wsl(probe):
            return Ok(Platform.WSL)
        if probe.arch_release:
            return Ok(Platform.ARCH)
        return Err(UnsupportedPlatform(system=probe.system))
    if probe.system.startswith("darwin"):
        return Ok(Platform.MAC)
    return Err(UnsupportedPlatform(system=probe.system))


@lru_cache(maxsize=1)
def detect() -> Result[Platform, UnsupportedPlatform]:
    """Detect the running host's platform (cached for the process)."""
    return classify(probe_host())
