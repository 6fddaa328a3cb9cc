"""Base class for package manager adapters.

One adapter wraps one installer. Subclasses declare:
- kind / tools: which manager kind they serve and which executables provide it
- install_command(): argv to install a package by name
- optionally a presence check, either per package (``presence_command``) or
  from a full listing (``ListingAdapter``)

``install`` never raises. Every failure becomes an InstallResult.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pkgrestore.core.result import Err, Result
from pkgrestore.packages.model import (
    FailureReason,
    InstallResult,
    PackageManagerKind,
    normalize_name,
)
from pkgrestore.platform.capabilities import Capabilities
from pkgrestore.platform.process import CommandRunner, ProcessError

__all__ = [
    "DEFAULT_INSTALL_TIMEOUT",
    "DEFAULT_REFRESH_TIMEOUT",
    "QUERY_TIMEOUT",
    "ListingAdapter",
    "PackageManagerAdapter",
]

DEFAULT_INSTALL_TIMEOUT = 300.0
# `pacman -Syu` upgrades the whole system, so it gets bootstrap-sized time
DEFAULT_REFRESH_TIMEOUT = 1800.0
QUERY_TIMEOUT = 60.0


class PackageManagerAdapter(ABC):
    """Uniform install interface over one package manager.

    Attributes:
        kind: Manager kind this adapter installs.
        tools: Executables that provide the manager; the first found is used.
        privileged: Whether install/refresh commands need sudo.
    """

    kind: PackageManagerKind
    tools: tuple[str, ...]
    privileged: bool = False

    def __init__(
        self,
        runner: CommandRunner,
        *,
        timeout: float | None = DEFAULT_INSTALL_TIMEOUT,
        sudo: bool = True,
    ) -> None:
        self._runner = runner
        self._timeout = timeout
        self._sudo = sudo

    @property
    def label(self) -> str:
        return "/".join(self.tools)

    def tool(self, caps: Capabilities) -> str | None:
        return caps.first(*self.tools)

    def is_available(self, caps: Capabilities) -> bool:
        return self.tool(caps) is not None

    @abstractmethod
    def install_command(self, name: str, tool: str) -> list[str]:
        """Argv that installs ``name`` using ``tool``."""
        ...

    def presence_command(self, name: str) -> list[str] | None:
        """Argv that exits 0 iff ``name`` is installed, or None if unsupported."""
        return None

    def refresh_index_command(self) -> list[str] | None:
        """Argv that refreshes the package index, or None."""
        return None

    def is_installed(self, name: str, caps: Capabilities) -> bool:
        argv = self.presence_command(name)
        if argv is None:
            return False
        result = self._runner.run(argv, timeout=QUERY_TIMEOUT, env=caps.env())
        return not isinstance(result, Err)

    def refresh_index(
        self, caps: Capabilities, *, timeout: float | None = DEFAULT_REFRESH_TIMEOUT
    ) -> Result[str, ProcessError] | None:
        """Refresh the package index. None when the manager has no such step.

        Args:
            caps: Capability snapshot the command runs under.
            timeout: Seconds allowed; separate from the per-package install timeout.
        """
        argv = self.refresh_index_command()
        if argv is None:
            return None
        return self._run(argv, caps, timeout)

    def install(self, name: str, caps: Capabilities) -> InstallResult:
        """Install one concrete package.

        Already-present packages are reported without invoking the installer.
        """
        tool = self.tool(caps)
        if tool is None:
            return InstallResult.failed(name, FailureReason.TOOL_MISSING, f"{self.label} not found")

        if self.is_installed(name, caps):
            return InstallResult.present(name)

        result = self._run(self.install_command(name, tool), caps, self._timeout)
        if isinstance(result, Err):
            return self._failure(name, result.error)

        self._mark_installed(name)
        return InstallResult.installed(name)

    def _mark_installed(self, name: str) -> None:
        """Hook for adapters that cache presence information."""

    def _elevate(self, argv: list[str], caps: Capabilities) -> list[str]:
        if self.privileged and self._sudo and caps.has("sudo"):
            return ["sudo", *argv]
        return argv

    def _run(
        self, argv: list[str], caps: Capabilities, timeout: float | None
    ) -> Result[str, ProcessError]:
        return self._runner.run(
            self._elevate(argv, caps),
            timeout=timeout,
            env=caps.env(),
        )

    @staticmethod
    def _failure(name: str, error: ProcessError) -> InstallResult:
        if error.timed_out:
            return InstallResult.failed(name, FailureReason.TIMEOUT, str(error))
        return InstallResult.failed(name, FailureReason.EXIT, str(error))


class ListingAdapter(PackageManagerAdapter):
    """Adapter whose presence check lists everything installed at once.

    The listing is fetched on first use and updated as packages install, so
    a phase costs one listing call rather than one per package.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        timeout: float | None = DEFAULT_INSTALL_TIMEOUT,
        sudo: bool = True,
    ) -> None:
        super().__init__(runner, timeout=timeout, sudo=sudo)
        self._installed: set[str] | None = None

    @abstractmethod
    def list_command(self) -> list[str]: ...

    @abstractmethod
    def parse_listing(self, output: str) -> set[str]:
        """Installed package names from the listing output."""
        ...

    def listing_key(self, name: str) -> str:
        """Key under which ``name`` appears in the parsed listing."""
        return normalize_name(name)

    def is_installed(self, name: str, caps: Capabilities) -> bool:
        if self._installed is None:
            result = self._runner.run(self.list_command(), timeout=QUERY_TIMEOUT, env=caps.env())
            listing = self.parse_listing(_listing_output(result))
            self._installed = {normalize_name(n) for n in listing}
        return self.listing_key(name) in self._installed

    def _mark_installed(self, name: str) -> None:
        if self._installed is not None:
            self._installed.add(self.listing_key(name))


def _listing_output(result: Result[str, ProcessError]) -> str:
    """Listing text, including what a listing printed before exiting non-zero.

    ``npm ls -g`` exits 1 on any dependency problem but still prints every
    installed package.
    """
    if isinstance(result, Err):
        return result.error.stdout
    return result.value
