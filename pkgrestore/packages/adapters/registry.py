"""Adapter registry: which adapter serves each manager kind on a platform."""

from __future__ import annotations

from collections.abc import Iterable

from pkgrestore.packages.adapters.base import DEFAULT_INSTALL_TIMEOUT, PackageManagerAdapter
from pkgrestore.packages.adapters.language import CargoAdapter, NpmAdapter, PipAdapter
from pkgrestore.packages.adapters.store import AurAdapter, CaskAdapter, MasAdapter
from pkgrestore.packages.adapters.system import AptAdapter, BrewAdapter, PacmanAdapter
from pkgrestore.packages.model import FailureReason, InstallResult, PackageManagerKind
from pkgrestore.platform.capabilities import Capabilities
from pkgrestore.platform.detection import Platform
from pkgrestore.platform.process import CommandRunner

__all__ = ["AdapterRegistry"]


class AdapterRegistry:
    """Maps manager kinds to adapters.

    Kinds with no adapter (casks on Arch, AUR on macOS) are unsupported on
    that platform; installing through them yields a failed result.
    """

    def __init__(self, adapters: Iterable[PackageManagerAdapter]) -> None:
        self._adapters: dict[PackageManagerKind, PackageManagerAdapter] = {}
        for adapter in adapters:
            self._adapters[adapter.kind] = adapter

    @classmethod
    def for_platform(
        cls,
        platform: Platform,
        runner: CommandRunner,
        *,
        timeout: float | None = DEFAULT_INSTALL_TIMEOUT,
        sudo: bool = True,
    ) -> AdapterRegistry:
        """Standard adapters for ``platform``."""
        common: list[PackageManagerAdapter] = [
            CargoAdapter(runner, timeout=timeout, sudo=sudo),
            PipAdapter(runner, timeout=timeout, sudo=sudo),
            NpmAdapter(runner, timeout=timeout, sudo=sudo),
        ]
        match platform:
            case Platform.WSL:
                return cls([AptAdapter(runner, timeout=timeout, sudo=sudo), *common])
            case Platform.ARCH:
                return cls(
                    [
                        PacmanAdapter(runner, timeout=timeout, sudo=sudo),
                        *common,
                        AurAdapter(runner, timeout=timeout, sudo=sudo),
                    ]
                )
            case Platform.MAC:
                return cls(
                    [
                        BrewAdapter(
                            runner, kind=PackageManagerKind.SYSTEM, timeout=timeout, sudo=sudo
                        ),
                        *common,
                        BrewAdapter(runner, timeout=timeout, sudo=sudo),
                        CaskAdapter(runner, timeout=timeout, sudo=sudo),
                        MasAdapter(runner, timeout=timeout, sudo=sudo),
                    ]
                )

    def get(self, kind: PackageManagerKind) -> PackageManagerAdapter | None:
        return self._adapters.get(kind)

    def kinds(self) -> list[PackageManagerKind]:
        return list(self._adapters)

    def install(self, kind: PackageManagerKind, name: str, caps: Capabilities) -> InstallResult:
        """Install one concrete package through the adapter for ``kind``."""
        adapter = self._adapters.get(kind)
        if adapter is None:
            return InstallResult.failed(name, FailureReason.UNSUPPORTED, f"no {kind} manager")
        return adapter.install(name, caps)
