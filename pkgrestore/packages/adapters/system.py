"""Native package managers: apt (WSL), pacman (Arch), Homebrew formulae (macOS)."""

from __future__ import annotations

from pkgrestore.core.result import Err
from pkgrestore.packages.adapters.base import (
    DEFAULT_INSTALL_TIMEOUT,
    QUERY_TIMEOUT,
    ListingAdapter,
    PackageManagerAdapter,
)
from pkgrestore.packages.model import (
    FailureReason,
    InstallResult,
    PackageManagerKind,
    normalize_name,
)
from pkgrestore.platform.capabilities import Capabilities
from pkgrestore.platform.process import CommandRunner

__all__ = ["AptAdapter", "BrewAdapter", "PacmanAdapter"]

AUR_HELPERS = ("yay", "paru")


class AptAdapter(PackageManagerAdapter):
    kind = PackageManagerKind.SYSTEM
    tools = ("apt-get",)
    privileged = True

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", "-y", name]

    def refresh_index_command(self) -> list[str] | None:
        return ["apt-get", "update"]

    def is_installed(self, name: str, caps: Capabilities) -> bool:
        # dpkg-query exits 0 for removed-but-configured packages too; check status.
        result = self._runner.run(
            ["dpkg-query", "-W", "-f=${Status}", name],
            timeout=QUERY_TIMEOUT,
            env=caps.env(),
        )
        if isinstance(result, Err):
            return False
        return "install ok installed" in result.value


class PacmanAdapter(PackageManagerAdapter):
    """pacman, falling back to an AUR helper for packages not in the repos."""

    kind = PackageManagerKind.SYSTEM
    tools = ("pacman",)
    privileged = True

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "-S", "--needed", "--noconfirm", name]

    def presence_command(self, name: str) -> list[str] | None:
        return ["pacman", "-Qi", name]

    def refresh_index_command(self) -> list[str] | None:
        return ["pacman", "-Syu", "--noconfirm"]

    def install(self, name: str, caps: Capabilities) -> InstallResult:
        result = super().install(name, caps)
        if result.failure is None or result.failure.reason is not FailureReason.EXIT:
            return result

        helper = caps.first(*AUR_HELPERS)
        if helper is None:
            return result

        # AUR helpers call sudo themselves and refuse to run as root.
        fallback = self._runner.run(
            [helper, "-S", "--needed", "--noconfirm", name],
            timeout=self._timeout,
            env=caps.env(),
        )
        if isinstance(fallback, Err):
            return result
        return InstallResult.installed(name)


class BrewAdapter(ListingAdapter):
    """Homebrew formulae. Serves the system kind on macOS and the brew kind."""

    kind = PackageManagerKind.BREW
    tools = ("brew",)

    def __init__(
        self,
        runner: CommandRunner,
        *,
        kind: PackageManagerKind = PackageManagerKind.BREW,
        timeout: float | None = DEFAULT_INSTALL_TIMEOUT,
        sudo: bool = True,
    ) -> None:
        super().__init__(runner, timeout=timeout, sudo=sudo)
        self.kind = kind

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", name]

    def refresh_index_command(self) -> list[str] | None:
        return ["brew", "update"]

    def list_command(self) -> list[str]:
        return ["brew", "list", "--formula", "-1"]

    def parse_listing(self, output: str) -> set[str]:
        return {line.strip() for line in output.splitlines() if line.strip()}

    def listing_key(self, name: str) -> str:
        # Tap-qualified names (owner/tap/formula) list as the bare formula.
        return normalize_name(name.rsplit("/", 1)[-1])
