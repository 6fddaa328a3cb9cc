"""Platform stores: Homebrew casks, the Mac App Store, and the AUR."""

from __future__ import annotations

from pkgrestore.packages.adapters.base import ListingAdapter, PackageManagerAdapter
from pkgrestore.packages.model import PackageManagerKind, normalize_name

__all__ = ["AurAdapter", "CaskAdapter", "MasAdapter", "mas_app_id"]


def mas_app_id(entry: str) -> str:
    """App id from a mas list entry.

    Backups store ``mas list`` lines verbatim ("497799835  Xcode  (15.0)");
    only the leading id is needed to install.
    """
    parts = entry.split()
    return parts[0] if parts else entry


class CaskAdapter(ListingAdapter):
    kind = PackageManagerKind.CASK
    tools = ("brew",)

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", "--cask", name]

    def list_command(self) -> list[str]:
        return ["brew", "list", "--cask", "-1"]

    def parse_listing(self, output: str) -> set[str]:
        return {line.strip() for line in output.splitlines() if line.strip()}

    def listing_key(self, name: str) -> str:
        return normalize_name(name.rsplit("/", 1)[-1])


class MasAdapter(ListingAdapter):
    kind = PackageManagerKind.MAS
    tools = ("mas",)

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", mas_app_id(name)]

    def list_command(self) -> list[str]:
        return ["mas", "list"]

    def parse_listing(self, output: str) -> set[str]:
        return {mas_app_id(line) for line in output.splitlines() if line.strip()}

    def listing_key(self, name: str) -> str:
        return normalize_name(mas_app_id(name))


class AurAdapter(PackageManagerAdapter):
    """AUR packages through yay or paru (whichever is present, yay first)."""

    kind = PackageManagerKind.AUR
    tools = ("yay", "paru")

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "-S", "--needed", "--noconfirm", name]

    def presence_command(self, name: str) -> list[str] | None:
        return ["pacman", "-Qi", name]
