"""Language package managers: cargo, pip, npm."""

from __future__ import annotations

import re

from pkgrestore.packages.adapters.base import ListingAdapter, PackageManagerAdapter
from pkgrestore.packages.model import PackageManagerKind, normalize_name

__all__ = ["CargoAdapter", "NpmAdapter", "PipAdapter", "npm_base_name", "pip_base_name"]

_PIP_SPEC_SPLIT = re.compile(r"[\s\[=<>!~;@]")


def pip_base_name(name: str) -> str:
    """Distribution name without extras or version specifiers.

    Example: "black[jupyter]>=23.1" -> "black"
    """
    return _PIP_SPEC_SPLIT.split(name.strip(), maxsplit=1)[0]


def npm_base_name(name: str) -> str:
    """Package name without a version or tag.

    Example: "@angular/cli@17" -> "@angular/cli", "typescript@5" -> "typescript"
    """
    name = name.strip()
    if name.startswith("@"):
        scope, _, rest = name[1:].partition("/")
        if not rest:
            return name
        return f"@{scope}/{rest.split('@', 1)[0]}"
    return name.split("@", 1)[0]


class CargoAdapter(ListingAdapter):
    kind = PackageManagerKind.CARGO
    tools = ("cargo",)

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", name]

    def list_command(self) -> list[str]:
        return ["cargo", "install", "--list"]

    def parse_listing(self, output: str) -> set[str]:
        # "ripgrep v14.1.0:" headers, binaries indented beneath.
        names: set[str] = set()
        for line in output.splitlines():
            if not line.strip() or line[0].isspace():
                continue
            names.add(line.split()[0])
        return names


class PipAdapter(PackageManagerAdapter):
    kind = PackageManagerKind.PIP
    tools = ("pip3",)

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", "--user", name]

    def presence_command(self, name: str) -> list[str] | None:
        return ["pip3", "show", "--quiet", pip_base_name(name)]


class NpmAdapter(ListingAdapter):
    kind = PackageManagerKind.NPM
    tools = ("npm",)

    def install_command(self, name: str, tool: str) -> list[str]:
        return [tool, "install", "-g", name]

    def list_command(self) -> list[str]:
        return ["npm", "ls", "-g", "--depth=0", "--parseable"]

    def parse_listing(self, output: str) -> set[str]:
        # First line is the global prefix itself (e.g. /usr/lib); skip it.
        names: set[str] = set()
        for line in output.splitlines():
            _, sep, tail = line.strip().rpartition("node_modules/")
            if sep and tail:
                names.add(tail)
        return names

    def listing_key(self, name: str) -> str:
        return normalize_name(npm_base_name(name))
