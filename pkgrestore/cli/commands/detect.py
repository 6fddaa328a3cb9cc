from __future__ import annotations

from pkgrestore.cli.context import detect_platform
from pkgrestore.output.console import ConsoleProtocol, RichConsole, Style
from pkgrestore.packages.adapters.registry import AdapterRegistry
from pkgrestore.packages.model import PHASE_ORDER
from pkgrestore.platform.capabilities import CapabilityProbe, HostCapabilityProbe
from pkgrestore.platform.detection import Platform
from pkgrestore.platform.process import SubprocessRunner


def detect() -> None:
    """Show the detected platform and which package managers are available."""
    console = RichConsole()
    platform = detect_platform(console)
    print_capabilities(platform, HostCapabilityProbe(), console)


def print_capabilities(platform: Platform, probe: CapabilityProbe, console: ConsoleProtocol) -> None:
    caps = probe.snapshot()
    registry = AdapterRegistry.for_platform(platform, SubprocessRunner())

    console.print(f"platform: {platform}", Style.DIM)
    console.print(f"system manager: {platform.system_manager}", Style.DIM)

    console.header("Package managers")
    for kind in PHASE_ORDER:
        adapter = registry.get(kind)
        if adapter is None:
            console.print(f"{kind}: not supported on {platform}", Style.DIM)
        elif adapter.is_available(caps):
            console.success(f"{kind}: {adapter.tool(caps)}")
        else:
            console.warning(f"{kind}: {adapter.label} missing")

    console.header("Executables")
    console.print(", ".join(sorted(caps.executables)) or "(none)")
