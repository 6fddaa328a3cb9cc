from __future__ import annotations

from pathlib import Path

import typer

from pkgrestore.cli.commands._helpers import exit_on_error
from pkgrestore.cli.context import CLIContext, build_context
from pkgrestore.output.console import Style
from pkgrestore.packages.planner import InstallPlan
from pkgrestore.packages.sources import DEFAULT_CONFIG_DIR
from pkgrestore.packages.translate import TranslationTable
from pkgrestore.services.restore import RestoreService


def plan(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Backup directory holding the packages.* lists.",
    ),
) -> None:
    """Show what a restore would install, without running anything."""
    ctx = build_context(config_dir)

    service = RestoreService(
        platform=ctx.platform,
        config=ctx.config,
        config_dir=ctx.config_dir,
        console=ctx.console,
    )
    table = exit_on_error(service.translations(), ctx)
    print_plan(ctx, service.plan(), table)


def print_plan(ctx: CLIContext, install_plan: InstallPlan, table: TranslationTable) -> None:
    console = ctx.console
    console.print(f"platform: {ctx.platform}", Style.DIM)
    console.print(f"config: {ctx.config_dir}", Style.DIM)

    for missing in install_plan.missing:
        console.print(missing.message, Style.DIM)

    if install_plan.is_empty:
        console.warning("Nothing to restore")
        return

    for phase in install_plan.phases:
        console.header(f"{phase.kind} ({len(phase)})")
        for spec in phase.packages:
            if not spec.kind.translatable:
                console.print(spec.name)
                continue
            concrete = table.translate(ctx.platform, spec.name)
            if not concrete:
                console.print(f"{spec.name} (not needed on {ctx.platform})", Style.DIM)
            elif concrete == [spec.name]:
                console.print(spec.name)
            else:
                console.print(f"{spec.name} -> {' '.join(concrete)}")

    console.newline()
    console.info(f"{install_plan.total} package(s) in {len(install_plan.phases)} phase(s)")
