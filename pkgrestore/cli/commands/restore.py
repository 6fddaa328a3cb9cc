from __future__ import annotations

from pathlib import Path

import typer

from pkgrestore.cli.commands._helpers import exit_on_error, parse_policy
from pkgrestore.cli.context import build_context
from pkgrestore.core.errors import ErrorCode
from pkgrestore.packages.report import write_json
from pkgrestore.packages.sources import DEFAULT_CONFIG_DIR
from pkgrestore.services.restore import RestoreService


def restore(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Backup directory holding the packages.* lists.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Seconds allowed per package install (default 300).",
    ),
    policy: str | None = typer.Option(
        None,
        "--policy",
        help="Multi-package names: 'all' must install, or 'any' is enough.",
    ),
    no_refresh: bool = typer.Option(
        False,
        "--no-refresh",
        help="Skip the package index refresh before the system phase.",
    ),
    json_report: Path | None = typer.Option(
        None,
        "--json-report",
        help="Also write the report as JSON to this file.",
    ),
) -> None:
    """Reinstall every package listed in a backup.

    Failed packages are listed in the summary; they do not change the exit code.
    """
    ctx = build_context(config_dir)

    if timeout is not None and timeout <= 0:
        ctx.console.error("--timeout must be a positive number of seconds")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = ctx.config.with_overrides(
        timeout=timeout,
        partial_policy=parse_policy(policy, ctx),
        refresh_index=False if no_refresh else None,
    )

    service = RestoreService(
        platform=ctx.platform,
        config=config,
        config_dir=ctx.config_dir,
        console=ctx.console,
    )
    report = exit_on_error(service.restore(), ctx)

    if json_report is not None:
        exit_on_error(write_json(report, json_report), ctx)
        ctx.console.print(f"report written to {json_report}")
