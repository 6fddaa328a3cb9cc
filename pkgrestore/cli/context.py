from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from pkgrestore.core.config import CONFIG_FILENAME, RestoreConfig, load_config_or_default
from pkgrestore.core.errors import ErrorCode
from pkgrestore.core.result import Err
from pkgrestore.output.console import ConsoleProtocol, RichConsole
from pkgrestore.output.errors import print_restore_error, restore_error_exit_code
from pkgrestore.platform.detection import Platform, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    platform: Platform
    config: RestoreConfig
    config_dir: Path
    console: ConsoleProtocol


def detect_platform(console: ConsoleProtocol) -> Platform:
    """Detected platform, or exit with PLATFORM_ERROR before anything runs."""
    result = detect()
    if isinstance(result, Err):
        print_restore_error(result.error, console)
        raise typer.Exit(code=restore_error_exit_code(result.error))
    return result.value


def build_context(config_dir: Path) -> CLIContext:
    console = RichConsole()
    platform = detect_platform(console)

    if not config_dir.is_dir():
        console.error(f"Config directory not found: {config_dir}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config_or_default(config_dir / CONFIG_FILENAME)
    if isinstance(config_result, Err):
        print_restore_error(config_result.error, console)
        raise typer.Exit(code=restore_error_exit_code(config_result.error))

    return CLIContext(
        platform=platform,
        config=config_result.value,
        config_dir=config_dir,
        console=console,
    )
