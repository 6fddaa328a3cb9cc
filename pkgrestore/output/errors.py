"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pkgrestore.core.config import ConfigError
from pkgrestore.core.errors import ErrorCode
from pkgrestore.output.console import Style
from pkgrestore.packages.bootstrap import BootstrapFailure
from pkgrestore.packages.report import ReportWriteError
from pkgrestore.platform.detection import UnsupportedPlatform

if TYPE_CHECKING:
    from pkgrestore.output.console import ConsoleProtocol
    from pkgrestore.services.restore_errors import RestoreError

__all__ = ["print_restore_error", "restore_error_exit_code"]


def print_restore_error(error: RestoreError, console: ConsoleProtocol) -> None:
    """Print a fatal restore error to console with appropriate formatting."""
    match error:
        case UnsupportedPlatform(system=system, message=message, hint=hint):
            console.error(f"{message}: {system}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case BootstrapFailure(kind=kind, message=message, hint=hint):
            console.error(f"Cannot set up the {kind} package manager: {message}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case ConfigError(message=message, path=path, hint=hint):
            where = f" ({path})" if path is not None else ""
            console.error(f"{message}{where}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case ReportWriteError(path=path, message=message):
            console.error(f"{message} ({path})")


def restore_error_exit_code(error: RestoreError) -> int:
    """Get exit code for a fatal restore error."""
    match error:
        case UnsupportedPlatform():
            return int(ErrorCode.PLATFORM_ERROR)
        case BootstrapFailure():
            return int(ErrorCode.BOOTSTRAP_ERROR)
        case ConfigError():
            return int(ErrorCode.CONFIG_ERROR)
        case ReportWriteError():
            return int(ErrorCode.IO_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.USER_ERROR)
