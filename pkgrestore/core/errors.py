"""Exit codes for the pkgrestore CLI.

Package install failures never change the exit code: a run that finished
with failed packages still exits OK and lists them in its summary. Only the
conditions below stop a run.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable."""

    OK = 0
    USER_ERROR = 1
    PLATFORM_ERROR = 2  # host is not wsl, mac or arch
    BOOTSTRAP_ERROR = 3  # system package manager missing and not installable
    CONFIG_ERROR = 4  # restore.toml unreadable or invalid
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
