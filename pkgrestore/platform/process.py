"""Subprocess execution with Result-based error handling.

Every installer, presence check and bootstrap step goes through a
``CommandRunner``. The default runner wraps ``subprocess.run``; tests swap in
a fake that returns canned results.

Usage:
    runner = SubprocessRunner()
    match runner.run(["cargo", "install", "ripgrep"], timeout=300):
        case Ok(stdout):
            ...
        case Err(error) if error.timed_out:
            ...
"""

from __future__ import annotations

import os
import signal
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pkgrestore.core.result import Err, Ok, Result

__all__ = ["CommandRunner", "ProcessError", "SubprocessRunner"]

# Seconds a timed-out process group gets between SIGTERM and SIGKILL
TERMINATE_GRACE = 5.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not run, exited non-zero, or timed out.

    Attributes:
        command: The argv that was executed.
        returncode: Exit code, or -1 if the process never finished.
        stdout: Captured standard output (may be empty).
        stderr: Captured standard error, or the OS error text.
        timed_out: True if the timeout expired before the process exited.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        return f"{cmd_str} failed (exit {self.returncode})"


class CommandRunner(Protocol):
    """Runs one command and reports its outcome as a Result."""

    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Result[str, ProcessError]:
        """Run ``args``; Ok(stdout) on exit 0, Err(ProcessError) otherwise."""
        ...


class SubprocessRunner:
    """CommandRunner backed by subprocess.Popen.

    Output is captured, so installers run non-interactively; stdin is closed
    so a prompt fails fast instead of hanging until the timeout. Output is
    decoded as UTF-8 with replacement, since installers print in the host
    locale.

    Each command starts its own session. On timeout the whole process group
    is stopped, not just the direct child: ``sudo apt-get`` or ``cargo``
    would otherwise leave the real installer running and holding its lock.
    """

    def run(
        self,
        args: list[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Result[str, ProcessError]:
        try:
            proc = subprocess.Popen(
                args,
                cwd=str(cwd) if cwd is not None else None,
                env=dict(env) if env is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except OSError as e:
            return Err(
                ProcessError(
                    command=tuple(args),
                    returncode=-1,
                    stdout="",
                    stderr=str(e),
                )
            )

        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            stdout = _stop_group(proc)
            return Err(
                ProcessError(
                    command=tuple(args),
                    returncode=-1,
                    stdout=stdout,
                    stderr=f"Command timed out after {timeout}s",
                    timed_out=True,
                )
            )

        if proc.returncode != 0:
            return Err(
                ProcessError(
                    command=tuple(args),
                    returncode=proc.returncode,
                    stdout=stdout,
                    stderr=stderr,
                )
            )

        return Ok(stdout)


def _signal_group(proc: subprocess.Popen[str], sig: signal.Signals) -> None:
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass
    except PermissionError:
        # Nothing in the group is ours to signal; fall back to the child.
        if proc.poll() is None:
            proc.send_signal(sig)


def _stop_group(proc: subprocess.Popen[str]) -> str:
    """Stop a timed-out process group and return whatever it printed.

    SIGTERM comes first: sudo relays it to the command it runs, which a
    SIGKILL to sudo would not. Anything still alive after the grace period
    is killed.
    """
    _signal_group(proc, signal.SIGTERM)
    try:
        stdout, _ = proc.communicate(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        stdout = ""
    _signal_group(proc, signal.SIGKILL)
    if proc.poll() is None:
        try:
            proc.communicate(timeout=TERMINATE_GRACE)
        except subprocess.TimeoutExpired:
            pass
    return stdout or ""
