"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing,
so the same restore run can render with Rich in a terminal or be captured by
``MockConsole`` in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled, line-oriented output.

    Everything a restore tells the user goes through this interface: phase
    headers, per-package progress, bootstrap narration and the summary.
    Implementations render with Rich or record output for tests.
    """

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print one line.

        Args:
            message: Plain text; never interpreted as markup.
            style: How to render the line.
        """
        ...

    def success(self, message: str) -> None:
        """Print a line tagged SUCCESS."""
        ...

    def error(self, message: str) -> None:
        """Print a line tagged ERROR."""
        ...

    def warning(self, message: str) -> None:
        """Print a line tagged WARNING."""
        ...

    def info(self, message: str) -> None:
        """Print a line tagged INFO."""
        ...

    def header(self, message: str) -> None:
        """Print a section header."""
        ...

    def progress(self, current: int, total: int, message: str) -> None:
        """Report one step of a phase.

        Args:
            current: Step number, 1-based.
            total: Number of steps in the phase.
            message: What the step works on, usually a package name.
        """
        ...

    def newline(self) -> None:
        """Print an empty line."""
        ...


class RichConsole:
    """Production console backed by Rich."""

    def __init__(self) -> None:
        # Import Rich lazily to keep `import pkgrestore` cheap
        from rich.console import Console

        self._console = Console(highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "blue",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def _tagged(self, tag: str, style: str, message: str) -> None:
        from rich.text import Text

        line = Text()
        line.append(f"[{tag}]", style=style)
        line.append(f" {message}")
        self._console.print(line)

    def success(self, message: str) -> None:
        self._tagged("SUCCESS", "green", message)

    def error(self, message: str) -> None:
        self._tagged("ERROR", "red bold", message)

    def warning(self, message: str) -> None:
        self._tagged("WARNING", "yellow", message)

    def info(self, message: str) -> None:
        self._tagged("INFO", "blue", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)

    def progress(self, current: int, total: int, message: str) -> None:
        self._console.print(f"  ({current}/{total}) {message}", style="dim", markup=False)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that records output for assertions in tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[SUCCESS] {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[ERROR] {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[WARNING] {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[INFO] {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def progress(self, current: int, total: int, message: str) -> None:
        self.outputs.append(OutputRecord(f"({current}/{total}) {message}", Style.DIM))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
