"""Restore reports: per-package outcomes, per-phase tallies, run summary."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.output.console import ConsoleProtocol, Style
from pkgrestore.packages.bootstrap import BootstrapFailure
from pkgrestore.packages.model import (
    InstallResult,
    InstallStatus,
    PackageInstallFailure,
    PackageManagerKind,
    PackageSpec,
)
from pkgrestore.packages.planner import PhaseState
from pkgrestore.packages.sources import ConfigSourceMissing
from pkgrestore.platform.detection import Platform

__all__ = [
    "PackageOutcome",
    "PhaseReport",
    "ReportWriteError",
    "RestoreReport",
    "render_summary",
    "write_json",
]


def _no_results() -> tuple[InstallResult, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class PackageOutcome:
    """Outcome for one package as written in the list (the abstract name).

    Attributes:
        spec: The listed package.
        status: Aggregated status under the run's partial policy.
        results: One result per concrete package it translated to.
        note: Extra context, e.g. why nothing had to be installed.
    """

    spec: PackageSpec
    status: InstallStatus
    results: tuple[InstallResult, ...] = field(default_factory=_no_results)
    note: str | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def failures(self) -> list[PackageInstallFailure]:
        return [r.failure for r in self.results if r.failure is not None]

    @property
    def reason(self) -> str | None:
        """Failure text, naming concrete packages when the name was translated."""
        failures = self.failures
        if not failures:
            return None
        if len(self.results) == 1 and self.results[0].package == self.name:
            return str(failures[0])
        return "; ".join(f"{f.package}: {f}" for f in failures)


def _empty_outcomes() -> list[PackageOutcome]:
    return []


@dataclass(slots=True)
class PhaseReport:
    """Progress and results of one phase; mutated by the executor while it runs."""

    kind: PackageManagerKind
    total: int
    state: PhaseState = PhaseState.PENDING
    outcomes: list[PackageOutcome] = field(default_factory=_empty_outcomes)
    bootstrap_failure: BootstrapFailure | None = None
    manager_ready: bool = False

    def _count(self, status: InstallStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def installed(self) -> int:
        return self._count(InstallStatus.INSTALLED)

    @property
    def already_present(self) -> int:
        return self._count(InstallStatus.ALREADY_PRESENT)

    @property
    def failed(self) -> int:
        return self._count(InstallStatus.FAILED)

    @property
    def failed_outcomes(self) -> list[PackageOutcome]:
        return [o for o in self.outcomes if o.status == InstallStatus.FAILED]


def _no_missing() -> tuple[ConfigSourceMissing, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class RestoreReport:
    platform: Platform
    phases: tuple[PhaseReport, ...]
    missing: tuple[ConfigSourceMissing, ...] = field(default_factory=_no_missing)

    @property
    def installed(self) -> int:
        return sum(p.installed for p in self.phases)

    @property
    def already_present(self) -> int:
        return sum(p.already_present for p in self.phases)

    @property
    def failed(self) -> int:
        return sum(p.failed for p in self.phases)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    @property
    def failed_outcomes(self) -> list[PackageOutcome]:
        return [o for p in self.phases for o in p.failed_outcomes]

    def fatal_bootstrap_failure(self) -> BootstrapFailure | None:
        """First bootstrap failure, when no phase ever had a usable package manager.

        A single failed bootstrap only fails its own phase. The run as a whole
        has failed when managers were needed and none could be set up.
        """
        failures = [p.bootstrap_failure for p in self.phases if p.bootstrap_failure is not None]
        if not failures or any(p.manager_ready for p in self.phases):
            return None
        return failures[0]

    def phase(self, kind: PackageManagerKind) -> PhaseReport | None:
        for p in self.phases:
            if p.kind == kind:
                return p
        return None

    def to_dict(self) -> dict[str, object]:
        """JSON-serializable form of the report."""
        return {
            "platform": str(self.platform),
            "summary": {
                "installed": self.installed,
                "already_present": self.already_present,
                "failed": self.failed,
            },
            "phases": [
                {
                    "kind": str(p.kind),
                    "state": str(p.state),
                    "installed": p.installed,
                    "already_present": p.already_present,
                    "failed": p.failed,
                    "bootstrap_error": p.bootstrap_failure.message
                    if p.bootstrap_failure
                    else None,
                    "packages": [
                        {
                            "name": o.name,
                            "status": str(o.status),
                            "reason": o.reason,
                            "note": o.note,
                            "concrete": [
                                {
                                    "package": r.package,
                                    "status": str(r.status),
                                    "reason": str(r.failure) if r.failure else None,
                                }
                                for r in o.results
                            ],
                        }
                        for o in p.outcomes
                    ],
                }
                for p in self.phases
            ],
            "missing_sources": [str(m.path) for m in self.missing],
        }


@dataclass(frozen=True, slots=True)
class ReportWriteError:
    path: Path
    message: str


def write_json(report: RestoreReport, path: Path) -> Result[None, ReportWriteError]:
    """Write the report as JSON to ``path``."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(report.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(ReportWriteError(path=path, message=f"Cannot write report: {e}"))
    return Ok(None)


def render_summary(report: RestoreReport, console: ConsoleProtocol) -> None:
    """Print per-phase counts and every failed package with its reason."""
    console.header("Summary")
    for p in report.phases:
        line = (
            f"{str(p.kind):<7} installed {p.installed}, "
            f"skipped {p.already_present}, failed {p.failed}"
        )
        console.print(line, Style.ERROR if p.failed else Style.DEFAULT)
        if p.bootstrap_failure is not None:
            console.print(f"        {p.bootstrap_failure.message}", Style.DIM)

    if not report.has_failures:
        console.success(
            f"Restore complete: {report.installed} installed, "
            f"{report.already_present} already present"
        )
        return

    console.warning(
        f"Restore finished with {report.failed} failed package(s); retry them manually:"
    )
    for o in report.failed_outcomes:
        console.print(f"  {o.spec.kind}: {o.name} ({o.reason})", Style.ERROR)
