"""Installation executor.

Runs planned phases one after another, one package at a time. Package
managers hold their own locks (dpkg, pacman, Homebrew) so nothing here runs
concurrently. A failed package is recorded and the run moves on; every phase
reaches ``completed``.

Between phases the executor works from an explicit ``Capabilities`` snapshot.
It is re-taken after a system phase (newly installed runtimes such as npm or
pip3 become visible) and after any bootstrap.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pkgrestore.core.result import Err
from pkgrestore.output.console import ConsoleProtocol, Style
from pkgrestore.packages.adapters.base import DEFAULT_REFRESH_TIMEOUT
from pkgrestore.packages.adapters.registry import AdapterRegistry
from pkgrestore.packages.bootstrap import BootstrapFailure, Bootstrapper
from pkgrestore.packages.model import (
    FailureReason,
    InstallResult,
    InstallStatus,
    PackageSpec,
    PartialPolicy,
    PhaseGroup,
)
from pkgrestore.packages.planner import InstallationPhase, PhaseState
from pkgrestore.packages.report import PackageOutcome, PhaseReport, RestoreReport
from pkgrestore.packages.translate import TranslationTable
from pkgrestore.platform.capabilities import Capabilities, CapabilityProbe
from pkgrestore.platform.detection import Platform

__all__ = ["InstallationExecutor", "combine"]


def combine(results: Sequence[InstallResult], policy: PartialPolicy) -> InstallStatus:
    """Aggregate concrete results into the abstract package's status.

    Under ALL any failure fails the package; under ANY only a total failure
    does. A package that is not failed counts as installed if anything was
    installed, otherwise as already present.
    """
    if not results:
        return InstallStatus.ALREADY_PRESENT

    failed = [r for r in results if r.status == InstallStatus.FAILED]
    if policy is PartialPolicy.ALL and failed:
        return InstallStatus.FAILED
    if policy is PartialPolicy.ANY and len(failed) == len(results):
        return InstallStatus.FAILED

    if any(r.status == InstallStatus.INSTALLED for r in results):
        return InstallStatus.INSTALLED
    return InstallStatus.ALREADY_PRESENT


class InstallationExecutor:
    """Execute installation phases and collect a report."""

    def __init__(
        self,
        *,
        platform: Platform,
        registry: AdapterRegistry,
        translations: TranslationTable,
        probe: CapabilityProbe,
        bootstrapper: Bootstrapper,
        console: ConsoleProtocol,
        policy: PartialPolicy = PartialPolicy.ALL,
        refresh_index: bool = True,
        refresh_timeout: float | None = DEFAULT_REFRESH_TIMEOUT,
    ) -> None:
        self._platform = platform
        self._registry = registry
        self._translations = translations
        self._probe = probe
        self._bootstrapper = bootstrapper
        self._console = console
        self._policy = policy
        self._refresh_index = refresh_index
        self._refresh_timeout = refresh_timeout

    def execute(
        self,
        phases: Iterable[InstallationPhase],
        *,
        caps: Capabilities | None = None,
    ) -> RestoreReport:
        """Run every phase in order and return the report.

        Args:
            phases: Planned phases, already in install order.
            caps: Starting snapshot; probed fresh when None.
        """
        current = caps if caps is not None else self._probe.snapshot()
        reports: list[PhaseReport] = []

        for phase in phases:
            report = PhaseReport(kind=phase.kind, total=len(phase))
            reports.append(report)
            current = self._run_phase(phase, report, current)

            if phase.kind.group is PhaseGroup.SYSTEM:
                current = self._refresh_capabilities(current)

        return RestoreReport(platform=self._platform, phases=tuple(reports))

    def _run_phase(
        self,
        phase: InstallationPhase,
        report: PhaseReport,
        caps: Capabilities,
    ) -> Capabilities:
        report.state = PhaseState.RUNNING
        self._console.header(f"Installing {len(phase)} {phase.kind} package(s)")

        adapter = self._registry.get(phase.kind)
        if adapter is None:
            detail = f"no {phase.kind} package manager on {self._platform}"
            self._console.warning(f"Skipping {phase.kind} packages: {detail}")
            self._fail_all(phase, report, FailureReason.UNSUPPORTED, detail)
            report.state = PhaseState.COMPLETED
            return caps

        ensured = self._bootstrapper.ensure(adapter, caps)
        if isinstance(ensured, Err):
            self._report_bootstrap_failure(ensured.error)
            report.bootstrap_failure = ensured.error
            self._fail_all(phase, report, FailureReason.BOOTSTRAP, ensured.error.message)
            report.state = PhaseState.COMPLETED
            return caps
        caps = ensured.value
        report.manager_ready = True

        if self._refresh_index and phase.kind.group is PhaseGroup.SYSTEM:
            refreshed = adapter.refresh_index(caps, timeout=self._refresh_timeout)
            if isinstance(refreshed, Err):
                self._console.warning(f"Package index refresh failed, continuing: {refreshed.error}")

        for i, spec in enumerate(phase.packages, start=1):
            self._console.progress(i, len(phase), spec.name)
            outcome = self._install_package(spec, caps)
            report.outcomes.append(outcome)
            self._print_outcome(outcome)

        report.state = PhaseState.COMPLETED
        return caps

    def _install_package(self, spec: PackageSpec, caps: Capabilities) -> PackageOutcome:
        if spec.kind.translatable:
            concrete = self._translations.translate(self._platform, spec.name)
        else:
            concrete = [spec.name]

        if not concrete:
            return PackageOutcome(
                spec=spec,
                status=InstallStatus.ALREADY_PRESENT,
                note=f"not needed on {self._platform}",
            )

        results = tuple(self._registry.install(spec.kind, name, caps) for name in concrete)
        return PackageOutcome(spec=spec, status=combine(results, self._policy), results=results)

    def _fail_all(
        self,
        phase: InstallationPhase,
        report: PhaseReport,
        reason: FailureReason,
        detail: str,
    ) -> None:
        for spec in phase.packages:
            report.outcomes.append(
                PackageOutcome(
                    spec=spec,
                    status=InstallStatus.FAILED,
                    results=(InstallResult.failed(spec.name, reason, detail),),
                )
            )

    def _refresh_capabilities(self, before: Capabilities) -> Capabilities:
        after = self._probe.snapshot()
        added = sorted(after.executables - before.executables)
        if added:
            self._console.print(f"  now available: {', '.join(added)}", Style.DIM)
        return after

    def _report_bootstrap_failure(self, failure: BootstrapFailure) -> None:
        self._console.error(f"Cannot install {failure.kind} packages: {failure.message}")
        if failure.hint:
            self._console.print(f"hint: {failure.hint}", Style.DIM)

    def _print_outcome(self, outcome: PackageOutcome) -> None:
        match outcome.status:
            case InstallStatus.INSTALLED:
                self._console.success(f"Installed {outcome.name}")
            case InstallStatus.ALREADY_PRESENT:
                note = outcome.note or "already installed"
                self._console.print(f"  {outcome.name}: {note}", Style.DIM)
            case InstallStatus.FAILED:
                self._console.error(f"Failed {outcome.name} ({outcome.reason})")
                return
        partial = outcome.failures
        if partial:
            missed = ", ".join(f.package for f in partial)
            self._console.warning(f"{outcome.name}: partially installed, failed {missed}")
