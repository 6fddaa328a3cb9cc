"""Tests for pkgrestore.packages.report module."""

from __future__ import annotations

import json
from pathlib import Path

from pkgrestore.core.result import Err, Ok
from pkgrestore.output.console import MockConsole, Style
from pkgrestore.packages.bootstrap import BootstrapFailure
from pkgrestore.packages.model import (
    FailureReason,
    InstallResult,
    InstallStatus,
    PackageManagerKind,
    PackageSpec,
)
from pkgrestore.packages.planner import PhaseState
from pkgrestore.packages.report import (
    PackageOutcome,
    PhaseReport,
    RestoreReport,
    render_summary,
    write_json,
)
from pkgrestore.packages.sources import ConfigSourceMissing
from pkgrestore.platform.detection import Platform


def _outcome(
    name: str,
    status: InstallStatus,
    *results: InstallResult,
    kind: PackageManagerKind = PackageManagerKind.SYSTEM,
) -> PackageOutcome:
    return PackageOutcome(spec=PackageSpec(name=name, kind=kind), status=status, results=results)


def _report() -> RestoreReport:
    system = PhaseReport(
        kind=PackageManagerKind.SYSTEM, total=3, state=PhaseState.COMPLETED, manager_ready=True
    )
    system.outcomes.extend(
        [
            _outcome("git", InstallStatus.INSTALLED, InstallResult.installed("git")),
            _outcome("curl", InstallStatus.ALREADY_PRESENT, InstallResult.present("curl")),
            _outcome(
                "nodejs",
                InstallStatus.FAILED,
                InstallResult.failed("node", FailureReason.EXIT, "brew install node failed (exit 1)"),
            ),
        ]
    )
    cargo = PhaseReport(
        kind=PackageManagerKind.CARGO,
        total=1,
        state=PhaseState.COMPLETED,
        bootstrap_failure=BootstrapFailure(PackageManagerKind.CARGO, "rustup install failed"),
    )
    cargo.outcomes.append(
        _outcome(
            "ripgrep",
            InstallStatus.FAILED,
            InstallResult.failed("ripgrep", FailureReason.BOOTSTRAP, "rustup install failed"),
            kind=PackageManagerKind.CARGO,
        )
    )
    return RestoreReport(
        platform=Platform.MAC,
        phases=(system, cargo),
        missing=(ConfigSourceMissing(PackageManagerKind.MAS, Path("config/packages.mas")),),
    )


class TestPackageOutcome:
    def test_reason_for_untranslated_name(self) -> None:
        outcome = _outcome(
            "ripgrep",
            InstallStatus.FAILED,
            InstallResult.failed("ripgrep", FailureReason.TIMEOUT, "cargo install ripgrep timed out"),
        )
        assert outcome.reason == "timeout: cargo install ripgrep timed out"

    def test_reason_names_concrete_packages(self) -> None:
        outcome = _outcome(
            "nodejs",
            InstallStatus.FAILED,
            InstallResult.installed("nodejs"),
            InstallResult.failed("npm", FailureReason.EXIT, "exit 100"),
        )
        assert outcome.reason == "npm: exit: exit 100"

    def test_no_reason_without_failures(self) -> None:
        assert _outcome("git", InstallStatus.INSTALLED, InstallResult.installed("git")).reason is None


class TestRestoreReport:
    def test_counts(self) -> None:
        report = _report()
        assert report.installed == 1
        assert report.already_present == 1
        assert report.failed == 2
        assert report.has_failures
        assert [o.name for o in report.failed_outcomes] == ["nodejs", "ripgrep"]

    def test_phase_lookup(self) -> None:
        report = _report()
        cargo = report.phase(PackageManagerKind.CARGO)
        assert cargo is not None
        assert [o.name for o in cargo.failed_outcomes] == ["ripgrep"]
        assert report.phase(PackageManagerKind.NPM) is None

    def test_to_dict(self) -> None:
        data = _report().to_dict()
        assert data["platform"] == "mac"
        assert data["summary"] == {"installed": 1, "already_present": 1, "failed": 2}
        assert data["missing_sources"] == [str(Path("config/packages.mas"))]

        phases = data["phases"]
        assert isinstance(phases, list)
        system = phases[0]
        assert system["kind"] == "system"
        assert system["state"] == "completed"
        assert system["bootstrap_error"] is None
        nodejs = system["packages"][2]
        assert nodejs["name"] == "nodejs"
        assert nodejs["status"] == "failed"
        assert nodejs["concrete"][0]["package"] == "node"
        assert phases[1]["bootstrap_error"] == "rustup install failed"

    def test_fatal_when_no_manager_was_ready(self) -> None:
        failure = BootstrapFailure(PackageManagerKind.SYSTEM, "Homebrew install failed")
        system = PhaseReport(kind=PackageManagerKind.SYSTEM, total=1, bootstrap_failure=failure)
        cask = PhaseReport(
            kind=PackageManagerKind.CASK,
            total=1,
            bootstrap_failure=BootstrapFailure(PackageManagerKind.CASK, "Homebrew install failed"),
        )

        report = RestoreReport(platform=Platform.MAC, phases=(system, cask))

        assert report.fatal_bootstrap_failure() is failure

    def test_not_fatal_when_another_manager_was_ready(self) -> None:
        failure = BootstrapFailure(PackageManagerKind.SYSTEM, "Homebrew install failed")
        system = PhaseReport(kind=PackageManagerKind.SYSTEM, total=1, bootstrap_failure=failure)
        cargo = PhaseReport(kind=PackageManagerKind.CARGO, total=1, manager_ready=True)

        report = RestoreReport(platform=Platform.MAC, phases=(system, cargo))

        assert report.fatal_bootstrap_failure() is None

    def test_not_fatal_without_bootstrap_failures(self) -> None:
        phase = PhaseReport(kind=PackageManagerKind.SYSTEM, total=1)
        report = RestoreReport(platform=Platform.WSL, phases=(phase,))
        assert report.fatal_bootstrap_failure() is None

    def test_sample_report_is_not_fatal(self) -> None:
        assert _report().fatal_bootstrap_failure() is None


class TestWriteJson:
    def test_writes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out" / "report.json"

        assert write_json(_report(), path) == Ok(None)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["summary"]["failed"] == 2

    def test_unwritable_path(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        result = write_json(_report(), blocker / "report.json")

        assert isinstance(result, Err)
        assert result.error.path == blocker / "report.json"


class TestRenderSummary:
    def test_lists_failures_with_reasons(self) -> None:
        console = MockConsole()

        render_summary(_report(), console)

        assert console.find("installed 1, skipped 1, failed 1")
        assert console.has_warning()
        assert console.find("system: nodejs (node: exit: brew install node failed (exit 1))")
        assert console.find("cargo: ripgrep (bootstrap: rustup install failed)")
        assert console.find("rustup install failed")[0].style == Style.DIM

    def test_clean_run(self) -> None:
        phase = PhaseReport(kind=PackageManagerKind.SYSTEM, total=1, state=PhaseState.COMPLETED)
        phase.outcomes.append(_outcome("git", InstallStatus.INSTALLED, InstallResult.installed("git")))
        console = MockConsole()

        render_summary(RestoreReport(platform=Platform.WSL, phases=(phase,)), console)

        assert not console.has_warning()
        assert console.find("Restore complete: 1 installed, 0 already present")
