from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from pkgrestore.cli.context import CLIContext
from pkgrestore.core.config import RestoreConfig
from pkgrestore.core.errors import ErrorCode
from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.output.console import MockConsole
from pkgrestore.packages.bootstrap import BootstrapFailure
from pkgrestore.packages.model import PackageManagerKind, PartialPolicy
from pkgrestore.packages.report import RestoreReport
from pkgrestore.platform.detection import Platform


def _ctx(tmp_path: Path, console: MockConsole | None = None) -> CLIContext:
    return CLIContext(
        platform=Platform.WSL,
        config=RestoreConfig(),
        config_dir=tmp_path,
        console=console or MockConsole(),
    )


def _patch_service(
    monkeypatch: pytest.MonkeyPatch,
    *,
    result: Result[RestoreReport, object],
    seen: dict[str, RestoreConfig] | None = None,
) -> None:
    import pkgrestore.cli.commands.restore as restore_cmd

    class FakeRestoreService:
        def __init__(self, *, config: RestoreConfig, **_: object) -> None:
            if seen is not None:
                seen["config"] = config

        def restore(self) -> Result[RestoreReport, object]:
            return result

    monkeypatch.setattr(restore_cmd, "RestoreService", FakeRestoreService)


def _invoke(tmp_path: Path, **overrides: object) -> None:
    import pkgrestore.cli.commands.restore as restore_cmd

    options: dict[str, object] = {
        "config_dir": tmp_path,
        "timeout": None,
        "policy": None,
        "no_refresh": False,
        "json_report": None,
    }
    options.update(overrides)
    restore_cmd.restore(**options)  # type: ignore[arg-type]


def _use_context(monkeypatch: pytest.MonkeyPatch, ctx: CLIContext) -> None:
    import pkgrestore.cli.commands.restore as restore_cmd

    monkeypatch.setattr(restore_cmd, "build_context", lambda config_dir: ctx)


def test_restore_success_returns_normally(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_context(monkeypatch, _ctx(tmp_path))
    _patch_service(monkeypatch, result=Ok(RestoreReport(platform=Platform.WSL, phases=())))

    _invoke(tmp_path)


def test_bootstrap_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = MockConsole()
    _use_context(monkeypatch, _ctx(tmp_path, console))
    _patch_service(
        monkeypatch,
        result=Err(BootstrapFailure(PackageManagerKind.SYSTEM, "Homebrew install failed")),
    )

    with pytest.raises(typer.Exit) as exc:
        _invoke(tmp_path)

    assert exc.value.exit_code == int(ErrorCode.BOOTSTRAP_ERROR)
    assert console.find("Homebrew install failed")


def test_options_override_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, RestoreConfig] = {}
    _use_context(monkeypatch, _ctx(tmp_path))
    _patch_service(
        monkeypatch, result=Ok(RestoreReport(platform=Platform.WSL, phases=())), seen=seen
    )

    _invoke(tmp_path, timeout=30.0, policy="any", no_refresh=True)

    config = seen["config"]
    assert config.timeout == 30.0
    assert config.partial_policy is PartialPolicy.ANY
    assert config.refresh_index is False


def test_invalid_policy_is_user_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_context(monkeypatch, _ctx(tmp_path))
    _patch_service(monkeypatch, result=Ok(RestoreReport(platform=Platform.WSL, phases=())))

    with pytest.raises(typer.Exit) as exc:
        _invoke(tmp_path, policy="most")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_invalid_timeout_is_user_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_context(monkeypatch, _ctx(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        _invoke(tmp_path, timeout=0.0)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_json_report_written(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_context(monkeypatch, _ctx(tmp_path))
    _patch_service(monkeypatch, result=Ok(RestoreReport(platform=Platform.WSL, phases=())))
    path = tmp_path / "report.json"

    _invoke(tmp_path, json_report=path)

    assert json.loads(path.read_text(encoding="utf-8"))["platform"] == "wsl"


def test_json_report_io_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_context(monkeypatch, _ctx(tmp_path))
    _patch_service(monkeypatch, result=Ok(RestoreReport(platform=Platform.WSL, phases=())))
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        _invoke(tmp_path, json_report=blocker / "report.json")

    assert exc.value.exit_code == int(ErrorCode.IO_ERROR)
