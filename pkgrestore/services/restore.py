from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

from pkgrestore.core.config import ConfigError, RestoreConfig
from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.output.console import ConsoleProtocol, Style
from pkgrestore.packages.adapters.registry import AdapterRegistry
from pkgrestore.packages.bootstrap import BootstrapFailure, Bootstrapper, default_recipes
from pkgrestore.packages.executor import InstallationExecutor
from pkgrestore.packages.planner import InstallPlan, plan
from pkgrestore.packages.report import RestoreReport, render_summary
from pkgrestore.packages.sources import default_sources
from pkgrestore.packages.translate import TranslationTable, load_translations
from pkgrestore.platform.capabilities import CapabilityProbe, HostCapabilityProbe
from pkgrestore.platform.detection import Platform
from pkgrestore.platform.process import CommandRunner, SubprocessRunner

__all__ = ["SYSTEM_INFO_FILENAME", "RestoreService", "running_as_root"]

SYSTEM_INFO_FILENAME = "system-info.txt"


def running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class RestoreService:
    """Plan and run a restore from a backup directory.

    Each phase makes its own package manager available first. A manager that
    cannot be set up fails that phase only; the run stops short only when no
    manager at all could be set up. Every other problem is recorded per
    package and the run continues.
    """

    def __init__(
        self,
        *,
        platform: Platform,
        config: RestoreConfig,
        config_dir: Path,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        probe: CapabilityProbe | None = None,
        translations: TranslationTable | None = None,
        as_root: bool | None = None,
    ) -> None:
        self._platform = platform
        self._config = config
        self._config_dir = config_dir
        self._console = console
        self._runner = runner if runner is not None else SubprocessRunner()
        self._probe = probe if probe is not None else HostCapabilityProbe()
        self._translations = translations
        self._as_root = running_as_root() if as_root is None else as_root

    @property
    def use_sudo(self) -> bool:
        return self._config.sudo and not self._as_root

    def plan(self) -> InstallPlan:
        """Read the backup's lists into ordered phases. Runs nothing."""
        return plan(default_sources(self._config_dir), exclude=self._config.exclude)

    def translations(self) -> Result[TranslationTable, ConfigError]:
        """Shipped translation table with the config's rules layered on top."""
        if self._translations is not None:
            base = self._translations
        else:
            loaded = load_translations()
            if isinstance(loaded, Err):
                return Err(ConfigError(loaded.error.message, path=loaded.error.path))
            base = loaded.value
        return Ok(base.merged(self._config.translations))

    def restore(self) -> Result[RestoreReport, BootstrapFailure | ConfigError]:
        """Run every phase of the plan and return the report.

        Returns Err only when the translation table cannot be loaded, or when
        package managers were needed and not one of them could be set up.
        A manager that fails to bootstrap otherwise only fails its own phase.
        """
        table = self.translations()
        if isinstance(table, Err):
            return table

        self._show_backup_info()

        install_plan = self.plan()
        for missing in install_plan.missing:
            self._console.print(f"  {missing.message}", Style.DIM)

        if install_plan.is_empty:
            self._console.warning(f"No packages to restore in {self._config_dir}")
            return Ok(RestoreReport(platform=self._platform, phases=(), missing=install_plan.missing))

        self._console.info(
            f"{install_plan.total} package(s) in {len(install_plan.phases)} phase(s) on {self._platform}"
        )

        registry = AdapterRegistry.for_platform(
            self._platform,
            self._runner,
            timeout=self._config.timeout,
            sudo=self.use_sudo,
        )
        bootstrapper = Bootstrapper(
            runner=self._runner,
            probe=self._probe,
            console=self._console,
            recipes=default_recipes(self._platform),
            timeout=self._config.bootstrap_timeout,
            sudo=self.use_sudo,
        )

        executor = InstallationExecutor(
            platform=self._platform,
            registry=registry,
            translations=table.value,
            probe=self._probe,
            bootstrapper=bootstrapper,
            console=self._console,
            policy=self._config.partial_policy,
            refresh_index=self._config.refresh_index,
            refresh_timeout=self._config.bootstrap_timeout,
        )
        report = executor.execute(install_plan.phases)
        report = replace(report, missing=install_plan.missing)

        self._console.newline()
        render_summary(report, self._console)

        fatal = report.fatal_bootstrap_failure()
        if fatal is not None:
            return Err(fatal)
        return Ok(report)

    def _show_backup_info(self) -> None:
        path = self._config_dir / SYSTEM_INFO_FILENAME
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return

        lines = [line.rstrip() for line in text.splitlines() if line.strip()]
        if not lines:
            return
        self._console.header("Backup")
        for line in lines:
            self._console.print(line, Style.DIM)
