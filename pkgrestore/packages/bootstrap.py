"""Package manager bootstrapping.

When a phase's manager is not on PATH, run its bootstrap recipe (install
Homebrew, build yay, run rustup) and re-probe. How those installers work is
their business; a recipe is just a list of commands whose success is checked
by looking for the manager afterwards.
"""

from __future__ import annotations

import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pkgrestore.core.result import Err, Ok, Result
from pkgrestore.output.console import ConsoleProtocol, Style
from pkgrestore.packages.adapters.base import PackageManagerAdapter
from pkgrestore.packages.model import PackageManagerKind
from pkgrestore.platform.capabilities import Capabilities, CapabilityProbe
from pkgrestore.platform.detection import Platform
from pkgrestore.platform.process import CommandRunner

__all__ = [
    "DEFAULT_BOOTSTRAP_TIMEOUT",
    "HOMEBREW",
    "MAS",
    "RUSTUP",
    "YAY",
    "BootstrapFailure",
    "BootstrapRecipe",
    "BootstrapStep",
    "Bootstrapper",
    "default_recipes",
]

DEFAULT_BOOTSTRAP_TIMEOUT = 1800.0

_HOMEBREW_INSTALL = (
    'NONINTERACTIVE=1 /bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)
_RUSTUP_INSTALL = "curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh -s -- -y"


@dataclass(frozen=True, slots=True)
class BootstrapStep:
    """One command of a recipe.

    Attributes:
        argv: Command to run.
        privileged: Prefix with sudo when available.
        cwd: Directory relative to the recipe's scratch dir, None for the dir itself.
    """

    argv: tuple[str, ...]
    privileged: bool = False
    cwd: str | None = None


@dataclass(frozen=True, slots=True)
class BootstrapRecipe:
    name: str
    steps: tuple[BootstrapStep, ...]


@dataclass(frozen=True, slots=True)
class BootstrapFailure:
    """A package manager is missing and could not be installed."""

    kind: PackageManagerKind
    message: str
    hint: str | None = None


HOMEBREW = BootstrapRecipe(
    name="Homebrew",
    steps=(BootstrapStep(("/bin/bash", "-c", _HOMEBREW_INSTALL)),),
)

MAS = BootstrapRecipe(
    name="mas",
    steps=(BootstrapStep(("brew", "install", "mas")),),
)

YAY = BootstrapRecipe(
    name="yay",
    steps=(
        BootstrapStep(("pacman", "-S", "--needed", "--noconfirm", "git", "base-devel"), privileged=True),
        BootstrapStep(("git", "clone", "--depth", "1", "https://aur.archlinux.org/yay-bin.git", "yay")),
        BootstrapStep(("makepkg", "-si", "--noconfirm"), cwd="yay"),
    ),
)

RUSTUP = BootstrapRecipe(
    name="rustup",
    steps=(BootstrapStep(("sh", "-c", _RUSTUP_INSTALL)),),
)


def default_recipes(platform: Platform) -> dict[PackageManagerKind, BootstrapRecipe]:
    """Recipes available on ``platform``.

    pip and npm have none: they arrive with the system phase (python-pip,
    nodejs translations) and are picked up by the capability refresh.
    """
    recipes: dict[PackageManagerKind, BootstrapRecipe] = {PackageManagerKind.CARGO: RUSTUP}
    match platform:
        case Platform.MAC:
            recipes[PackageManagerKind.SYSTEM] = HOMEBREW
            recipes[PackageManagerKind.BREW] = HOMEBREW
            recipes[PackageManagerKind.CASK] = HOMEBREW
            recipes[PackageManagerKind.MAS] = MAS
        case Platform.ARCH:
            recipes[PackageManagerKind.AUR] = YAY
        case Platform.WSL:
            pass
    return recipes


class Bootstrapper:
    """Make a manager available, installing it if needed.

    A recipe that failed once is not retried in the same run; casks and
    formulae share Homebrew, so one failed install covers both phases.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        probe: CapabilityProbe,
        console: ConsoleProtocol,
        recipes: dict[PackageManagerKind, BootstrapRecipe],
        timeout: float | None = DEFAULT_BOOTSTRAP_TIMEOUT,
        sudo: bool = True,
    ) -> None:
        self._runner = runner
        self._probe = probe
        self._console = console
        self._recipes = recipes
        self._timeout = timeout
        self._sudo = sudo
        self._failed: dict[str, str] = {}

    def ensure(
        self, adapter: PackageManagerAdapter, caps: Capabilities
    ) -> Result[Capabilities, BootstrapFailure]:
        """Ok(caps) once ``adapter``'s tool is on PATH.

        Returns the caps unchanged when nothing had to be installed, and a
        fresh snapshot after a recipe ran.
        """
        if adapter.is_available(caps):
            return Ok(caps)

        kind = adapter.kind
        recipe = self._recipes.get(kind)
        if recipe is None:
            return Err(
                BootstrapFailure(
                    kind=kind,
                    message=f"{adapter.label} not found",
                    hint=f"Install {adapter.label} manually, then re-run the restore",
                )
            )

        previous = self._failed.get(recipe.name)
        if previous is not None:
            return Err(BootstrapFailure(kind=kind, message=previous))

        self._console.info(f"Installing {recipe.name} ({kind} packages need {adapter.label})")
        error = self._run_recipe(recipe, caps)
        if error is not None:
            self._failed[recipe.name] = error
            return Err(BootstrapFailure(kind=kind, message=error))

        refreshed = self._probe.snapshot()
        if not adapter.is_available(refreshed):
            message = f"{recipe.name} installed but {adapter.label} is still not on PATH"
            self._failed[recipe.name] = message
            return Err(BootstrapFailure(kind=kind, message=message))

        self._console.success(f"{recipe.name} installed")
        return Ok(refreshed)

    def _run_recipe(self, recipe: BootstrapRecipe, caps: Capabilities) -> str | None:
        """Run every step; return an error message on the first failure."""
        with tempfile.TemporaryDirectory(prefix="pkgrestore-") as scratch:
            root = Path(scratch)
            for step in recipe.steps:
                argv = list(step.argv)
                if step.privileged and self._sudo and caps.has("sudo"):
                    argv = ["sudo", *argv]
                self._console.print(f"  {shlex.join(argv)}", Style.DIM)
                result = self._runner.run(
                    argv,
                    timeout=self._timeout,
                    env=caps.env(),
                    cwd=root / step.cwd if step.cwd else root,
                )
                if isinstance(result, Err):
                    return f"{recipe.name} install failed: {result.error}"
        return None
