"""Package planning, translation and installation."""

from .model import (
    PHASE_ORDER,
    FailureReason,
    InstallResult,
    InstallStatus,
    PackageManagerKind,
    PackageSpec,
    PartialPolicy,
)
from .planner import InstallationPhase, InstallPlan, PhaseState, build_phases, plan
from .sources import ConfigSourceMissing, ListSource, default_sources
from .translate import TranslationTable, load_translations

__all__ = [
    # model
    "PHASE_ORDER",
    "FailureReason",
    "InstallResult",
    "InstallStatus",
    "PackageManagerKind",
    "PackageSpec",
    "PartialPolicy",
    # planner
    "InstallPlan",
    "InstallationPhase",
    "PhaseState",
    "build_phases",
    "plan",
    # sources
    "ConfigSourceMissing",
    "ListSource",
    "default_sources",
    # translate
    "TranslationTable",
    "load_translations",
]
