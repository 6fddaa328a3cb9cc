"""Package manager adapters."""

from .base import DEFAULT_INSTALL_TIMEOUT, ListingAdapter, PackageManagerAdapter
from .language import CargoAdapter, NpmAdapter, PipAdapter
from .registry import AdapterRegistry
from .store import AurAdapter, CaskAdapter, MasAdapter
from .system import AptAdapter, BrewAdapter, PacmanAdapter

__all__ = [
    "DEFAULT_INSTALL_TIMEOUT",
    "AdapterRegistry",
    "AptAdapter",
    "AurAdapter",
    "BrewAdapter",
    "CargoAdapter",
    "CaskAdapter",
    "ListingAdapter",
    "MasAdapter",
    "NpmAdapter",
    "PackageManagerAdapter",
    "PacmanAdapter",
    "PipAdapter",
]
