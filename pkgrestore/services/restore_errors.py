from __future__ import annotations

from pkgrestore.core.config import ConfigError
from pkgrestore.packages.bootstrap import BootstrapFailure
from pkgrestore.packages.report import ReportWriteError
from pkgrestore.platform.detection import UnsupportedPlatform

__all__ = ["RestoreError"]


RestoreError = UnsupportedPlatform | BootstrapFailure | ConfigError | ReportWriteError
