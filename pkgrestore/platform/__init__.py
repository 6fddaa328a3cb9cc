"""Platform abstraction layer."""

from .capabilities import (
    Capabilities,
    CapabilityProbe,
    HostCapabilityProbe,
)
from .detection import (
    HostProbe,
    Platform,
    UnsupportedPlatform,
    classify,
    detect,
    probe_host,
)
from .process import (
    CommandRunner,
    ProcessError,
    SubprocessRunner,
)

__all__ = [
    # capabilities
    "Capabilities",
    "CapabilityProbe",
    "HostCapabilityProbe",
    # detection
    "HostProbe",
    "Platform",
    "UnsupportedPlatform",
    "classify",
    "detect",
    "probe_host",
    # process
    "CommandRunner",
    "ProcessError",
    "SubprocessRunner",
]
