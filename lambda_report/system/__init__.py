"""System statistics providers for lambda-report."""

import sys

from .base import SystemStatsProvider
from .host import memory_usage, os_snapshot
from .procfs import ProcfsStatsProvider
from .psutil_provider import PsutilStatsProvider


def default_provider() -> SystemStatsProvider:
    """Return the provider suited to the running platform."""
    if sys.platform.startswith("linux"):
        return ProcfsStatsProvider()
    return PsutilStatsProvider()


__all__ = [
    "SystemStatsProvider",
    "ProcfsStatsProvider",
    "PsutilStatsProvider",
    "default_provider",
    "memory_usage",
    "os_snapshot",
]
