"""Base class for process stat providers."""

from abc import ABC, abstractmethod


class SystemStatsProvider(ABC):
    """Point-in-time process statistics.

    Every method may raise; the report lifecycle runs them on worker threads
    and treats a failure as a missing field.
    """

    name: str = "base"

    @abstractmethod
    def read_process_stat(self, pid="self") -> dict:
        """Return ``{utime, stime, cutime, cstime}`` in clock ticks."""
        ...

    @abstractmethod
    def read_process_status(self, pid="self") -> dict:
        """Return ``{VmRSS, Threads, FDSize}`` (VmRSS in kB)."""
        ...

    @abstractmethod
    def read_boot_id(self) -> str:
        """Return an identifier for the current boot of the host."""
        ...
