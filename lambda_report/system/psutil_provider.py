"""Portable process statistics via psutil.

Used where procfs is not available. Values are reshaped to match what
``ProcfsStatsProvider`` returns so the report looks the same everywhere.
"""

import os
import uuid

import psutil

from .base import SystemStatsProvider


def _clock_ticks() -> int:
    try:
        return os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        return 100


def _process(pid) -> psutil.Process:
    return psutil.Process() if pid == "self" else psutil.Process(int(pid))


class PsutilStatsProvider(SystemStatsProvider):
    name = "psutil"

    def __init__(self):
        self._ticks = _clock_ticks()

    def read_process_stat(self, pid="self") -> dict:
        times = _process(pid).cpu_times()
        return {
            "utime":  int(times.user * self._ticks),
            "stime":  int(times.system * self._ticks),
            "cutime": int(getattr(times, "children_user", 0) * self._ticks),
            "cstime": int(getattr(times, "children_system", 0) * self._ticks),
        }

    def read_process_status(self, pid="self") -> dict:
        proc = _process(pid)
        with proc.oneshot():
            rss_kb = proc.memory_info().rss // 1024
            threads = proc.num_threads()
            if hasattr(proc, "num_fds"):
                fds = proc.num_fds()
            else:
                fds = proc.num_handles()
        return {"VmRSS": rss_kb, "Threads": threads, "FDSize": fds}

    def read_boot_id(self) -> str:
        # No portable boot id; derive a stable one from the boot timestamp.
        return str(uuid.uuid5(uuid.NAMESPACE_OID, f"boot:{psutil.boot_time()}"))
