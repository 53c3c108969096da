"""Host-level aggregate snapshot via psutil.

``os_snapshot()`` and ``memory_usage()`` never raise: values psutil cannot
provide come back as ``None``.
"""

from __future__ import annotations

import platform
import socket
import time

import psutil


def _cpus() -> list[dict]:
    """One entry per logical CPU: model, speed (MHz) and times (ms)."""
    model = platform.processor() or platform.machine()
    try:
        freqs = psutil.cpu_freq(percpu=True) or []
    except (OSError, NotImplementedError, psutil.Error):
        freqs = []
    try:
        per_cpu = psutil.cpu_times(percpu=True)
    except (OSError, psutil.Error):
        return []

    cpus = []
    for idx, times in enumerate(per_cpu):
        freq = freqs[idx] if idx < len(freqs) else None
        cpus.append({
            "model": model,
            "speed": round(freq.current) if freq else None,
            "times": {
                "user": int(times.user * 1000),
                "nice": int(getattr(times, "nice", 0) * 1000),
                "sys":  int(times.system * 1000),
                "idle": int(times.idle * 1000),
                "irq":  int(getattr(times, "irq", 0) * 1000),
            },
        })
    return cpus


def os_snapshot() -> dict:
    """Return hostname, uptime, memory totals, CPU list and architecture."""
    try:
        ram = psutil.virtual_memory()
        totalmem, freemem = ram.total, ram.free
        usedmem = totalmem - freemem
    except (OSError, psutil.Error):
        totalmem = freemem = usedmem = None
    try:
        uptime = int(time.time() - psutil.boot_time())
    except (OSError, psutil.Error):
        uptime = None
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    return {
        "hostname": hostname,
        "uptime": uptime,
        "totalmem": totalmem,
        "freemem": freemem,
        "usedmem": usedmem,
        "cpus": _cpus(),
        "arch": platform.machine(),
    }


def memory_usage() -> dict | None:
    """Memory used by this interpreter process, in bytes; ``None`` if unreadable."""
    try:
        info = psutil.Process().memory_info()
    except (OSError, psutil.Error):
        return None
    return {"rss": info.rss, "vms": info.vms}
