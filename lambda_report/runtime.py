"""Process-wide state shared by every report in this interpreter.

Values here are set once at import time and live for the whole process:

  VERSION            agent version echoed into each report
  PROCESS_ID         random identifier, constant for the agent's lifetime
  MODULE_LOAD_TIME   epoch milliseconds when the agent was imported
  PROCESS_STATE      coldstart flag (true until the first report is built)
  executor()         worker pool for stat lookups, DNS and delivery
"""

from __future__ import annotations

import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor

from . import __version__ as VERSION

PROCESS_ID = str(uuid.uuid4())
MODULE_LOAD_TIME = int(time.time() * 1000)

_MAX_WORKERS = 8


class ProcessState:
    """Flip-once coldstart flag.

    ``claim_coldstart()`` returns True exactly once per instance, no matter
    how many threads race for it.
    """

    def __init__(self, coldstart: bool = True):
        self._coldstart = coldstart
        self._lock = threading.Lock()

    @property
    def coldstart(self) -> bool:
        return self._coldstart

    def claim_coldstart(self) -> bool:
        with self._lock:
            was_cold = self._coldstart
            self._coldstart = False
        return was_cold


PROCESS_STATE = ProcessState()


# ── worker pool ───────────────────────────────────────────────────────────────

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def executor() -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=_MAX_WORKERS,
                thread_name_prefix="lambda-report",
            )
        return _executor


def submit(fn, *args, **kwargs) -> Future:
    return executor().submit(fn, *args, **kwargs)


def resolved(value=None) -> Future:
    """Return a future that is already complete with *value*."""
    fut: Future = Future()
    fut.set_result(value)
    return fut
