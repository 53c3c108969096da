"""Report lifecycle: collect, assemble and deliver one report per invocation.

States::

    constructed --send()--> sending --delivery done or failed--> settled

``send`` never raises and never blocks on the network. The completion
callback and the returned future both fire exactly once, after delivery has
been attempted, whether it worked or not.
"""

from __future__ import annotations

import json
import sys
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable

from . import runtime, system, transport
from .assembler import ReportAssembler, context_value
from .config import ReporterConfig, coerce_config
from .errors import CollectionError, TransportError

CONSTRUCTED = "constructed"
SENDING = "sending"
SETTLED = "settled"


class Report:
    """One invocation's report.

    Args:
        config: ``ReporterConfig``, a mapping of its fields, or ``None``.
        context: Invocation context (object or mapping).
        start_time: Invocation start on the ``clock`` timescale, in
            nanoseconds. Defaults to now.
        metrics: Pre-computed custom metric entries, copied as-is.
        dns_future: Future resolving to the collector IP address. Defaults to
            an already-resolved ``None``: connect to ``config.host`` directly.
        provider: ``SystemStatsProvider``; defaults to the platform's.
        state: Coldstart holder; defaults to the process-wide one.
        clock: Nanosecond monotonic clock used for ``duration``.
        sender: Delivery function with the signature of
            ``transport.send_report``.
    """

    def __init__(
        self,
        config: ReporterConfig | dict | None = None,
        context: Any = None,
        start_time: int | None = None,
        metrics: list | None = None,
        dns_future: Future | None = None,
        provider: system.SystemStatsProvider | None = None,
        state: runtime.ProcessState | None = None,
        clock: Callable[[], int] = time.monotonic_ns,
        sender: Callable[..., transport.TransportResponse] = transport.send_report,
    ):
        self.config = coerce_config(config)
        self.context = context
        self.provider = provider or system.default_provider()
        self.dns_future = dns_future or runtime.resolved(None)
        self._clock = clock
        self._sender = sender
        self.start_time = start_time if start_time is not None else clock()

        self.sent = False
        self.state = CONSTRUCTED
        self._lock = threading.Lock()
        self._callback: Callable[[], Any] | None = None
        self._completion: Future = Future()

        self._stat_start = runtime.submit(self.provider.read_process_stat, "self")
        self._boot_id = runtime.submit(self.provider.read_boot_id)

        self.assembler = ReportAssembler(
            self.config, context, self.start_time, metrics, state,
        )

    @property
    def report(self) -> dict:
        return self.assembler.report

    @property
    def completion(self) -> Future:
        return self._completion

    # ── public API ───────────────────────────────────────────────────────────

    def send(self, err: Any = None, callback: Callable[[], Any] | None = None) -> Future:
        """Finish the report and deliver it in the background.

        Only the first call does anything. Later calls return the same future
        and their callbacks are never invoked.
        """
        with self._lock:
            if self.sent:
                return self._completion
            self.sent = True
            self.state = SENDING
        self._callback = callback

        if err:
            self.assembler.merge_error(err)

        if not self.config.enabled:
            self._settle()
            return self._completion

        try:
            stat = runtime.submit(self.provider.read_process_stat, "self")
            status = runtime.submit(self.provider.read_process_status, "self")
            runtime.submit(self._run, self._stat_start, stat, status, self._boot_id)
        except RuntimeError as exc:
            # Worker pool already shut down (interpreter exiting).
            self._debug(f"Could not schedule report: {exc}")
            self._settle()

        return self._completion

    # ── background work ──────────────────────────────────────────────────────

    def _run(self, stat_start: Future, stat: Future, status: Future, boot_id: Future) -> None:
        try:
            start_stat = self._result_or_none(stat_start, "stat_start")
            current_stat = self._result_or_none(stat, "stat")
            current_status = self._result_or_none(status, "status")
            current_boot_id = self._result_or_none(boot_id, "boot_id")
            self.assembler.merge_stats(
                system.os_snapshot(), start_stat, current_stat, current_status, current_boot_id,
            )
            self._finalize()
            self._deliver()
        except Exception as exc:  # noqa: BLE001
            self._debug(f"Report aborted before delivery: {exc!r}")
        finally:
            self._settle()

    def _result_or_none(self, fut: Future, key: str) -> Any:
        """Wait for one lookup; a failed one contributes ``None``."""
        try:
            return fut.result()
        except Exception as exc:  # noqa: BLE001
            err = CollectionError(f"{self.provider.name}.{key}: {exc}", cause=exc)
            self._debug(f"Stat collection failed: {err}")
            return None

    def _finalize(self) -> None:
        self.assembler.merge_runtime(system.memory_usage(), self._remaining_time())
        self.assembler.finalize_duration(self.start_time, self._clock())

        if self.config.debug:
            self._debug(json.dumps(self.report, default=str))

    def _remaining_time(self) -> Any:
        getter = context_value(
            self.context, "get_remaining_time_in_millis", "getRemainingTimeInMillis",
        )
        if not callable(getter):
            return None
        try:
            return getter()
        except Exception as exc:  # noqa: BLE001
            self._debug(f"get_remaining_time_in_millis failed: {exc}")
            return None

    def _deliver(self) -> None:
        try:
            address = self.dns_future.result()
        except Exception as exc:  # noqa: BLE001
            self._debug(f"Write to {self.config.host} failed. DNS resolution error: {exc!r}")
            return

        try:
            resp = self._sender(self.report, self.config, address)
        except TransportError as exc:
            self._debug(f"Write to {self.config.host} failed: {exc}")
            return

        self._debug(f"API STATUS FROM {self.config.host}: {resp.status_code}")
        self._debug(f"API RESPONSE FROM {self.config.host}: {resp.body}")

    def _settle(self) -> None:
        with self._lock:
            if self.state == SETTLED:
                return
            self.state = SETTLED

        if self._callback is not None:
            try:
                self._callback()
            except Exception as exc:  # noqa: BLE001
                self._debug(f"Completion callback raised: {exc!r}")
        self._completion.set_result(None)

    def _debug(self, message: str) -> None:
        if self.config.debug:
            print(f"[lambda-report] {message}", file=sys.stderr, flush=True)
