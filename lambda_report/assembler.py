"""Build and fill in the report document."""

from __future__ import annotations

import math
import os
import platform
from collections.abc import Mapping
from typing import Any

from . import runtime
from .config import ReporterConfig
from .models import coerce_error

# (report key, Python Lambda context attribute)
_CONTEXT_FIELDS = [
    ("functionName",       "function_name"),
    ("functionVersion",    "function_version"),
    ("awsRequestId",       "aws_request_id"),
    ("invokedFunctionArn", "invoked_function_arn"),
    ("logGroupName",       "log_group_name"),
    ("logStreamName",      "log_stream_name"),
    ("memoryLimitInMB",    "memory_limit_in_mb"),
]


def context_value(context: Any, name: str, alias: str | None = None) -> Any:
    """Read *name* from an invocation context object or mapping.

    The context may also spell it as *alias*, the camelCase report key.
    """
    if context is None:
        return None
    for key in (name, alias):
        if key is None:
            continue
        if isinstance(context, Mapping):
            value = context.get(key)
        else:
            value = getattr(context, key, None)
        if value is not None:
            return value
    return None


class ReportAssembler:
    """Owns the mutable report dict for one invocation.

    The skeleton is built in ``__init__``; the late-bound fields are merged
    by the report lifecycle once statistics are in.
    """

    def __init__(
        self,
        config: ReporterConfig,
        context: Any = None,
        start_time: int | float | None = None,
        metrics: list | None = None,
        state: runtime.ProcessState | None = None,
    ):
        state = state or runtime.PROCESS_STATE
        self.config = config
        self.context = context
        self.start_time = start_time

        self.report: dict = {
            "client_id": config.client_id or None,
            "installMethod": config.install_method,
            "duration": None,
            "processId": runtime.PROCESS_ID,
            "aws": self._invocation_metadata(context),
            "environment": {
                "agent": {
                    "runtime": "python",
                    "version": runtime.VERSION,
                    "load_time": runtime.MODULE_LOAD_TIME,
                },
                "python": {
                    "version": platform.python_version(),
                    "memoryUsage": None,
                },
                "host": {
                    "container_id": None,
                },
                "os": {},
            },
            "errors": {},
            "coldstart": state.claim_coldstart(),
            "custom_metrics": list(metrics) if metrics else [],
        }

    @staticmethod
    def _invocation_metadata(context: Any) -> dict:
        meta = {key: context_value(context, attr, key) for key, attr in _CONTEXT_FIELDS}
        meta["getRemainingTimeInMillis"] = None
        meta["traceId"] = os.environ.get("_X_AMZN_TRACE_ID")
        return meta

    # ── late-bound fields ────────────────────────────────────────────────────

    def merge_error(self, err: Any) -> None:
        self.report["errors"] = coerce_error(err).model_dump()

    def merge_stats(
        self,
        os_snapshot: dict,
        start_stat: dict | None,
        current_stat: dict | None,
        status: dict | None,
        boot_id: str | None,
    ) -> None:
        os_section = dict(os_snapshot)
        os_section["linux"] = {
            "pid": {
                "self": {
                    "stat_start": start_stat,
                    "stat": current_stat,
                    "status": status,
                },
            },
        }
        self.report["environment"]["os"] = os_section
        self.report["environment"]["host"]["boot_id"] = boot_id

    def merge_runtime(self, memory_usage: dict | None, remaining_ms: Any = None) -> None:
        self.report["environment"]["python"]["memoryUsage"] = memory_usage
        if remaining_ms is not None:
            self.report["aws"]["getRemainingTimeInMillis"] = remaining_ms

    def finalize_duration(self, start_time: int | float, now: int | float) -> int:
        """Set ``duration`` to the elapsed nanoseconds, rounded up."""
        duration = max(0, math.ceil(now - start_time))
        self.report["duration"] = duration
        return duration
