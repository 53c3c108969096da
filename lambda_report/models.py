"""Pydantic v2 models for report fragments that need a fixed shape."""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel


class ErrorRecord(BaseModel):
    """Canonical error block attached to a report.

    Field names follow the collector's wire format.
    """

    name: Optional[str] = None
    message: Optional[str] = None
    stack: Optional[str] = None
    lineNumber: Optional[int] = None
    columnNumber: Optional[int] = None
    fileName: Optional[str] = None

    @classmethod
    def from_message(cls, message: str) -> "ErrorRecord":
        # Stack is captured here, one frame below the caller's send().
        stack = "".join(traceback.format_stack()[:-1])
        stack += f"Exception: {message}\n"
        return cls(name="Exception", message=message, stack=stack)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorRecord":
        tb = exc.__traceback__
        if tb is None:
            # Never raised: the creation site is the best context available.
            stack = "".join(traceback.format_stack()[:-1])
            stack += "".join(traceback.format_exception_only(type(exc), exc))
            return cls(name=type(exc).__name__, message=str(exc), stack=stack)

        stack = "".join(traceback.format_exception(type(exc), exc, tb))
        innermost = traceback.extract_tb(tb)[-1]
        return cls(
            name=type(exc).__name__,
            message=str(exc),
            stack=stack,
            lineNumber=innermost.lineno,
            columnNumber=getattr(innermost, "colno", None),
            fileName=innermost.filename,
        )

    @classmethod
    def from_fields(cls, source: Any) -> "ErrorRecord":
        """Copy fields verbatim from a mapping or an attribute-bearing object."""
        if isinstance(source, Mapping):
            get = source.get
        else:
            def get(key, default=None):
                return getattr(source, key, default)
        return cls(
            name=_text(get("name")),
            message=_text(get("message")),
            stack=_text(get("stack")),
            lineNumber=_number(get("lineNumber")),
            columnNumber=_number(get("columnNumber")),
            fileName=_text(get("fileName")),
        )


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _number(value: Any) -> Optional[int]:
    try:
        return None if value is None else int(value)
    except (TypeError, ValueError):
        return None


def coerce_error(err: Any) -> ErrorRecord:
    """Normalise whatever the caller passed to ``send`` into an ErrorRecord.

    Accepted shapes:
      str             -> generic record with a freshly captured stack
      BaseException   -> name/message/stack/location from the traceback
      anything else   -> fields copied from a mapping or attributes
    """
    if isinstance(err, str):
        return ErrorRecord.from_message(err)
    if isinstance(err, BaseException):
        return ErrorRecord.from_exception(err)
    return ErrorRecord.from_fields(err)
