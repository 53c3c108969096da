"""Exception hierarchy for lambda-report.

None of these ever leave ``Report.send``; they exist so each failure seam
(collection, DNS, delivery) can be told apart in debug output and tests.
"""

from __future__ import annotations


class ReporterError(Exception):
    """Base exception for lambda-report errors."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class CollectionError(ReporterError):
    """A process stat, status or boot id lookup failed."""
    pass


class DNSResolutionError(ReporterError):
    """The collector hostname could not be resolved."""
    pass


class TransportError(ReporterError):
    """Connecting to, writing to or reading from the collector failed."""
    pass
