"""Resolve the collector hostname ahead of delivery."""

from __future__ import annotations

import socket
from concurrent.futures import Future

from . import runtime
from .errors import DNSResolutionError


def lookup(host: str) -> str:
    """Return the first IPv4 address for *host*."""
    try:
        infos = socket.getaddrinfo(host, 443, socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise DNSResolutionError(f"could not resolve {host}: {exc}", cause=exc) from exc
    if not infos:
        raise DNSResolutionError(f"no addresses for {host}")
    return infos[0][4][0]


def resolve_collector(host: str) -> Future:
    """Start resolving *host* on the worker pool and return the future.

    Intended to be called as early as possible (e.g. at handler start) and
    passed to ``Report`` so resolution overlaps the invocation.
    """
    return runtime.submit(lookup, host)
