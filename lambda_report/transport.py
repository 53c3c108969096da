"""Deliver a finished report to the collector over HTTPS.

The TCP connection can go to an already-resolved IP address while TLS still
presents, and verifies against, the collector's hostname. DNS resolution is
therefore decoupled from the handshake target.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter

from .config import ReporterConfig
from .errors import TransportError

COLLECTOR_PORT = 443


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: str


class ServerNameAdapter(HTTPAdapter):
    """HTTPS adapter that pins SNI and certificate hostname to *server_name*."""

    def __init__(self, server_name: str, **kwargs):
        # Must be set before HTTPAdapter.__init__ builds the pool manager.
        self.server_name = server_name
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["server_hostname"] = self.server_name
        pool_kwargs["assert_hostname"] = self.server_name
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


# One long-lived session per collector hostname, shared by all reports.
_sessions: dict[str, requests.Session] = {}
_sessions_lock = threading.Lock()


def session_for(server_name: str) -> requests.Session:
    with _sessions_lock:
        session = _sessions.get(server_name)
        if session is None:
            session = requests.Session()
            session.mount("https://", ServerNameAdapter(server_name))
            _sessions[server_name] = session
        return session


def _url(address: str, path: str) -> str:
    if ":" in address and not address.startswith("["):
        address = f"[{address}]"
    return f"https://{address}:{COLLECTOR_PORT}{path}"


def send_report(
    document: dict,
    config: ReporterConfig,
    address: str | None = None,
) -> TransportResponse:
    """POST *document* as JSON and return the collector's status and body.

    Args:
        document: The finished report.
        config: Supplies host (TLS server name and Host header), path and
            network timeout.
        address: IP address to connect to. ``None`` connects to
            ``config.host`` directly.

    Raises:
        TransportError: On connection, TLS, timeout or read failures. The HTTP
            status code is never treated as a failure.
    """
    body = json.dumps(document, default=str)
    headers = {
        "Host": config.host,
        "content-type": "application/json",
    }
    url = _url(address or config.host, config.path)

    try:
        resp = session_for(config.host).post(
            url,
            data=body.encode("utf-8"),
            headers=headers,
            timeout=config.timeout_seconds,
        )
        # Non-streaming request: the body has already been read in full.
        return TransportResponse(status_code=resp.status_code, body=resp.text)
    except requests.RequestException as exc:
        raise TransportError(f"POST {url} failed: {exc}", cause=exc) from exc
