"""
HTTP transport for the publish and management clients.

The clients only see the HttpTransport protocol: send an OutboundRequest,
get back an HttpResponse. RequestsTransport is the default implementation
on top of a pooled requests.Session.
"""
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Protocol, runtime_checkable

import requests
from requests.adapters import HTTPAdapter

from .exceptions import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "aio-events-python/1.0"


@dataclass(frozen=True)
class OutboundRequest:
    """Request value passed through the decorator chain before dispatch."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def with_headers(self, headers: Dict[str, str]) -> "OutboundRequest":
        """Return a copy with ``headers`` merged over the current ones."""
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class HttpTransport(Protocol):
    """Sends a request and returns status and body."""

    def send(self, request: OutboundRequest) -> HttpResponse:
        """
        Raises:
            TransportError: On connection-level faults
        """
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """
    Transport backed by requests.Session.

    Non-2xx responses are returned, not raised; the clients decide what a
    status means.
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        pool_connections: int = 10,
        pool_maxsize: int = 10,
        verify_ssl: bool = True
    ):
        """
        Initialize the transport.

        Args:
            timeout_seconds: Per-request timeout
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum connections per pool
            verify_ssl: Verify SSL certificates
        """
        self.timeout = timeout_seconds
        self.verify_ssl = verify_ssl

        self.session = requests.Session()
        adapter = HTTPAdapter(pool_connections=pool_connections, pool_maxsize=pool_maxsize)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update({"User-Agent": USER_AGENT})

    def send(self, request: OutboundRequest) -> HttpResponse:
        start_time = time.time()
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body.encode("utf-8") if request.body is not None else None,
                timeout=self.timeout,
                verify=self.verify_ssl
            )
        except requests.Timeout as e:
            raise TransportError(f"Request timed out: {request.method} {request.url}") from e
        except requests.RequestException as e:
            raise TransportError(f"Request failed: {request.method} {request.url} - {e}") from e

        latency = (time.time() - start_time) * 1000  # ms
        logger.debug(
            "HTTP exchange completed",
            extra={
                "method": request.method,
                "url": request.url,
                "status_code": response.status_code,
                "latency_ms": round(latency, 2)
            }
        )
        return HttpResponse(status=response.status_code, body=response.text)

    def close(self) -> None:
        """Close HTTP session."""
        self.session.close()
        logger.debug("HTTP transport closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
