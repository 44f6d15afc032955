"""
Shared plumbing for the publish and registration clients.
"""
import logging
from typing import Dict, Optional

from .auth import JwtTokenIssuer, RequestChain, TokenIssuer, build_request_chain
from .exceptions import InvalidArgumentError, RemoteServiceError
from .transport import HttpResponse, HttpTransport, OutboundRequest, RequestsTransport
from .utils.logger import PerformanceLogger
from .workspace import Workspace

logger = logging.getLogger(__name__)


class BaseClient:
    """
    Validates the workspace, wires the transport and builds the request
    chain once. Nothing here changes after __init__.
    """

    #: Endpoint used when no URL override is given
    DEFAULT_URL: str = ""

    def __init__(
        self,
        workspace: Workspace,
        url: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
        token_issuer: Optional[TokenIssuer] = None,
        owns_transport: bool = False
    ):
        """
        Args:
            workspace: Tenant and credential context
            url: Base URL override; defaults to DEFAULT_URL
            transport: HTTP transport; a RequestsTransport is created if omitted
            token_issuer: Token source; a JwtTokenIssuer is created if omitted
            owns_transport: Close a passed-in transport on close()

        Raises:
            InvalidArgumentError: If workspace is None
            InvalidContextError: If the workspace fails validation
        """
        if workspace is None:
            raise InvalidArgumentError(f"{type(self).__name__} is missing a workspace context")
        workspace.validate_context()

        self.workspace = workspace
        self.url = (url or self.DEFAULT_URL).rstrip("/")
        if token_issuer is None:
            # before any transport (and its session) exists
            workspace.validate_jwt_credentials()
        self._owns_transport = transport is None or owns_transport
        self.transport = transport if transport is not None else RequestsTransport()
        if token_issuer is None:
            token_issuer = JwtTokenIssuer(workspace, self.transport)
        self.chain: RequestChain = build_request_chain(workspace, token_issuer)

        logger.debug(f"Initialized {type(self).__name__} against {self.url}")

    def _send(
        self,
        operation: str,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
        **context: str
    ) -> HttpResponse:
        request = self.chain.apply(
            OutboundRequest(method=method, url=url, headers=dict(headers or {}), body=body)
        )
        with PerformanceLogger(operation, logger, **context):
            return self.transport.send(request)

    @staticmethod
    def _raise_for_status(operation: str, response: HttpResponse) -> None:
        if not response.ok:
            raise RemoteServiceError(
                f"{operation} failed", status_code=response.status, body=response.body
            )

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
