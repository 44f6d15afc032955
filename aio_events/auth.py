"""
Authenticated request building.

Outbound requests pass through an ordered chain of decorator functions
before dispatch. The default chain attaches a bearer token obtained from a
TokenIssuer, then the fixed workspace headers.
"""
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple, runtime_checkable
from urllib.parse import urlencode

import jwt

from .exceptions import AuthFailureError, InvalidArgumentError
from .transport import HttpTransport, OutboundRequest
from .workspace import Workspace

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
IMS_ORG_HEADER = "x-ims-org-id"
API_KEY_HEADER = "x-api-key"
CONSUMER_ORG_HEADER = "x-consumer-org-id"
PROJECT_HEADER = "x-project-id"

JWT_EXCHANGE_PATH = "/ims/exchange/jwt"
JWT_LIFETIME_SECONDS = 24 * 60 * 60
TOKEN_REFRESH_MARGIN_SECONDS = 60

RequestDecorator = Callable[[OutboundRequest], OutboundRequest]


# =============================================================================
# Token issuers
# =============================================================================

@runtime_checkable
class TokenIssuer(Protocol):
    def get_token(self, workspace: Workspace) -> str:
        """
        Raises:
            AuthFailureError: If no token can be issued
        """
        ...


class StaticTokenIssuer:
    """Hands out a pre-obtained access token."""

    def __init__(self, access_token: str):
        if not access_token:
            raise InvalidArgumentError("StaticTokenIssuer requires an access token")
        self._access_token = access_token

    def get_token(self, workspace: Workspace) -> str:
        return self._access_token


class JwtTokenIssuer:
    """
    Obtains access tokens through the IMS JWT exchange.

    A JWT is signed (RS256) with the workspace private key and traded for
    an access token, which is cached until shortly before it expires.
    """

    def __init__(self, workspace: Workspace, transport: HttpTransport):
        """
        Args:
            workspace: Context holding the JWT credential material
            transport: Transport used for the exchange call

        Raises:
            InvalidContextError: If credential material is missing
        """
        workspace.validate_jwt_credentials()
        self.workspace = workspace
        self.transport = transport
        self._lock = threading.Lock()
        self._access_token: Optional[str] = None
        self._expires_at = 0.0

    def get_token(self, workspace: Workspace) -> str:
        with self._lock:
            if self._access_token and time.time() < self._expires_at:
                return self._access_token
            self._access_token, self._expires_at = self._exchange(workspace)
            return self._access_token

    def build_jwt(self, workspace: Workspace, now: Optional[float] = None) -> str:
        """Sign the JWT presented to the exchange endpoint."""
        now = time.time() if now is None else now
        ims_url = workspace.ims_url.rstrip("/")
        claims = {
            "exp": int(now) + JWT_LIFETIME_SECONDS,
            "iss": workspace.ims_org_id,
            "sub": workspace.technical_account_id,
            "aud": f"{ims_url}/c/{workspace.api_key}",
        }
        for scope in workspace.meta_scopes:
            claims[f"{ims_url}/s/{scope}"] = True
        try:
            return jwt.encode(claims, workspace.private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise AuthFailureError(f"Unable to sign JWT: {e}") from e

    def _exchange(self, workspace: Workspace) -> Tuple[str, float]:
        url = workspace.ims_url.rstrip("/") + JWT_EXCHANGE_PATH
        body = urlencode({
            "client_id": workspace.api_key,
            "client_secret": workspace.client_secret,
            "jwt_token": self.build_jwt(workspace),
        })
        request = OutboundRequest(
            method="POST",
            url=url,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=body
        )

        response = self.transport.send(request)
        if not response.ok:
            raise AuthFailureError(
                f"IMS JWT exchange failed with status {response.status}: {response.body[:200]}"
            )
        try:
            payload = json.loads(response.body)
            access_token = payload["access_token"]
            # IMS reports expires_in in milliseconds
            expires_in = float(payload.get("expires_in", 0)) / 1000.0
        except (ValueError, KeyError, TypeError) as e:
            raise AuthFailureError(f"Unexpected IMS JWT exchange response: {e}") from e

        expires_at = time.time() + max(expires_in - TOKEN_REFRESH_MARGIN_SECONDS, 0)
        logger.info(
            "Obtained IMS access token",
            extra={"ims_org_id": workspace.ims_org_id, "expires_in_s": round(expires_in)}
        )
        return access_token, expires_at


# =============================================================================
# Request decorators
# =============================================================================

def bearer_token(workspace: Workspace, token_issuer: TokenIssuer) -> RequestDecorator:
    """Decorator attaching ``Authorization: Bearer <token>``."""

    def decorate(request: OutboundRequest) -> OutboundRequest:
        token = token_issuer.get_token(workspace)
        return request.with_headers({AUTHORIZATION_HEADER: f"Bearer {token}"})

    return decorate


def workspace_headers(workspace: Workspace) -> RequestDecorator:
    """Decorator attaching the fixed organization headers."""
    headers: Dict[str, str] = {
        IMS_ORG_HEADER: workspace.ims_org_id,
        API_KEY_HEADER: workspace.api_key,
        CONSUMER_ORG_HEADER: workspace.consumer_org_id,
        PROJECT_HEADER: workspace.project_id,
    }

    def decorate(request: OutboundRequest) -> OutboundRequest:
        return request.with_headers(headers)

    return decorate


@dataclass(frozen=True)
class RequestChain:
    """Ordered, immutable list of request decorators."""

    decorators: Tuple[RequestDecorator, ...] = ()

    def apply(self, request: OutboundRequest) -> OutboundRequest:
        for decorate in self.decorators:
            request = decorate(request)
        return request

    def then(self, decorator: RequestDecorator) -> "RequestChain":
        return RequestChain(self.decorators + (decorator,))


def build_request_chain(workspace: Workspace, token_issuer: TokenIssuer) -> RequestChain:
    """
    Build the default chain for a workspace.

    Raises:
        InvalidArgumentError: If workspace is None
        InvalidContextError: If the workspace fails validation
    """
    if workspace is None:
        raise InvalidArgumentError("Request chain requires a workspace context")
    workspace.validate_context()
    return RequestChain((
        bearer_token(workspace, token_issuer),
        workspace_headers(workspace),
    ))
