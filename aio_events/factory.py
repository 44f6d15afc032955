"""
Factory functions building clients from configuration.
"""
import logging
from typing import Optional, Type, TypeVar

from .auth import StaticTokenIssuer, TokenIssuer
from .client import BaseClient
from .exceptions import AIOError
from .management import RegistrationClient
from .publish import PublishClient
from .transport import RequestsTransport
from .utils.config_manager import Settings
from .workspace import Workspace

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound=BaseClient)


def create_transport(config: Settings) -> RequestsTransport:
    transport_config = config.transport
    return RequestsTransport(
        timeout_seconds=transport_config.timeout_seconds,
        pool_connections=transport_config.pool_connections,
        pool_maxsize=transport_config.pool_maxsize,
        verify_ssl=transport_config.verify_ssl
    )


def _token_issuer(config: Settings) -> Optional[TokenIssuer]:
    # None lets the client fall back to the JWT exchange
    if config.workspace.access_token:
        logger.info("Using pre-obtained access token")
        return StaticTokenIssuer(config.workspace.access_token)
    return None


def _build_client(client_class: Type[ClientT], config: Settings, url: Optional[str]) -> ClientT:
    workspace = Workspace.from_settings(config.workspace)
    workspace.validate_context()
    token_issuer = _token_issuer(config)
    if token_issuer is None:
        workspace.validate_jwt_credentials()

    transport = create_transport(config)
    try:
        return client_class(
            workspace,
            url=url,
            transport=transport,
            token_issuer=token_issuer,
            owns_transport=True
        )
    except AIOError:
        transport.close()
        raise


def create_publish_client(config: Settings) -> PublishClient:
    """
    Create a PublishClient from configuration.

    Args:
        config: Settings with workspace, publish and transport sections

    Returns:
        PublishClient owning its transport

    Raises:
        InvalidContextError: If the workspace section is incomplete
    """
    return _build_client(PublishClient, config, config.publish.url)


def create_registration_client(config: Settings) -> RegistrationClient:
    """
    Create a RegistrationClient from configuration.

    Raises:
        InvalidContextError: If the workspace section is incomplete
    """
    return _build_client(RegistrationClient, config, config.management.url)
