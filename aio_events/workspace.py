"""
Workspace context: the tenant and credential bundle every request is
authenticated and attributed with.
"""
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidContextError

logger = logging.getLogger(__name__)

DEFAULT_IMS_URL = "https://ims-na1.adobelogin.com"


class Workspace(BaseModel):
    """
    Immutable workspace context shared read-only by all clients.

    The organization fields scope every call; the credential fields are
    only needed by the JWT token issuer.
    """

    model_config = ConfigDict(frozen=True)

    ims_url: str = Field(default=DEFAULT_IMS_URL, description="IMS base URL")
    ims_org_id: Optional[str] = Field(default=None, description="IMS organization id")
    api_key: Optional[str] = Field(default=None, description="Client id / API key")
    consumer_org_id: Optional[str] = Field(default=None)
    project_id: Optional[str] = Field(default=None, description="Consumer namespace")
    workspace_id: Optional[str] = Field(default=None)

    # JWT credential material
    credential_id: Optional[str] = Field(default=None)
    technical_account_id: Optional[str] = Field(default=None)
    client_secret: Optional[str] = Field(default=None, repr=False)
    private_key: Optional[str] = Field(default=None, repr=False)
    meta_scopes: List[str] = Field(default_factory=list)

    def validate_context(self) -> None:
        """
        Check the fields every request needs.

        Raises:
            InvalidContextError: If an organization field is missing
        """
        self._require(
            "ims_org_id", "api_key", "consumer_org_id", "project_id", "workspace_id"
        )

    def validate_jwt_credentials(self) -> None:
        """
        Check the context plus the credential material for a JWT exchange.

        Raises:
            InvalidContextError: If any required field is missing
        """
        self.validate_context()
        self._require("ims_url", "technical_account_id", "client_secret", "private_key")
        if not self.meta_scopes:
            raise InvalidContextError("Workspace is missing meta_scopes")

    def _require(self, *names: str) -> None:
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise InvalidContextError(
                f"Workspace is missing required field(s): {', '.join(missing)}"
            )

    @classmethod
    def from_settings(cls, settings: Any) -> "Workspace":
        """
        Build a workspace from a WorkspaceSettings section.

        ``private_key_path`` is read when no inline ``private_key`` is set.

        Args:
            settings: WorkspaceSettings from the config manager

        Returns:
            Workspace instance (not yet validated)
        """
        private_key = settings.private_key
        if not private_key and settings.private_key_path:
            key_path = Path(settings.private_key_path)
            logger.debug(f"Reading private key from {key_path}")
            try:
                private_key = key_path.read_text(encoding="utf-8")
            except OSError as e:
                raise InvalidContextError(f"Cannot read private key file {key_path}: {e}") from e

        return cls(
            ims_url=settings.ims_url or DEFAULT_IMS_URL,
            ims_org_id=settings.ims_org_id,
            api_key=settings.api_key,
            consumer_org_id=settings.consumer_org_id,
            project_id=settings.project_id,
            workspace_id=settings.workspace_id,
            credential_id=settings.credential_id,
            technical_account_id=settings.technical_account_id,
            client_secret=settings.client_secret,
            private_key=private_key,
            meta_scopes=list(settings.meta_scopes),
        )
