"""
Registration data models.

A registration binds a consumer, either a webhook (push) or a journal
feed (pull), to one or more (provider_id, event_code) pairs.

Lifecycle, as driven by the service:

    PENDING --(webhook handshake)--> VERIFIED        (journal: VERIFIED at creation)
    integration_status: ENABLED <--> DISABLED        (independent of status)
    delete                                           (terminal, no longer found)

Instances are frozen snapshots; every lifecycle step yields a new one.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union
from urllib.parse import urlparse

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ..exceptions import InvalidArgumentError


class _LenientEnum(str, Enum):
    """Matches values case-insensitively ("VERIFIED" == "verified")."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class DeliveryType(_LenientEnum):
    WEBHOOK = "webhook"
    JOURNAL = "journal"


class Status(_LenientEnum):
    """Verification status of a registration."""

    VERIFIED = "verified"
    PENDING = "pending"
    UNVERIFIED = "unverified"
    HOOK_UNREACHABLE = "hook_unreachable"
    DISABLED = "disabled"


class IntegrationStatus(_LenientEnum):
    ENABLED = "enabled"
    DISABLED = "disabled"


def is_secure_url(url: Optional[str]) -> bool:
    """True for an absolute https URL with a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme == "https" and bool(parsed.netloc)


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class EventsOfInterest(BaseModel):
    """One (provider_id, event_code) subscription pair."""

    model_config = ConfigDict(frozen=True)

    provider_id: str = Field(..., min_length=1)
    event_code: str = Field(..., min_length=1)


EventOfInterestLike = Union[EventsOfInterest, Tuple[str, str], Dict[str, str]]


def _to_event_of_interest(item: EventOfInterestLike) -> EventsOfInterest:
    if isinstance(item, EventsOfInterest):
        return item
    if isinstance(item, tuple):
        provider_id, event_code = item
        return EventsOfInterest(provider_id=provider_id, event_code=event_code)
    return EventsOfInterest.model_validate(item)


# =============================================================================
# Registration (service snapshot)
# =============================================================================

class Registration(BaseModel):
    """
    Registration as returned by the management service.

    Validation enforces delivery-type consistency: journal registrations
    carry https journal and trace URLs and no webhook URL, webhook
    registrations carry a webhook URL and no journal or trace URL.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    registration_id: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    delivery_type: DeliveryType
    events_of_interest: FrozenSet[EventsOfInterest] = Field(default_factory=frozenset)
    status: Status = Field(
        default=Status.PENDING,
        validation_alias=AliasChoices("status", "webhook_status")
    )
    integration_status: IntegrationStatus = IntegrationStatus.ENABLED
    webhook_url: Optional[str] = None
    journal_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("journal_url", "events_url")
    )
    trace_url: Optional[str] = None
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None

    @field_validator("delivery_type", "status", "integration_status", mode="before")
    @classmethod
    def _lower_enum_values(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_delivery_urls(self) -> "Registration":
        if self.delivery_type == DeliveryType.JOURNAL:
            if self.webhook_url:
                raise ValueError("journal registration must not carry a webhook_url")
            if not is_secure_url(self.journal_url):
                raise ValueError(f"journal_url is not a secure URL: {self.journal_url!r}")
            if not is_secure_url(self.trace_url):
                raise ValueError(f"trace_url is not a secure URL: {self.trace_url!r}")
        else:
            if not self.webhook_url:
                raise ValueError("webhook registration is missing webhook_url")
            if self.journal_url or self.trace_url:
                raise ValueError("webhook registration must not carry journal or trace URLs")
        return self

    @property
    def is_verified(self) -> bool:
        return self.status == Status.VERIFIED

    @property
    def is_enabled(self) -> bool:
        return self.integration_status == IntegrationStatus.ENABLED

    @property
    def is_pristine(self) -> bool:
        """True when the snapshot has never been updated since creation."""
        return self.created_date is not None and self.created_date == self.updated_date


# =============================================================================
# Registration input
# =============================================================================

class RegistrationInputModel(BaseModel):
    """
    Payload for creating a registration.

    Prefer registration_input(), which infers delivery_type and reports
    problems as InvalidArgumentError.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    delivery_type: DeliveryType
    events_of_interest: FrozenSet[EventsOfInterest] = Field(..., min_length=1)
    webhook_url: Optional[str] = None

    @model_validator(mode="after")
    def _check_delivery_type(self) -> "RegistrationInputModel":
        if self.delivery_type == DeliveryType.WEBHOOK:
            if not self.webhook_url or not _is_http_url(self.webhook_url):
                raise ValueError(f"webhook registration needs an http(s) webhook_url: {self.webhook_url!r}")
        elif self.webhook_url:
            raise ValueError("journal registration must not carry a webhook_url")
        return self

    def to_request_body(self, client_id: str) -> Dict[str, Any]:
        """JSON body for the create call; pairs are sorted for a stable payload."""
        body: Dict[str, Any] = {
            "client_id": client_id,
            "name": self.name,
            "description": self.description,
            "delivery_type": self.delivery_type.value,
            "events_of_interest": [
                {"provider_id": e.provider_id, "event_code": e.event_code}
                for e in sorted(self.events_of_interest, key=lambda e: (e.provider_id, e.event_code))
            ],
        }
        if self.webhook_url:
            body["webhook_url"] = self.webhook_url
        return body


def registration_input(
    name: str,
    events_of_interest: Iterable[EventOfInterestLike],
    description: Optional[str] = None,
    webhook_url: Optional[str] = None
) -> RegistrationInputModel:
    """
    Build a validated RegistrationInputModel.

    delivery_type is WEBHOOK when webhook_url is given, JOURNAL otherwise.
    Duplicate pairs collapse into one.

    Args:
        name: Registration name
        events_of_interest: EventsOfInterest, (provider_id, event_code)
            tuples or equivalent dicts; at least one
        description: Optional description
        webhook_url: Push endpoint, for webhook delivery

    Raises:
        InvalidArgumentError: If any field is invalid
    """
    try:
        pairs = frozenset(_to_event_of_interest(item) for item in events_of_interest or ())
        return RegistrationInputModel(
            name=name,
            description=description,
            delivery_type=DeliveryType.WEBHOOK if webhook_url else DeliveryType.JOURNAL,
            events_of_interest=pairs,
            webhook_url=webhook_url
        )
    except (ValidationError, ValueError, TypeError) as e:
        raise InvalidArgumentError(f"Invalid registration input: {e}") from e
