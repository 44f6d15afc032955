"""
Client library for publishing events and managing event registrations.
"""
from .exceptions import (
    AIOError,
    AuthFailureError,
    InvalidArgumentError,
    InvalidContextError,
    MalformedPayloadError,
    RemoteServiceError,
    TransportError,
)
from .management import (
    Found,
    NotFound,
    Registration,
    RegistrationClient,
    registration_input,
)
from .payload import JsonNode, normalize
from .publish import CloudEvent, PublishClient
from .workspace import Workspace

__version__ = "1.0.0"

__all__ = [
    "AIOError",
    "AuthFailureError",
    "CloudEvent",
    "Found",
    "InvalidArgumentError",
    "InvalidContextError",
    "JsonNode",
    "MalformedPayloadError",
    "NotFound",
    "PublishClient",
    "Registration",
    "RegistrationClient",
    "RemoteServiceError",
    "TransportError",
    "Workspace",
    "normalize",
    "registration_input",
]
