"""
Registration lifecycle management.
"""
from .client import RegistrationClient
from .models import (
    DeliveryType,
    EventsOfInterest,
    IntegrationStatus,
    Registration,
    RegistrationInputModel,
    Status,
    registration_input,
)
from .results import NOT_FOUND, Found, NotFound, RegistrationLookup

__all__ = [
    "DeliveryType",
    "EventsOfInterest",
    "Found",
    "IntegrationStatus",
    "NOT_FOUND",
    "NotFound",
    "Registration",
    "RegistrationClient",
    "RegistrationInputModel",
    "RegistrationLookup",
    "Status",
    "registration_input",
]
