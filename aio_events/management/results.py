"""
Lookup results: a registration was either found or legitimately absent.

Errors never travel through these types; they are raised.
"""
from dataclasses import dataclass
from typing import Union

from .models import Registration


@dataclass(frozen=True)
class Found:
    registration: Registration

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """The service has no such registration (or created none)."""

    def __bool__(self) -> bool:
        return False


NOT_FOUND = NotFound()

RegistrationLookup = Union[Found, NotFound]
