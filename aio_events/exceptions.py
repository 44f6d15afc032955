"""
Exception hierarchy for the AIO events client.

Everything raised by this library derives from AIOError so callers can
catch the whole family at once. "Not found" is never an exception; lookups
return NotFound instead.
"""
from typing import Optional


class AIOError(Exception):
    """Base class for all client errors."""


class InvalidArgumentError(AIOError, ValueError):
    """A required argument is missing or invalid. Raised before any I/O."""


class InvalidContextError(AIOError):
    """The workspace context failed validation."""


class MalformedPayloadError(AIOError):
    """
    A payload that looks like JSON could not be parsed.

    The parser message is kept on ``parser_message``.
    """

    def __init__(self, message: str, parser_message: Optional[str] = None):
        super().__init__(message)
        self.parser_message = parser_message


class RemoteServiceError(AIOError):
    """
    The remote service answered with a non-2xx or unexpected response.

    Attributes:
        status_code: HTTP status of the response
        body: Raw response body
    """

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(f"{message} (status={status_code})")
        self.status_code = status_code
        self.body = body


class TransportError(AIOError):
    """Connection-level failure raised by the HTTP transport."""


class AuthFailureError(AIOError):
    """The token issuer could not obtain an access token."""
