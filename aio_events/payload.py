"""
Payload normalization for event bodies.

Callers may hand over either a JSON-encoded object or any plain string.
normalize() turns both into a JsonNode without the caller having to
classify the input first:

- empty or None        -> empty OBJECT node
- starts with "{"      -> parsed JSON (MalformedPayloadError on failure)
- anything else        -> TEXT leaf holding the string verbatim

Only characters up to U+0020 count as leading whitespace; a payload
starting with, say, a no-break space is text.
"""
import json
import math
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .exceptions import InvalidArgumentError, MalformedPayloadError

# U+0000 through U+0020
_LEADING_BLANKS = "".join(chr(c) for c in range(0x21))


class NodeKind(str, Enum):
    """Closed set of JSON node kinds."""

    OBJECT = "object"
    ARRAY = "array"
    TEXT = "text"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"


def _freeze(value: Any) -> Any:
    """Deep read-only copy: mappings become MappingProxyType, arrays tuples."""
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"JSON has no representation for {value!r}")
        return value
    if isinstance(value, Mapping):
        frozen = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"JSON object keys must be strings, got {type(key).__name__}")
            frozen[key] = _freeze(item)
        return MappingProxyType(frozen)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    raise TypeError(f"Unsupported JSON value type: {type(value).__name__}")


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


class JsonNode(BaseModel):
    """
    Immutable, tagged JSON value.

    ``value`` is a read-only view matching ``kind``: a MappingProxyType for
    OBJECT, a tuple for ARRAY, otherwise str, int/float, bool or None.
    to_value() returns a fresh, mutable dict/list copy.
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    value: Any = None

    @field_validator("value")
    @classmethod
    def _freeze_value(cls, v: Any) -> Any:
        return _freeze(v)

    def __hash__(self) -> int:
        return hash((self.kind, json.dumps(self.to_value(), sort_keys=True)))

    @classmethod
    def empty_object(cls) -> "JsonNode":
        return cls(kind=NodeKind.OBJECT, value={})

    @classmethod
    def text(cls, value: str) -> "JsonNode":
        return cls(kind=NodeKind.TEXT, value=value)

    @classmethod
    def from_value(cls, value: Any) -> "JsonNode":
        """
        Wrap an already-decoded Python value.

        Args:
            value: Result of json.loads or an equivalent literal

        Returns:
            JsonNode tagged with the matching kind

        Raises:
            TypeError: If value is not representable as JSON
            ValueError: If value holds NaN or an infinity
        """
        # bool before number: bool is a subclass of int
        if value is None:
            kind = NodeKind.NULL
        elif isinstance(value, bool):
            kind = NodeKind.BOOL
        elif isinstance(value, (int, float)):
            kind = NodeKind.NUMBER
        elif isinstance(value, str):
            kind = NodeKind.TEXT
        elif isinstance(value, Mapping):
            kind = NodeKind.OBJECT
        elif isinstance(value, (list, tuple)):
            kind = NodeKind.ARRAY
        else:
            raise TypeError(f"Unsupported JSON value type: {type(value).__name__}")
        return cls(kind=kind, value=value)

    @property
    def is_object(self) -> bool:
        return self.kind == NodeKind.OBJECT

    @property
    def is_text(self) -> bool:
        return self.kind == NodeKind.TEXT

    def to_value(self) -> Any:
        """Plain, mutable Python value, ready for json.dumps."""
        return _thaw(self.value)

    def to_json(self) -> str:
        """Serialize to a JSON document."""
        return json.dumps(self.to_value(), ensure_ascii=False, allow_nan=False)


def parse(document: str) -> JsonNode:
    """
    Parse a JSON document into a JsonNode.

    NaN, Infinity and -Infinity are rejected, as are numbers that overflow
    to an infinity.

    Raises:
        MalformedPayloadError: If the document is not valid JSON
    """
    try:
        return JsonNode.from_value(json.loads(document, parse_constant=_reject_constant))
    except ValueError as e:
        raise MalformedPayloadError(f"Invalid event json payload: {e}", parser_message=str(e)) from e


def normalize(raw: Optional[str]) -> JsonNode:
    """
    Normalize a raw string payload into a JsonNode.

    Args:
        raw: Event body as given by the caller

    Returns:
        Empty OBJECT for empty input, parsed JSON for input starting
        with "{" (after leading blanks), TEXT otherwise

    Raises:
        MalformedPayloadError: If input starting with "{" is not valid JSON
    """
    if not raw:
        return JsonNode.empty_object()
    if raw.lstrip(_LEADING_BLANKS).startswith("{"):
        return parse(raw)
    return JsonNode.text(raw)


def coerce(data: Any) -> JsonNode:
    """
    Accept a JsonNode, a string or an already-decoded value.

    Strings go through normalize(); other values are wrapped as-is.

    Raises:
        MalformedPayloadError: If a string looks like JSON but is not
        InvalidArgumentError: If a decoded value is not representable as JSON
    """
    if isinstance(data, JsonNode):
        return data
    if data is None or isinstance(data, str):
        return normalize(data)
    try:
        return JsonNode.from_value(data)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Unsupported event data: {e}") from e
