"""
CloudEvents data model following the CloudEvents v1.0 specification.
"""
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..payload import JsonNode

SPEC_VERSION = "1.0"
SOURCE_PREFIX = "urn:uuid:"


class CloudEvent(BaseModel):
    """
    Event published to the ingress endpoint.

    Identity, for equality and hashing, is (provider_id, event_code,
    event_id). When event_id is None the service assigns one.

    See: https://github.com/cloudevents/spec/blob/v1.0/spec.md
    """

    model_config = ConfigDict(frozen=True)

    provider_id: str = Field(..., min_length=1, description="Event provider id")
    event_code: str = Field(..., min_length=1, description="Event type code")
    event_id: Optional[str] = Field(default=None, description="Unique event identifier")
    data: JsonNode = Field(default_factory=JsonNode.empty_object)
    datacontenttype: str = Field(default="application/json")

    def _identity(self):
        return (self.provider_id, self.event_code, self.event_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CloudEvent):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    @property
    def source(self) -> str:
        return f"{SOURCE_PREFIX}{self.provider_id}"

    @property
    def type(self) -> str:
        return self.event_code

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation; ``id`` is left out when not set."""
        event: Dict[str, Any] = {
            "specversion": SPEC_VERSION,
            "type": self.type,
            "source": self.source,
        }
        if self.event_id:
            event["id"] = self.event_id
        event["datacontenttype"] = self.datacontenttype
        event["data"] = self.data.to_value()
        return event

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, allow_nan=False)
