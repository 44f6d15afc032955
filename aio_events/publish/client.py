"""
Publish client for the events ingress endpoint.
"""
import logging
from typing import Any, Optional

from ..client import BaseClient
from ..exceptions import InvalidArgumentError
from ..payload import coerce, normalize
from .models import CloudEvent

logger = logging.getLogger(__name__)

DEFAULT_PUBLISH_URL = "https://eventsingress.adobe.io"
EVENTS_PATH = "/api/events"

CLOUDEVENTS_CONTENT_TYPE = "application/cloudevents+json"
JSON_CONTENT_TYPE = "application/json"
PROVIDER_ID_HEADER = "x-adobe-event-provider-id"
EVENT_CODE_HEADER = "x-adobe-event-code"


class PublishClient(BaseClient):
    """
    Publishes CloudEvents and raw events on behalf of a workspace.

    Example:
        with PublishClient(workspace) as client:
            client.publish_cloud_event("provider-id", "com.acme.order.created", '{"id": 1}')
    """

    DEFAULT_URL = DEFAULT_PUBLISH_URL

    def publish_cloud_event(
        self,
        provider_id: str,
        event_code: str,
        data: Any = None,
        event_id: Optional[str] = None
    ) -> CloudEvent:
        """
        Publish a CloudEvent.

        Args:
            provider_id: Provider the event originates from
            event_code: Event type code
            data: Payload; strings are normalized, JsonNode and decoded
                values are used as-is
            event_id: Optional event id; assigned by the service if omitted

        Returns:
            The event as sent

        Raises:
            InvalidArgumentError: If provider_id or event_code is empty
            MalformedPayloadError: If string data looks like JSON but is not
            RemoteServiceError: If the service rejects the event
        """
        self._check_event_target(provider_id, event_code)
        event = CloudEvent(
            provider_id=provider_id,
            event_code=event_code,
            event_id=event_id,
            data=coerce(data)
        )

        response = self._send(
            "publish_cloud_event",
            "POST",
            self.url + EVENTS_PATH,
            headers={"Content-Type": CLOUDEVENTS_CONTENT_TYPE},
            body=event.to_json(),
            provider_id=provider_id,
            event_code=event_code
        )
        self._raise_for_status("publish_cloud_event", response)

        logger.info(
            "CloudEvent published",
            extra={"provider_id": provider_id, "event_code": event_code, "event_id": event_id}
        )
        return event

    def publish_raw_event(self, provider_id: str, event_code: str, raw_event: Optional[str]) -> None:
        """
        Publish a bare payload without a CloudEvent envelope.

        Raises:
            InvalidArgumentError: If provider_id or event_code is empty
            MalformedPayloadError: If raw_event looks like JSON but is not
            RemoteServiceError: If the service rejects the event
        """
        self._check_event_target(provider_id, event_code)
        payload = normalize(raw_event)

        response = self._send(
            "publish_raw_event",
            "POST",
            self.url + EVENTS_PATH,
            headers={
                "Content-Type": JSON_CONTENT_TYPE,
                PROVIDER_ID_HEADER: provider_id,
                EVENT_CODE_HEADER: event_code,
            },
            body=payload.to_json(),
            provider_id=provider_id,
            event_code=event_code
        )
        self._raise_for_status("publish_raw_event", response)

        logger.info(
            "Raw event published",
            extra={"provider_id": provider_id, "event_code": event_code}
        )

    @staticmethod
    def _check_event_target(provider_id: str, event_code: str) -> None:
        if not provider_id:
            raise InvalidArgumentError("provider_id is required")
        if not event_code:
            raise InvalidArgumentError("event_code is required")
