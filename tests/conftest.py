"""
Shared pytest fixtures for the AIO events client tests.
"""
import json
import sys
from pathlib import Path
from typing import Callable, List, Optional
from uuid import uuid4

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from aio_events.auth import StaticTokenIssuer  # noqa: E402
from aio_events.transport import HttpResponse, OutboundRequest  # noqa: E402
from aio_events.utils.config_manager import ConfigManager  # noqa: E402
from aio_events.workspace import Workspace  # noqa: E402


class FakeTransport:
    """
    In-memory HttpTransport.

    Responses come from ``handler`` when set, otherwise from the queued
    ``responses`` (default: 200 with empty body). Every request is recorded.
    """

    def __init__(self, handler: Optional[Callable[[OutboundRequest], HttpResponse]] = None):
        self.handler = handler
        self.responses: List[HttpResponse] = []
        self.requests: List[OutboundRequest] = []
        self.closed = False

    def queue(self, status: int, body: str = "") -> None:
        self.responses.append(HttpResponse(status=status, body=body))

    def send(self, request: OutboundRequest) -> HttpResponse:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if self.responses:
            return self.responses.pop(0)
        return HttpResponse(status=200, body="")

    def close(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> OutboundRequest:
        return self.requests[-1]


class FakeRegistrationService:
    """Minimal stateful stand-in for the registrations endpoint."""

    def __init__(self):
        self.registrations = {}

    def __call__(self, request: OutboundRequest) -> HttpResponse:
        path = request.url.split("/registrations", 1)[1]
        if request.method == "POST" and not path:
            return self._create(json.loads(request.body))
        registration_id = path.lstrip("/")
        if request.method == "GET":
            if registration_id not in self.registrations:
                return HttpResponse(status=404, body='{"error": "not found"}')
            return HttpResponse(status=200, body=json.dumps(self.registrations[registration_id]))
        if request.method == "DELETE":
            if self.registrations.pop(registration_id, None) is None:
                return HttpResponse(status=404, body="")
            return HttpResponse(status=204, body="")
        return HttpResponse(status=405, body="")

    def _create(self, body: dict) -> HttpResponse:
        registration_id = uuid4().hex
        journal = body["delivery_type"] == "journal"
        created = {
            "registration_id": registration_id,
            "client_id": body["client_id"],
            "name": body["name"],
            "description": body["description"],
            "delivery_type": body["delivery_type"],
            "events_of_interest": body["events_of_interest"],
            "webhook_status": "verified" if journal else "pending",
            "integration_status": "enabled",
            "webhook_url": body.get("webhook_url"),
            "events_url": f"https://events-va6.adobe.io/events/{registration_id}" if journal else None,
            "trace_url": f"https://eventtraces-va6.adobe.io/{registration_id}" if journal else None,
            "created_date": "2024-06-01T10:00:00.000Z",
            "updated_date": "2024-06-01T10:00:00.000Z",
        }
        self.registrations[registration_id] = created
        return HttpResponse(status=201, body=json.dumps(created))


@pytest.fixture
def workspace():
    """Fully populated workspace context."""
    return Workspace(
        ims_org_id="C74F69D7594880280A495D09@AdobeOrg",
        api_key="test-api-key",
        consumer_org_id="105979",
        project_id="4566206088344794932",
        workspace_id="4566206088344859372",
        credential_id="135790",
        technical_account_id="test-tech-account@techacct.adobe.com",
        client_secret="test-client-secret",
        meta_scopes=["ent_adobeio_sdk"]
    )


@pytest.fixture
def token_issuer():
    return StaticTokenIssuer("test-access-token")


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def registration_service():
    return FakeRegistrationService()


@pytest.fixture
def service_transport(registration_service):
    return FakeTransport(handler=registration_service)


@pytest.fixture
def journal_registration_json():
    """Registration body as returned by the management service."""
    return {
        "registration_id": "reg-123",
        "client_id": "test-api-key",
        "name": "Orders journal",
        "description": "Order events",
        "delivery_type": "journal",
        "events_of_interest": [
            {"provider_id": "provider-1", "event_code": "com.acme.order.created"}
        ],
        "webhook_status": "verified",
        "integration_status": "enabled",
        "events_url": "https://events-va6.adobe.io/events/reg-123",
        "trace_url": "https://eventtraces-va6.adobe.io/reg-123",
        "created_date": "2024-06-01T10:00:00.000Z",
        "updated_date": "2024-06-01T10:00:00.000Z"
    }


@pytest.fixture
def rsa_private_key_pem():
    """Throwaway RSA key for JWT signing tests."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("utf-8")


@pytest.fixture(autouse=True)
def reset_config_manager():
    ConfigManager.reset()
    yield
    ConfigManager.reset()
