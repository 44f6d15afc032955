"""
Unit tests for registration models and the input factory.
"""
import pytest
from pydantic import ValidationError

from aio_events.exceptions import InvalidArgumentError
from aio_events.management.models import (
    DeliveryType,
    EventsOfInterest,
    IntegrationStatus,
    Registration,
    Status,
    is_secure_url,
    registration_input,
)


class TestEnums:

    def test_values_match_case_insensitively(self):
        assert Status("VERIFIED") is Status.VERIFIED
        assert DeliveryType("Journal") is DeliveryType.JOURNAL
        assert IntegrationStatus("enabled") is IntegrationStatus.ENABLED

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            Status("exploded")


class TestIsSecureUrl:

    @pytest.mark.parametrize("url, secure", [
        ("https://events.adobe.io/x", True),
        ("http://events.adobe.io/x", False),
        ("https://", False),
        ("not a url", False),
        (None, False),
        ("", False),
    ])
    def test_is_secure_url(self, url, secure):
        assert is_secure_url(url) is secure


class TestRegistration:
    """Test Registration parsing and invariants."""

    def test_parse_journal_registration(self, journal_registration_json):
        registration = Registration.model_validate(journal_registration_json)

        assert registration.registration_id == "reg-123"
        assert registration.delivery_type == DeliveryType.JOURNAL
        assert registration.status == Status.VERIFIED
        assert registration.integration_status == IntegrationStatus.ENABLED
        assert registration.webhook_url is None
        assert registration.journal_url == "https://events-va6.adobe.io/events/reg-123"
        assert registration.events_of_interest == frozenset({
            EventsOfInterest(provider_id="provider-1", event_code="com.acme.order.created")
        })
        assert registration.is_verified
        assert registration.is_enabled
        assert registration.is_pristine

    def test_uppercase_enum_values(self, journal_registration_json):
        journal_registration_json.update(
            delivery_type="JOURNAL", webhook_status="VERIFIED", integration_status="DISABLED"
        )
        registration = Registration.model_validate(journal_registration_json)

        assert registration.status == Status.VERIFIED
        assert registration.integration_status == IntegrationStatus.DISABLED
        assert not registration.is_enabled

    def test_duplicate_events_of_interest_collapse(self, journal_registration_json):
        pair = {"provider_id": "provider-1", "event_code": "com.acme.order.created"}
        journal_registration_json["events_of_interest"] = [pair, dict(pair)]

        registration = Registration.model_validate(journal_registration_json)

        assert len(registration.events_of_interest) == 1

    def test_updated_snapshot_is_not_pristine(self, journal_registration_json):
        journal_registration_json["updated_date"] = "2024-06-02T10:00:00.000Z"

        assert not Registration.model_validate(journal_registration_json).is_pristine

    @pytest.mark.parametrize("field, value", [
        ("events_url", None),
        ("trace_url", None),
        ("events_url", "http://events-va6.adobe.io/events/reg-123"),
        ("trace_url", "ftp://traces.adobe.io/reg-123"),
        ("webhook_url", "https://hooks.example.com"),
    ])
    def test_journal_url_invariants(self, journal_registration_json, field, value):
        journal_registration_json[field] = value

        with pytest.raises(ValidationError):
            Registration.model_validate(journal_registration_json)

    def test_webhook_registration(self, journal_registration_json):
        journal_registration_json.update(
            delivery_type="webhook",
            webhook_status="pending",
            webhook_url="https://hooks.example.com/events",
            events_url=None,
            trace_url=None
        )
        registration = Registration.model_validate(journal_registration_json)

        assert registration.delivery_type == DeliveryType.WEBHOOK
        assert registration.status == Status.PENDING
        assert not registration.is_verified

    def test_webhook_registration_without_url(self, journal_registration_json):
        journal_registration_json.update(delivery_type="webhook", events_url=None, trace_url=None)

        with pytest.raises(ValidationError, match="webhook_url"):
            Registration.model_validate(journal_registration_json)

    def test_webhook_registration_with_journal_urls(self, journal_registration_json):
        journal_registration_json.update(
            delivery_type="webhook", webhook_url="https://hooks.example.com/events"
        )

        with pytest.raises(ValidationError):
            Registration.model_validate(journal_registration_json)

    def test_registration_is_immutable(self, journal_registration_json):
        registration = Registration.model_validate(journal_registration_json)

        with pytest.raises(ValidationError):
            registration.status = Status.PENDING


class TestRegistrationInput:
    """Test registration_input()."""

    def test_journal_input(self):
        model = registration_input(
            name="Orders",
            description="Order events",
            events_of_interest=[("provider-1", "com.acme.order.created")]
        )

        assert model.delivery_type == DeliveryType.JOURNAL
        assert model.webhook_url is None

    def test_webhook_input(self):
        model = registration_input(
            name="Orders",
            events_of_interest=[EventsOfInterest(provider_id="p1", event_code="e1")],
            webhook_url="https://hooks.example.com/events"
        )

        assert model.delivery_type == DeliveryType.WEBHOOK

    def test_accepts_dict_pairs_and_dedupes(self):
        model = registration_input(
            name="Orders",
            events_of_interest=[
                {"provider_id": "p1", "event_code": "e1"},
                ("p1", "e1"),
                ("p1", "e2"),
            ]
        )

        assert len(model.events_of_interest) == 2

    @pytest.mark.parametrize("events", [[], None])
    def test_requires_an_event_of_interest(self, events):
        with pytest.raises(InvalidArgumentError):
            registration_input(name="Orders", events_of_interest=events)

    def test_requires_name(self):
        with pytest.raises(InvalidArgumentError):
            registration_input(name="", events_of_interest=[("p1", "e1")])

    def test_rejects_bad_webhook_url(self):
        with pytest.raises(InvalidArgumentError):
            registration_input(name="Orders", events_of_interest=[("p1", "e1")], webhook_url="not-a-url")

    def test_rejects_malformed_pair(self):
        with pytest.raises(InvalidArgumentError):
            registration_input(name="Orders", events_of_interest=[("p1",)])

    def test_request_body(self):
        model = registration_input(
            name="Orders",
            description="Order events",
            events_of_interest=[("p2", "e1"), ("p1", "e2"), ("p1", "e1")],
            webhook_url="https://hooks.example.com/events"
        )

        assert model.to_request_body(client_id="api-key") == {
            "client_id": "api-key",
            "name": "Orders",
            "description": "Order events",
            "delivery_type": "webhook",
            "events_of_interest": [
                {"provider_id": "p1", "event_code": "e1"},
                {"provider_id": "p1", "event_code": "e2"},
                {"provider_id": "p2", "event_code": "e1"},
            ],
            "webhook_url": "https://hooks.example.com/events",
        }
