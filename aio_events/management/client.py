"""
Registration client for the events management endpoint.
"""
import json
import logging
from typing import Optional
from urllib.parse import quote

from pydantic import ValidationError

from ..client import BaseClient
from ..exceptions import InvalidArgumentError, RemoteServiceError
from ..transport import HttpResponse
from .models import Registration, RegistrationInputModel
from .results import NOT_FOUND, Found, RegistrationLookup

logger = logging.getLogger(__name__)

DEFAULT_MANAGEMENT_URL = "https://api.adobe.io"
HAL_JSON = "application/hal+json"
JSON_CONTENT_TYPE = "application/json"


class RegistrationClient(BaseClient):
    """
    Create, look up and delete registrations of a workspace.

    Registrations live under
    ``/events/<consumer_org_id>/<project_id>/<workspace_id>/registrations``.
    """

    DEFAULT_URL = DEFAULT_MANAGEMENT_URL

    @property
    def registrations_url(self) -> str:
        ws = self.workspace
        return (
            f"{self.url}/events/{quote(ws.consumer_org_id, safe='')}"
            f"/{quote(ws.project_id, safe='')}/{quote(ws.workspace_id, safe='')}/registrations"
        )

    def registration_url(self, registration_id: str) -> str:
        return f"{self.registrations_url}/{quote(registration_id, safe='')}"

    def create_registration(self, input_model: RegistrationInputModel) -> RegistrationLookup:
        """
        Create a registration.

        A 2xx answer without a body means nothing was created and yields
        NotFound; callers must branch on the result.

        Args:
            input_model: Validated input, see registration_input()

        Returns:
            Found(registration) or NOT_FOUND

        Raises:
            InvalidArgumentError: If input_model is missing
            RemoteServiceError: On non-2xx, malformed or inconsistent responses
        """
        if not isinstance(input_model, RegistrationInputModel):
            raise InvalidArgumentError("create_registration requires a RegistrationInputModel")

        body = input_model.to_request_body(client_id=self.workspace.api_key)
        response = self._send(
            "create_registration",
            "POST",
            self.registrations_url,
            headers={"Content-Type": JSON_CONTENT_TYPE, "Accept": HAL_JSON},
            body=json.dumps(body),
            registration_name=input_model.name
        )
        self._raise_for_status("create_registration", response)

        if not response.body.strip():
            logger.warning(
                "Registration not created: empty response body",
                extra={"registration_name": input_model.name, "status_code": response.status}
            )
            return NOT_FOUND

        registration = self._parse_registration("create_registration", response)
        if not registration.is_pristine:
            raise RemoteServiceError(
                "create_registration returned a registration whose created_date "
                "and updated_date differ",
                status_code=response.status,
                body=response.body
            )

        logger.info(
            "Registration created",
            extra={
                "registration_id": registration.registration_id,
                "delivery_type": registration.delivery_type.value,
                "status": registration.status.value
            }
        )
        return Found(registration)

    def find_by_id(self, registration_id: str) -> RegistrationLookup:
        """
        Look up a registration.

        Returns:
            Found(registration), or NOT_FOUND when the service answers 404

        Raises:
            InvalidArgumentError: If registration_id is empty
            RemoteServiceError: On any other failure
        """
        self._check_registration_id(registration_id)
        response = self._send(
            "find_registration",
            "GET",
            self.registration_url(registration_id),
            headers={"Accept": HAL_JSON},
            registration_id=registration_id
        )
        if response.status == 404:
            logger.debug("Registration not found", extra={"registration_id": registration_id})
            return NOT_FOUND
        self._raise_for_status("find_registration", response)
        return Found(self._parse_registration("find_registration", response))

    def delete(self, registration_id: str) -> None:
        """
        Delete a registration. Deleting one that is already gone succeeds.

        Raises:
            InvalidArgumentError: If registration_id is empty
            RemoteServiceError: On failures other than 404
        """
        self._check_registration_id(registration_id)
        response = self._send(
            "delete_registration",
            "DELETE",
            self.registration_url(registration_id),
            registration_id=registration_id
        )
        if response.status == 404:
            logger.info("Registration already deleted", extra={"registration_id": registration_id})
            return
        self._raise_for_status("delete_registration", response)
        logger.info("Registration deleted", extra={"registration_id": registration_id})

    @staticmethod
    def _parse_registration(operation: str, response: HttpResponse) -> Registration:
        try:
            return Registration.model_validate(json.loads(response.body))
        except (ValueError, ValidationError) as e:
            raise RemoteServiceError(
                f"{operation} returned a malformed registration: {e}",
                status_code=response.status,
                body=response.body
            ) from e

    @staticmethod
    def _check_registration_id(registration_id: Optional[str]) -> None:
        if not registration_id:
            raise InvalidArgumentError("registration_id is required")
