"""Blocking REST client for the patient portal backend.

Every call goes through the circuit breaker and converts requests /
pydantic failures into the errors module taxonomy, so callers only
ever see PortalError subclasses.
"""
from typing import Any, List, Optional

import requests
from pydantic import TypeAdapter, ValidationError

from patient_portal.circuit_breaker import BackendCircuitBreaker
from patient_portal.config import Settings, load_settings
from patient_portal.errors import ApiError, DecodeError, TransportError
from patient_portal.http_client import TokenProvider, create_http_session
from patient_portal.logging_config import generate_request_id, get_logger, request_context
from patient_portal.models import (
    Appointment,
    AppointmentRequest,
    AppointmentResponse,
    DoctorDetail,
    DoctorPage,
    Prescription,
)

logger = get_logger(__name__)

_APPOINTMENT_LIST = TypeAdapter(List[Appointment])
_PRESCRIPTION_LIST = TypeAdapter(List[Prescription])


class HealthcareApiClient:
    """Typed access to the doctors, appointments and prescriptions endpoints."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        token_provider: Optional[TokenProvider] = None,
        circuit_breaker: Optional[BackendCircuitBreaker] = None
    ):
        """
        Initialize client.

        Args:
            settings: Resolved settings (defaults to load_settings())
            session: Preconfigured session (defaults to create_http_session)
            token_provider: Returns the opaque session token, or None
            circuit_breaker: Shared breaker (defaults to a private one)
        """
        self.settings = settings or load_settings()
        self.session = session or create_http_session(
            max_retries=self.settings.http_max_retries,
            timeout=self.settings.http_timeout,
            token_provider=token_provider,
        )
        self.circuit_breaker = circuit_breaker or BackendCircuitBreaker(
            failure_threshold=self.settings.circuit_failure_threshold,
            timeout=self.settings.circuit_timeout,
        )

    def _url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send one request and decode its JSON body.

        Returns:
            Decoded body, or None for an empty body

        Raises:
            CircuitOpenError: If the circuit is open
            TransportError: Network error or timeout
            ApiError: 4xx/5xx response
            DecodeError: Body is not JSON
        """
        request_id = generate_request_id()
        headers = kwargs.pop("headers", {})
        headers.setdefault("X-Request-ID", request_id)
        headers.setdefault("Accept", "application/json")
        url = self._url(path)

        def send():
            if method == "GET":
                sender = self.session.get
            elif method == "POST":
                sender = self.session.post
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")

            try:
                response = sender(url, headers=headers, **kwargs)
            except requests.exceptions.HTTPError as e:
                raise _api_error_from(e.response) from e
            except requests.exceptions.RequestException as e:
                raise TransportError(str(e) or "Network error") from e
            return response

        with request_context(request_id, method, path):
            logger.debug("api_request")
            response = self.circuit_breaker.call(send)

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                logger.warning("api_invalid_json", status_code=response.status_code)
                raise DecodeError(f"Invalid JSON from {path}") from e

    def _decode(self, model, payload: Any, path: str):
        try:
            if isinstance(model, TypeAdapter):
                return model.validate_python(payload)
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning("api_decode_failed", path=path, errors=e.error_count())
            raise DecodeError(f"Unexpected response from {path}") from e

    def get_doctors(self, page: int, size: int) -> DoctorPage:
        """GET /api/doctors?page=&size= (page is zero-based)."""
        path = "/api/doctors"
        payload = self._request("GET", path, params={"page": page, "size": size})
        return self._decode(DoctorPage, payload, path)

    def get_doctor_detail(self, doctor_id: str) -> DoctorDetail:
        path = f"/api/doctors/{doctor_id}"
        return self._decode(DoctorDetail, self._request("GET", path), path)

    def book_appointment(self, request: AppointmentRequest) -> AppointmentResponse:
        """
        POST /api/appointments.

        Raises:
            ApiError: Backend rejected the booking; error/message carry its
                      payload fields
        """
        path = "/api/appointments"
        payload = self._request("POST", path, json=request.to_payload())
        return self._decode(AppointmentResponse, payload or {}, path)

    def get_appointments(self) -> List[Appointment]:
        path = "/api/appointments"
        return self._decode(_APPOINTMENT_LIST, self._request("GET", path) or [], path)

    def get_appointment_detail(self, appointment_id: str) -> Appointment:
        path = f"/api/appointments/{appointment_id}"
        return self._decode(Appointment, self._request("GET", path), path)

    def get_prescriptions(self) -> List[Prescription]:
        path = "/api/prescriptions"
        return self._decode(_PRESCRIPTION_LIST, self._request("GET", path) or [], path)

    def close(self) -> None:
        self.session.close()


def _api_error_from(response: Optional[requests.Response]) -> ApiError:
    """Build ApiError from an error response, tolerating non-JSON bodies."""
    if response is None:
        return ApiError(0)
    try:
        payload = response.json()
    except ValueError:
        payload = None
    return ApiError.from_payload(response.status_code, payload)
