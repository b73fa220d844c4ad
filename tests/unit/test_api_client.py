"""Tests for the REST client's decoding and error mapping."""
import json
from datetime import date
from unittest.mock import Mock

import pytest
import requests

from patient_portal.api_client import HealthcareApiClient
from patient_portal.circuit_breaker import BackendCircuitBreaker, CircuitOpenError
from patient_portal.config import Settings
from patient_portal.errors import ApiError, DecodeError, TransportError
from patient_portal.models import AppointmentRequest, Weekday
from patient_portal.repository import PortalRepository


def make_response(status_code, body=None, raw=None):
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    response.headers["Content-Type"] = "application/json"
    return response


def http_error(status_code, body=None, raw=None):
    response = make_response(status_code, body, raw)
    return requests.exceptions.HTTPError(f"{status_code} Error", response=response)


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return HealthcareApiClient(
        settings=Settings(api_base_url="http://backend.test/"),
        session=session,
    )


class TestRequests:

    def test_get_doctors_sends_page_params(self, client, session):
        session.get.return_value = make_response(200, {
            "content": [{"id": "doc-1", "name": "Dr. 1", "specialization": "ENT"}],
            "last": True,
        })

        page = client.get_doctors(0, 10)

        assert page.content[0].id == "doc-1"
        args, kwargs = session.get.call_args
        assert args == ("http://backend.test/api/doctors",)
        assert kwargs["params"] == {"page": 0, "size": 10}
        assert kwargs["headers"]["X-Request-ID"].startswith("req-")

    def test_get_doctor_detail(self, client, session):
        session.get.return_value = make_response(200, {
            "id": "doc-1",
            "availability": [{"day": "TUE", "startTime": "09:00", "endTime": "12:00"}],
        })

        detail = client.get_doctor_detail("doc-1")

        assert list(detail.availability) == [Weekday.TUE]
        assert session.get.call_args.args == ("http://backend.test/api/doctors/doc-1",)

    def test_book_posts_wire_payload(self, client, session):
        session.post.return_value = make_response(201, {"status": 201, "message": "Booked"})

        response = client.book_appointment(AppointmentRequest(
            doctor_id="doc-1", appointment_date=date(2025, 1, 15), appointment_time="14:30"
        ))

        assert response.message == "Booked"
        assert session.post.call_args.kwargs["json"] == {
            "doctorId": "doc-1",
            "appointmentDate": "2025-01-15",
            "appointmentTime": "14:30",
        }

    def test_book_with_empty_body(self, client, session):
        session.post.return_value = make_response(201)

        response = client.book_appointment(AppointmentRequest(
            doctor_id="doc-1", appointment_date=date(2025, 1, 15), appointment_time="14:30"
        ))

        assert response.message is None

    def test_empty_appointment_list(self, client, session):
        session.get.return_value = make_response(200)

        assert client.get_appointments() == []


class TestErrorMapping:

    def test_structured_rejection(self, client, session):
        session.post.side_effect = http_error(
            409, {"status": 409, "error": None, "message": "Slot no longer available"}
        )

        with pytest.raises(ApiError) as info:
            client.book_appointment(AppointmentRequest(
                doctor_id="doc-1", appointment_date=date(2025, 1, 15), appointment_time="14:30"
            ))

        assert info.value.status_code == 409
        assert info.value.error is None
        assert info.value.message == "Slot no longer available"

    def test_html_error_body(self, client, session):
        session.get.side_effect = http_error(502, raw=b"<html>Bad Gateway</html>")

        with pytest.raises(ApiError) as info:
            client.get_doctors(0, 10)

        assert info.value.status_code == 502
        assert info.value.error is None and info.value.message is None

    def test_connection_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(TransportError, match="Connection refused"):
            client.get_doctors(0, 10)

    def test_timeout(self, client, session):
        session.get.side_effect = requests.exceptions.ReadTimeout("Read timed out")

        with pytest.raises(TransportError):
            client.get_prescriptions()

    def test_invalid_json(self, client, session):
        session.get.return_value = make_response(200, raw=b"not json")

        with pytest.raises(DecodeError):
            client.get_doctors(0, 10)

    def test_wrong_shape(self, client, session):
        session.get.return_value = make_response(200, {"content": [{"name": "no id"}]})

        with pytest.raises(DecodeError):
            client.get_doctors(0, 10)

    def test_open_circuit_fails_fast(self, session):
        client = HealthcareApiClient(
            settings=Settings(),
            session=session,
            circuit_breaker=BackendCircuitBreaker(failure_threshold=2, timeout=60),
        )
        session.get.side_effect = requests.exceptions.ConnectionError("down")

        for _ in range(2):
            with pytest.raises(TransportError):
                client.get_appointments()

        with pytest.raises(CircuitOpenError):
            client.get_appointments()
        assert session.get.call_count == 2


class TestPortalRepository:

    @pytest.mark.asyncio
    async def test_runs_client_calls_off_loop(self, client, session):
        session.get.return_value = make_response(200, [
            {
                "id": "rx-1",
                "medications": "Amoxicillin 500mg",
                "instructions": "Twice daily",
                "prescriptionDate": "2025-01-10",
            },
        ])
        repository = PortalRepository(client)

        prescriptions = await repository.get_prescriptions()

        assert prescriptions[0].id == "rx-1"

    @pytest.mark.asyncio
    async def test_propagates_portal_errors(self, client, session):
        session.get.side_effect = http_error(404, {"error": "Doctor not found"})
        repository = PortalRepository(client)

        with pytest.raises(ApiError, match="Doctor not found"):
            await repository.get_doctor_detail("doc-x")
