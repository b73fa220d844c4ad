"""Test Loading/Success/Error resource loaders."""
import asyncio

import pytest

from patient_portal.doctor_detail import DoctorDetailLoader
from patient_portal.errors import ApiError, DecodeError, TransportError
from patient_portal.history import (
    AppointmentDetailLoader,
    AppointmentListLoader,
    PrescriptionListLoader,
)
from patient_portal.models import Appointment
from patient_portal.state import UiError, UiLoading, UiSuccess
from conftest import settle


class TestDoctorDetailLoader:

    def test_initially_loading(self, repository):
        loader = DoctorDetailLoader(repository, "doc-42")

        assert loader.state == UiLoading()
        assert loader.detail is None

    @pytest.mark.asyncio
    async def test_success(self, repository, scenario_detail):
        repository.detail_result = scenario_detail
        seen = []
        loader = DoctorDetailLoader(repository, "doc-42")
        loader.add_listener(seen.append)

        state = await loader.load()

        assert state == UiSuccess(scenario_detail)
        assert loader.detail.name == "Dr. House"
        assert seen == [UiLoading(), UiSuccess(scenario_detail)]
        assert repository.detail_calls == ["doc-42"]

    @pytest.mark.asyncio
    async def test_backend_error_message(self, repository):
        repository.detail_result = ApiError(404, error="Doctor not found")
        loader = DoctorDetailLoader(repository, "doc-404")

        assert await loader.load() == UiError("Doctor not found")

    @pytest.mark.asyncio
    async def test_failure_without_text_uses_fallback(self, repository):
        repository.detail_result = ApiError(500)
        loader = DoctorDetailLoader(repository, "doc-42")

        assert await loader.load() == UiError("Failed to load doctor")

    @pytest.mark.asyncio
    async def test_reload_after_error(self, repository, scenario_detail):
        repository.detail_result = TransportError("timeout")
        loader = DoctorDetailLoader(repository, "doc-42")
        await loader.load()
        repository.detail_result = scenario_detail

        assert await loader.load() == UiSuccess(scenario_detail)

    @pytest.mark.asyncio
    async def test_load_can_switch_doctor(self, repository, scenario_detail):
        repository.detail_result = scenario_detail
        loader = DoctorDetailLoader(repository, "doc-1")

        await loader.load("doc-42")

        assert loader.doctor_id == "doc-42"
        assert repository.detail_calls == ["doc-42"]

    @pytest.mark.asyncio
    async def test_stale_result_discarded(self, repository, scenario_detail):
        """Should keep only the newest load's outcome."""
        repository.detail_result = scenario_detail
        seen = []
        loader = DoctorDetailLoader(repository, "doc-1")
        loader.add_listener(seen.append)

        repository.hold("detail")
        first = asyncio.create_task(loader.load("doc-1"))
        await settle()
        repository.release("detail")
        second = await loader.load("doc-42")
        await first

        assert second == UiSuccess(scenario_detail)
        assert seen == [UiLoading(), UiLoading(), UiSuccess(scenario_detail)]

    @pytest.mark.asyncio
    async def test_result_after_close_discarded(self, repository, scenario_detail):
        repository.detail_result = scenario_detail
        seen = []
        loader = DoctorDetailLoader(repository, "doc-42")
        loader.add_listener(seen.append)

        repository.hold("detail")
        task = asyncio.create_task(loader.load())
        await settle()
        loader.close()
        repository.release("detail")

        assert await task == UiLoading()
        assert seen == [UiLoading()]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, repository, scenario_detail):
        repository.detail_result = scenario_detail
        seen = []
        loader = DoctorDetailLoader(repository, "doc-42")
        unsubscribe = loader.add_listener(seen.append)
        unsubscribe()
        unsubscribe()

        await loader.load()

        assert seen == []

    @pytest.mark.asyncio
    async def test_raising_listener_does_not_hide_result(self, repository, scenario_detail):
        repository.detail_result = scenario_detail
        loader = DoctorDetailLoader(repository, "doc-42")

        def broken(state):
            raise RuntimeError("render failed")

        loader.add_listener(broken)

        assert await loader.load() == UiSuccess(scenario_detail)


class TestHistoryLoaders:

    @pytest.mark.asyncio
    async def test_appointments_success(self, repository):
        appointment = Appointment.model_validate({
            "id": "apt-1",
            "doctorName": "Dr. 1",
            "appointmentDate": "2025-01-15",
            "appointmentTime": "10:00",
            "status": "BOOKED",
        })
        repository.appointments_result = [appointment]
        loader = AppointmentListLoader(repository)

        assert await loader.load() == UiSuccess([appointment])

    @pytest.mark.asyncio
    async def test_appointments_failure_fallback(self, repository):
        repository.appointments_result = DecodeError("")
        loader = AppointmentListLoader(repository)

        assert await loader.load() == UiError("Unknown error")

    @pytest.mark.asyncio
    async def test_appointment_detail_failure(self, repository):
        repository.appointments_result = ApiError(404, message="Appointment not found")
        loader = AppointmentDetailLoader(repository, "apt-9")

        assert await loader.load() == UiError("Appointment not found")

    @pytest.mark.asyncio
    async def test_prescriptions_failure_uses_transport_text(self, repository):
        repository.prescriptions_result = TransportError("Connection refused")
        loader = PrescriptionListLoader(repository)

        assert await loader.load() == UiError("Connection refused")
