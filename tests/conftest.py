"""Shared test fixtures."""
import asyncio
from typing import Dict, List, Optional, Union

import pytest

from patient_portal.models import (
    AppointmentRequest,
    AppointmentResponse,
    DoctorDetail,
    DoctorPage,
    DoctorSummary,
)


def make_doctors(start: int, count: int) -> List[DoctorSummary]:
    """Doctor summaries with ids doc-<start>..doc-<start+count-1>."""
    return [
        DoctorSummary(
            id=f"doc-{n}",
            name=f"Dr. {n}",
            specialization="Cardiology",
            experience=5,
            consultationFee="500",
            rating="4.5",
        )
        for n in range(start, start + count)
    ]


class FakeRepository:
    """
    In-memory stand-in for PortalRepository.

    Results may be a value or an exception instance (raised). Setting a
    gate makes the matching call wait until release() is called.
    """

    def __init__(self):
        self.book_result: Union[AppointmentResponse, Exception] = AppointmentResponse(
            status=201, message="Appointment booked successfully"
        )
        self.book_calls: List[AppointmentRequest] = []
        self.pages: Dict[int, Union[DoctorPage, Exception]] = {}
        self.page_calls: List[tuple] = []
        self.detail_result: Union[DoctorDetail, Exception, None] = None
        self.detail_calls: List[str] = []
        self.appointments_result = []
        self.prescriptions_result = []
        self._gates: Dict[str, asyncio.Event] = {}
        self._gated = set()

    def hold(self, name: str) -> None:
        """Make the next calls to name block until release(name)."""
        self._gated.add(name)
        self._gates.pop(name, None)

    def release(self, name: str) -> None:
        self._gated.discard(name)
        if name in self._gates:
            self._gates[name].set()

    async def _maybe_wait(self, name: str) -> None:
        if name in self._gated:
            gate = self._gates.setdefault(name, asyncio.Event())
            await gate.wait()

    @staticmethod
    def _resolve(result):
        if isinstance(result, Exception):
            raise result
        return result

    async def book_appointment(self, request: AppointmentRequest) -> AppointmentResponse:
        self.book_calls.append(request)
        await self._maybe_wait("book")
        return self._resolve(self.book_result)

    async def get_doctors(self, page: int, size: int) -> DoctorPage:
        self.page_calls.append((page, size))
        await self._maybe_wait("doctors")
        return self._resolve(self.pages[page])

    async def get_doctor_detail(self, doctor_id: str) -> Optional[DoctorDetail]:
        self.detail_calls.append(doctor_id)
        await self._maybe_wait("detail")
        return self._resolve(self.detail_result)

    async def get_appointments(self):
        await self._maybe_wait("appointments")
        return self._resolve(self.appointments_result)

    async def get_appointment_detail(self, appointment_id: str):
        return self._resolve(self.appointments_result)

    async def get_prescriptions(self):
        return self._resolve(self.prescriptions_result)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def scenario_detail() -> DoctorDetail:
    """Doctor available Monday morning and Wednesday afternoon."""
    return DoctorDetail.model_validate({
        "id": "doc-42",
        "name": "Dr. House",
        "specialization": "Diagnostics",
        "availability": {
            "MON": [["10:00", "11:00"]],
            "WED": [["14:00", "16:00"]],
        },
    })


async def settle():
    """Let pending tasks run up to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)
