"""Async repository over the blocking API client.

Network calls are the only suspension points in the core. The requests
client runs in a worker thread via asyncio.to_thread so the event loop
keeps serving the UI while a call is in flight.
"""
import asyncio
from typing import List

from patient_portal.api_client import HealthcareApiClient
from patient_portal.models import (
    Appointment,
    AppointmentRequest,
    AppointmentResponse,
    DoctorDetail,
    DoctorPage,
    Prescription,
)


class PortalRepository:
    """Awaitable facade consumed by the loaders and state machines."""

    def __init__(self, client: HealthcareApiClient):
        self.client = client

    async def get_doctors(self, page: int, size: int) -> DoctorPage:
        return await asyncio.to_thread(self.client.get_doctors, page, size)

    async def get_doctor_detail(self, doctor_id: str) -> DoctorDetail:
        return await asyncio.to_thread(self.client.get_doctor_detail, doctor_id)

    async def book_appointment(self, request: AppointmentRequest) -> AppointmentResponse:
        return await asyncio.to_thread(self.client.book_appointment, request)

    async def get_appointments(self) -> List[Appointment]:
        return await asyncio.to_thread(self.client.get_appointments)

    async def get_appointment_detail(self, appointment_id: str) -> Appointment:
        return await asyncio.to_thread(self.client.get_appointment_detail, appointment_id)

    async def get_prescriptions(self) -> List[Prescription]:
        return await asyncio.to_thread(self.client.get_prescriptions)
