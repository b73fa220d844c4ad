"""Appointment and prescription history loaders."""
from typing import List

from patient_portal import config
from patient_portal.loaders import UiStateLoader
from patient_portal.models import Appointment, Prescription


class AppointmentListLoader(UiStateLoader):
    """
    The patient's appointments.

    Call load() again after a booking succeeds to pick up the new entry.
    """

    failure_message = config.APPOINTMENTS_LOAD_FAILED_MESSAGE

    def __init__(self, repository):
        super().__init__()
        self.repository = repository

    async def fetch(self) -> List[Appointment]:
        return await self.repository.get_appointments()


class AppointmentDetailLoader(UiStateLoader):
    failure_message = config.APPOINTMENT_DETAIL_FAILED_MESSAGE

    def __init__(self, repository, appointment_id: str):
        super().__init__()
        self.repository = repository
        self.appointment_id = appointment_id

    async def fetch(self) -> Appointment:
        return await self.repository.get_appointment_detail(self.appointment_id)


class PrescriptionListLoader(UiStateLoader):
    failure_message = config.PRESCRIPTIONS_LOAD_FAILED_MESSAGE

    def __init__(self, repository):
        super().__init__()
        self.repository = repository

    async def fetch(self) -> List[Prescription]:
        return await self.repository.get_prescriptions()
