"""Patient portal client core: doctor browsing, availability and booking."""
from patient_portal.availability import AvailabilityResolver
from patient_portal.booking import BookingStateMachine
from patient_portal.doctor_detail import DoctorDetailLoader
from patient_portal.paging import PagedListCoordinator
from patient_portal.slots import generate_slots

__all__ = [
    "AvailabilityResolver",
    "BookingStateMachine",
    "DoctorDetailLoader",
    "PagedListCoordinator",
    "generate_slots",
]
