"""Pydantic models for backend request/response payloads.

The backend speaks camelCase JSON; models expose snake_case attributes
and accept either spelling on input.
"""
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Weekday(str, Enum):
    """Recurring availability key. Values match the backend day codes."""
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"

    @property
    def day_number(self) -> int:
        """Position in the week, Monday == 0 (same as date.weekday())."""
        return list(Weekday).index(self)

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]

    @classmethod
    def parse(cls, code: Any) -> Optional["Weekday"]:
        """
        Parse a backend day code.

        Accepts "MON".."SUN" in any case and full English day names
        ("monday", "Wednesday"). Unknown codes return None.
        """
        if isinstance(code, cls):
            return code
        if not isinstance(code, str):
            return None
        key = code.strip().upper()
        if key in cls.__members__:
            return cls[key]
        return _DAY_NAMES.get(key)


_DAY_NAMES = {
    "MONDAY": Weekday.MON,
    "TUESDAY": Weekday.TUE,
    "WEDNESDAY": Weekday.WED,
    "THURSDAY": Weekday.THU,
    "FRIDAY": Weekday.FRI,
    "SATURDAY": Weekday.SAT,
    "SUNDAY": Weekday.SUN,
}


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TimeWindow(_WireModel):
    """
    One contiguous block of availability, "HH:MM" bounds.

    A missing bound is kept as None; such a window yields no slots.
    """
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"start_time": data[0], "end_time": data[1]}
        return data


class DoctorSummary(_WireModel):
    """Doctor list entry."""
    id: str
    name: str
    specialization: str
    experience_years: int = Field(default=0, ge=0, alias="experience")
    consultation_fee: Decimal = Field(default=Decimal("0"), ge=0)
    rating: Optional[Decimal] = Field(default=None, ge=0, le=5)
    next_available_label: Optional[str] = None
    profile_image: Optional[str] = None


class DoctorDetail(_WireModel):
    """Full doctor profile including the weekly availability map."""
    id: str
    name: Optional[str] = None
    specialization: Optional[str] = None
    qualification: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0, alias="experience")
    rating: Optional[Decimal] = Field(default=None, ge=0, le=5)
    consultation_fee: Optional[Decimal] = Field(default=None, ge=0)
    about: Optional[str] = None
    clinic_address: Optional[str] = None
    profile_image: Optional[str] = None
    availability: Dict[Weekday, List[TimeWindow]] = Field(default_factory=dict)

    @field_validator("availability", mode="before")
    @classmethod
    def _normalize_availability(cls, value: Any) -> Any:
        """
        Accept either the map form or the list-of-entries form.

        List form: [{"day": "MON", "startTime": "10:00", "endTime": "13:00"}]
        Map form: {"MON": [{"startTime": "10:00", "endTime": "13:00"}]}

        Unknown day codes are dropped; first-appearance order is kept.
        """
        if value is None:
            return {}

        grouped: Dict[Weekday, list] = {}
        if isinstance(value, dict):
            for code, windows in value.items():
                day = Weekday.parse(code)
                if day is None:
                    continue
                grouped.setdefault(day, []).extend(windows or [])
            return grouped

        if isinstance(value, (list, tuple)):
            for entry in value:
                if not isinstance(entry, dict):
                    continue
                day = Weekday.parse(entry.get("day"))
                if day is None:
                    continue
                grouped.setdefault(day, []).append({
                    "start_time": entry.get("startTime", entry.get("start_time")),
                    "end_time": entry.get("endTime", entry.get("end_time")),
                })
            return grouped

        return value


class DoctorPage(_WireModel):
    """One page of the doctor list (Spring-style pagination envelope)."""
    content: List[DoctorSummary] = Field(default_factory=list)
    last: bool = True
    total_pages: Optional[int] = None
    total_elements: Optional[int] = None
    number: Optional[int] = None
    size: Optional[int] = None


class AppointmentRequest(_WireModel):
    """Booking attempt submitted to POST /api/appointments."""
    doctor_id: str
    appointment_date: date
    appointment_time: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class AppointmentResponse(_WireModel):
    """Booking endpoint response; the same shape is used for failures."""
    status: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None


class Appointment(_WireModel):
    """Appointment history entry."""
    id: str
    appointment_date: date
    appointment_time: str
    status: str
    doctor: Optional[DoctorDetail] = None
    doctor_id: Optional[str] = None
    doctor_name: Optional[str] = None
    specialization: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def doctor_display_name(self) -> str:
        if self.doctor is not None and self.doctor.name:
            return self.doctor.name
        return self.doctor_name or "Unknown doctor"


class Prescription(_WireModel):
    """Prescription history entry."""
    id: str
    medications: str
    instructions: str
    notes: Optional[str] = None
    prescription_date: str
    appointment_id: Optional[str] = None
    appointment_date: Optional[str] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
