"""Configuration for the patient portal client.

All tunables centralized here - override through environment variables
(or a local .env file) without touching code.
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_BASE_URL = "http://localhost:5000"
HTTP_TIMEOUT_SECONDS = 15
HTTP_MAX_RETRIES = 0  # Failures are terminal for the attempt

CIRCUIT_FAILURE_THRESHOLD = 5
CIRCUIT_TIMEOUT_SECONDS = 60

# Booking / listing
DOCTORS_PAGE_SIZE = 10
SLOT_INTERVAL_MINUTES = 30

LOG_LEVEL = "INFO"

# User-facing fallback messages
BOOKING_SUCCESS_MESSAGE = "Appointment booked successfully"
BOOKING_FAILED_MESSAGE = "Booking failed"
DOCTORS_LOAD_FAILED_MESSAGE = "Unable to load doctors"
DOCTOR_LOAD_FAILED_MESSAGE = "Failed to load doctor"
APPOINTMENTS_LOAD_FAILED_MESSAGE = "Unknown error"
APPOINTMENT_DETAIL_FAILED_MESSAGE = "Failed to load appointment details"
PRESCRIPTIONS_LOAD_FAILED_MESSAGE = "Failed to load prescriptions"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""
    api_base_url: str = API_BASE_URL
    http_timeout: float = HTTP_TIMEOUT_SECONDS
    http_max_retries: int = HTTP_MAX_RETRIES
    circuit_failure_threshold: int = CIRCUIT_FAILURE_THRESHOLD
    circuit_timeout: float = CIRCUIT_TIMEOUT_SECONDS
    doctors_page_size: int = DOCTORS_PAGE_SIZE
    slot_interval_minutes: int = SLOT_INTERVAL_MINUTES
    log_level: str = LOG_LEVEL


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_settings() -> Settings:
    """
    Build settings from PORTAL_* environment variables.

    Returns:
        Settings with environment overrides applied

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    return Settings(
        api_base_url=os.getenv("PORTAL_API_BASE_URL", API_BASE_URL).rstrip("/"),
        http_timeout=_env_float("PORTAL_HTTP_TIMEOUT", HTTP_TIMEOUT_SECONDS),
        http_max_retries=_env_int("PORTAL_HTTP_MAX_RETRIES", HTTP_MAX_RETRIES),
        circuit_failure_threshold=_env_int(
            "PORTAL_CIRCUIT_FAILURE_THRESHOLD", CIRCUIT_FAILURE_THRESHOLD
        ),
        circuit_timeout=_env_float("PORTAL_CIRCUIT_TIMEOUT", CIRCUIT_TIMEOUT_SECONDS),
        doctors_page_size=_env_int("PORTAL_DOCTORS_PAGE_SIZE", DOCTORS_PAGE_SIZE),
        slot_interval_minutes=_env_int(
            "PORTAL_SLOT_INTERVAL_MINUTES", SLOT_INTERVAL_MINUTES
        ),
        log_level=os.getenv("PORTAL_LOG_LEVEL", LOG_LEVEL),
    )
