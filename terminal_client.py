#!/usr/bin/env python3
"""Terminal client for the patient portal backend.

Usage:
    python terminal_client.py

Walks the booking flow: paged doctor list → doctor detail → weekday and
time selection → booking. Set PORTAL_API_BASE_URL to point at a backend
(defaults to the mock API on localhost:5000) and PORTAL_TOKEN to send a
session token.
"""
import asyncio
import os
import sys

from patient_portal.api_client import HealthcareApiClient
from patient_portal.config import load_settings
from patient_portal.history import AppointmentListLoader
from patient_portal.logging_config import setup_structured_logging
from patient_portal.paging import PagedListCoordinator
from patient_portal.repository import PortalRepository
from patient_portal.session import BookingSession
from patient_portal.state import BookingError, BookingSuccess, UiError, UiSuccess


# ANSI color codes
class Colors:
    BLUE = '\033[94m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


def print_colored(text: str, color: str = Colors.RESET):
    print(f"{color}{text}{Colors.RESET}")


async def ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip()


async def pick_doctor(doctors: PagedListCoordinator):
    """Show the list, loading more pages on request. Returns a doctor id or None."""
    await doctors.load_next()
    while True:
        state = doctors.state
        if state.is_blocking_error:
            print_colored(f"❌ {state.last_error}", Colors.RED)
            if (await ask("Retry? [y/N] ")).lower() != "y":
                return None
            await doctors.load_next()
            continue

        print_colored("\nDoctors:", Colors.BOLD)
        for i, doctor in enumerate(state.items, start=1):
            rating = doctor.rating if doctor.rating is not None else "-"
            print(f"  {i:2d}. {doctor.name} - {doctor.specialization} "
                  f"({doctor.experience_years}y, ★ {rating}, fee {doctor.consultation_fee})")
        if state.is_inline_error:
            print_colored(f"  ⚠️  {state.last_error}", Colors.YELLOW)

        hint = "" if state.end_reached else ", 'm' for more"
        choice = await ask(f"Pick a doctor number{hint}, 'q' to quit: ")
        if choice.lower() == "q":
            return None
        if choice.lower() == "m":
            await doctors.load_next()
            continue
        if choice.isdigit() and 1 <= int(choice) <= len(state.items):
            return state.items[int(choice) - 1].id
        print_colored("Invalid choice", Colors.YELLOW)


async def book_with(session: BookingSession) -> None:
    state = await session.open()
    if isinstance(state, UiError):
        print_colored(f"❌ {state.message}", Colors.RED)
        return

    weekdays = session.available_weekdays()
    if not weekdays:
        print_colored("No slots available", Colors.RED)
        return

    print_colored(f"\n{session.detail.name} - available days:", Colors.BOLD)
    for i, day in enumerate(weekdays, start=1):
        print(f"  {i}. {day.value} ({session.resolver.next_calendar_date_for(day)})")
    choice = await ask("Day number: ")
    if not (choice.isdigit() and 1 <= int(choice) <= len(weekdays)):
        return
    slots = session.select_weekday(weekdays[int(choice) - 1])
    if not slots:
        print_colored("No slots available on that day", Colors.YELLOW)
        return

    print("  " + "  ".join(slots))
    slot = await ask(f"Time [{session.selected_time}]: ") or session.selected_time
    if slot not in slots:
        print_colored("Invalid time", Colors.YELLOW)
        return
    session.select_time(slot)

    result = await session.book()
    if isinstance(result, BookingSuccess):
        print_colored(f"✅ {result.message}", Colors.GREEN)
    elif isinstance(result, BookingError):
        print_colored(f"❌ {result.message}", Colors.RED)
    session.acknowledge()


async def main():
    settings = load_settings()
    setup_structured_logging(settings.log_level, stream=sys.stderr)
    token = os.getenv("PORTAL_TOKEN")
    client = HealthcareApiClient(settings, token_provider=lambda: token)
    repository = PortalRepository(client)
    appointments = AppointmentListLoader(repository)

    doctors = PagedListCoordinator(repository.get_doctors, page_size=settings.doctors_page_size)
    try:
        while True:
            doctor_id = await pick_doctor(doctors)
            if doctor_id is None:
                break
            session = BookingSession(
                repository,
                doctor_id,
                interval_minutes=settings.slot_interval_minutes,
                on_booked=lambda _: appointments.load(),
            )
            try:
                await book_with(session)
            finally:
                session.close()

            if isinstance(appointments.state, UiSuccess):
                print_colored(f"📅 You have {len(appointments.state.data)} appointment(s)", Colors.BLUE)
    finally:
        doctors.close()
        client.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print_colored("\n👋 Bye", Colors.BLUE)
