"""Mock backend for the patient portal client.

Flask server with in-memory data for:
- Paged doctor listing
- Doctor detail with weekly availability
- Appointment booking (with slot conflict detection) and history
- Prescriptions

Run with: python mock_api.py
"""
import os
import uuid
from datetime import datetime

from flask import Flask, jsonify, request

from patient_portal.models import Weekday
from patient_portal.slots import generate_slots

app = Flask(__name__)

MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))

SPECIALIZATIONS = [
    "Cardiology", "Dermatology", "Pediatrics", "Neurology", "Orthopedics",
]

# (day, start, end) templates rotated across the seeded doctors
AVAILABILITY_TEMPLATES = [
    [("MON", "10:00", "13:00"), ("WED", "14:00", "16:00")],
    [("TUE", "09:00", "12:00"), ("THU", "15:00", "18:00")],
    [("FRI", "08:30", "11:30"), ("SAT", "10:00", "12:00")],
]


def _seed_doctors():
    doctors = []
    for n in range(1, 16):
        doctors.append({
            "id": f"doc-{n:03d}",
            "name": f"Dr. Doctor {n}",
            "specialization": SPECIALIZATIONS[n % len(SPECIALIZATIONS)],
            "qualification": "MBBS, MD",
            "experience": 3 + n,
            "rating": round(3.5 + (n % 4) * 0.4, 1),
            "consultationFee": 400 + n * 50,
            "about": "Experienced specialist.",
            "clinicAddress": f"{n} Health Street",
            "profileImage": None,
            "availability": [
                {"day": day, "startTime": start, "endTime": end}
                for day, start, end in AVAILABILITY_TEMPLATES[n % len(AVAILABILITY_TEMPLATES)]
            ],
        })
    return doctors


DOCTORS = _seed_doctors()

# In-memory storage
appointments = []
prescriptions = []


def reset_state():
    """Clear bookings and prescriptions (used by tests)."""
    appointments.clear()
    prescriptions.clear()
    prescriptions.append({
        "id": "rx-001",
        "medications": "Amoxicillin 500mg",
        "instructions": "Three times a day after meals",
        "notes": None,
        "prescriptionDate": "2025-01-10",
        "appointmentId": None,
        "appointmentDate": "2025-01-10",
        "doctorName": DOCTORS[0]["name"],
        "patientName": "Demo Patient",
    })


reset_state()


def find_doctor(doctor_id):
    return next((d for d in DOCTORS if d["id"] == doctor_id), None)


def summary(doctor):
    """List entry: the detail without profile text and availability."""
    return {
        key: doctor[key]
        for key in ("id", "name", "specialization", "experience",
                    "consultationFee", "rating", "profileImage")
    }


def error_response(status, error):
    return jsonify({"status": status, "error": error, "message": None}), status


def is_offered(doctor, day: Weekday, time_str: str) -> bool:
    """Whether time_str is a generated slot of the doctor's windows on day."""
    for entry in doctor["availability"]:
        if Weekday.parse(entry["day"]) != day:
            continue
        if time_str in generate_slots(entry["startTime"], entry["endTime"]):
            return True
    return False


@app.route('/api/doctors', methods=['GET'])
def list_doctors():
    """GET /api/doctors?page=0&size=10 - Spring-style page of doctors."""
    try:
        page = int(request.args.get('page', 0))
        size = int(request.args.get('size', 10))
    except ValueError:
        return error_response(400, "page and size must be integers")
    if page < 0 or size <= 0:
        return error_response(400, "page must be >= 0 and size > 0")

    start = page * size
    content = [summary(d) for d in DOCTORS[start:start + size]]
    total = len(DOCTORS)
    total_pages = (total + size - 1) // size

    return jsonify({
        "content": content,
        "last": start + size >= total,
        "first": page == 0,
        "totalPages": total_pages,
        "totalElements": total,
        "number": page,
        "size": size,
        "numberOfElements": len(content),
        "empty": not content,
    })


@app.route('/api/doctors/<doctor_id>', methods=['GET'])
def get_doctor(doctor_id):
    doctor = find_doctor(doctor_id)
    if not doctor:
        return error_response(404, f"Doctor '{doctor_id}' not found")
    return jsonify(doctor)


@app.route('/api/appointments', methods=['POST'])
def book_appointment():
    """POST /api/appointments - Book a slot.

    Expected JSON body:
    {"doctorId": "doc-001", "appointmentDate": "2025-01-15", "appointmentTime": "10:30"}
    """
    data = request.get_json(silent=True)
    if not data:
        return error_response(400, "Request body is required")

    for field in ("doctorId", "appointmentDate", "appointmentTime"):
        if not data.get(field):
            return error_response(400, f"Missing required field: {field}")

    doctor = find_doctor(data["doctorId"])
    if not doctor:
        return error_response(404, f"Doctor '{data['doctorId']}' not found")

    try:
        appointment_date = datetime.strptime(data["appointmentDate"], "%Y-%m-%d").date()
    except ValueError:
        return error_response(400, "Invalid date format. Use YYYY-MM-DD")
    if appointment_date < datetime.now().date():
        return error_response(400, "Appointment date must be today or in the future")

    time_str = data["appointmentTime"]
    if not is_offered(doctor, Weekday.from_date(appointment_date), time_str):
        return error_response(400, "Doctor is not available at this time")

    # One booking per doctor/date/time
    if any(
        a["doctor"]["id"] == doctor["id"]
        and a["appointmentDate"] == appointment_date.isoformat()
        and a["appointmentTime"] == time_str
        for a in appointments
    ):
        return error_response(409, "Slot no longer available")

    appointments.append({
        "id": f"apt-{uuid.uuid4().hex[:8]}",
        "doctor": doctor,
        "appointmentDate": appointment_date.isoformat(),
        "appointmentTime": time_str,
        "status": "BOOKED",
        "createdAt": datetime.now().isoformat(timespec="seconds"),
    })

    return jsonify({
        "status": 201,
        "message": "Appointment booked successfully",
        "error": None,
    }), 201


@app.route('/api/appointments', methods=['GET'])
def list_appointments():
    return jsonify(appointments)


@app.route('/api/appointments/<appointment_id>', methods=['GET'])
def get_appointment(appointment_id):
    appointment = next((a for a in appointments if a["id"] == appointment_id), None)
    if not appointment:
        return error_response(404, f"Appointment '{appointment_id}' not found")
    return jsonify(appointment)


@app.route('/api/prescriptions', methods=['GET'])
def list_prescriptions():
    return jsonify(prescriptions)


@app.route('/health', methods=['GET'])
def health_check():
    return jsonify({"status": "healthy", "doctors": len(DOCTORS)})


if __name__ == '__main__':
    print("=" * 70)
    print("Patient portal mock API")
    print("   GET  /api/doctors?page=&size=    - Paged doctor list")
    print("   GET  /api/doctors/<id>           - Doctor detail + availability")
    print("   POST /api/appointments           - Book appointment")
    print("   GET  /api/appointments[/<id>]    - Appointment history")
    print("   GET  /api/prescriptions          - Prescriptions")
    print("=" * 70)
    app.run(debug=True, port=MOCK_API_PORT, host='0.0.0.0')
