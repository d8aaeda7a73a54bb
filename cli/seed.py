"""Sample data for a fresh practice database."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence

from connector import APPOINTMENT_STATUSES, Appointment, Patient
from services import DataAccess

logger = logging.getLogger(__name__)

SAMPLE_PATIENTS: Sequence[Patient] = (
    Patient(
        name="Emma Johnson",
        email="emma.johnson@example.com",
        phone="(555) 123-4567",
        age=34,
        gender="Female",
        date_of_birth="1989-04-12",
        height="5'6\"",
        weight="145 lbs",
        allergies="Peanuts, Shellfish",
        medical_conditions="None",
        last_visit="2023-06-15",
        next_appointment="2023-06-22",
        status="Active",
        diet_plan="Low Carb",
        notes="Trying to lose weight for upcoming wedding",
    ),
    Patient(
        name="Michael Chen",
        email="michael.chen@example.com",
        phone="(555) 987-6543",
        age=42,
        gender="Male",
        date_of_birth="1981-09-23",
        height="5'10\"",
        weight="180 lbs",
        allergies="None",
        medical_conditions="Hypertension",
        last_visit="2023-05-30",
        next_appointment="2023-06-30",
        status="Active",
        diet_plan="DASH Diet",
        notes="Blood pressure has improved since last visit",
    ),
    Patient(
        name="Sophia Rodriguez",
        email="sophia.rodriguez@example.com",
        phone="(555) 234-5678",
        age=29,
        gender="Female",
        date_of_birth="1994-02-15",
        height="5'4\"",
        weight="130 lbs",
        allergies="Dairy",
        medical_conditions="IBS",
        last_visit="2023-06-10",
        next_appointment="2023-07-10",
        status="Active",
        diet_plan="Low FODMAP",
        notes="Symptoms have reduced with current diet plan",
    ),
    Patient(
        name="James Wilson",
        email="james.wilson@example.com",
        phone="(555) 345-6789",
        age=55,
        gender="Male",
        date_of_birth="1968-11-03",
        height="6'0\"",
        weight="210 lbs",
        allergies="None",
        medical_conditions="Type 2 Diabetes",
        last_visit="2023-05-20",
        next_appointment="2023-06-20",
        status="Active",
        diet_plan="Mediterranean Diet",
        notes="Working on weight loss and blood sugar control",
    ),
    Patient(
        name="Olivia Taylor",
        email="olivia.taylor@example.com",
        phone="(555) 456-7890",
        age=31,
        gender="Female",
        date_of_birth="1992-07-19",
        height="5'7\"",
        weight="150 lbs",
        allergies="Gluten",
        medical_conditions="Celiac Disease",
        last_visit="2023-06-05",
        next_appointment="2023-07-05",
        status="Active",
        diet_plan="Gluten-Free",
        notes="Adjusting well to gluten-free diet",
    ),
)

SAMPLE_TYPES = (
    "Initial Consultation",
    "Follow-up",
    "Diet Review",
    "Measurement Check",
    "Nutrition Education",
)
PAST_STATUSES = tuple(status for status in APPOINTMENT_STATUSES if status != "Scheduled")
SAMPLE_DURATIONS = (30, 45, 60)
PAST_APPOINTMENTS = 15
UPCOMING_APPOINTMENTS = 10


@dataclass(frozen=True)
class SeedSummary:
    patients: int
    appointments: int


def _random_time(rng: random.Random) -> str:
    hour = rng.randint(9, 16)
    return f"{hour}:{'00' if rng.random() > 0.5 else '30'}"


def _sample_appointment(
    rng: random.Random,
    patient: Patient,
    on: date,
    status: str,
    notes: Optional[str],
) -> Appointment:
    return Appointment(
        patient_id=patient.id or "",
        patient_name=patient.name,
        date=on.isoformat(),
        time=_random_time(rng),
        duration=rng.choice(SAMPLE_DURATIONS),
        type=rng.choice(SAMPLE_TYPES),
        status=status,
        notes=notes if rng.random() > 0.5 else None,
    )


def generate_appointments(
    patients: Sequence[Patient], rng: random.Random, today: Optional[date] = None
) -> List[Appointment]:
    """Past appointments with a closed status followed by upcoming scheduled ones."""

    if not patients:
        return []
    today = today or date.today()
    appointments: List[Appointment] = []
    for _ in range(PAST_APPOINTMENTS):
        on = today - timedelta(days=rng.randint(1, 60))
        appointments.append(
            _sample_appointment(
                rng,
                rng.choice(patients),
                on,
                rng.choice(PAST_STATUSES),
                "Patient reported progress with diet plan",
            )
        )
    for _ in range(UPCOMING_APPOINTMENTS):
        on = today + timedelta(days=rng.randint(1, 30))
        appointments.append(
            _sample_appointment(
                rng,
                rng.choice(patients),
                on,
                "Scheduled",
                "Follow-up on diet progress",
            )
        )
    return appointments


def clear_database(data_access: DataAccess) -> None:
    for appointment in data_access.list_appointments():
        if appointment.id:
            data_access.delete_appointment(appointment.id)
    for patient in data_access.list_patients():
        if patient.id:
            data_access.delete_patient(patient.id)


def seed_database(
    data_access: DataAccess,
    rng: Optional[random.Random] = None,
    *,
    today: Optional[date] = None,
) -> SeedSummary:
    """Replace every patient and appointment with the sample practice."""

    rng = rng or random.Random()
    logger.info("Clearing existing patients and appointments")
    clear_database(data_access)

    logger.info("Seeding patients")
    patients = [data_access.create_patient(patient) for patient in SAMPLE_PATIENTS]
    logger.info("Seeded %d patients", len(patients))

    logger.info("Seeding appointments")
    appointments = [
        data_access.create_appointment(appointment)
        for appointment in generate_appointments(patients, rng, today)
    ]
    logger.info("Seeded %d appointments", len(appointments))
    return SeedSummary(patients=len(patients), appointments=len(appointments))
