"""Patient screens: list, detail and creation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import ClassVar, Iterable, List, Optional, Sequence, Tuple

from connector import GENDER_OPTIONS, PATIENT_STATUSES, Appointment, Patient
from services import DataAccess, RemoteFetchError, RemoteWriteError, ValidationError

from .base import ViewController, today_iso

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"
STATUS_FILTERS = (ALL_STATUSES,) + PATIENT_STATUSES


def matches_patient_search(patient: Patient, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in (value or "").lower() for value in (patient.name, patient.email, patient.phone))


def filter_patients(
    patients: Iterable[Patient], search_term: str = "", status_filter: str = ALL_STATUSES
) -> List[Patient]:
    return [
        patient
        for patient in patients
        if matches_patient_search(patient, search_term)
        and (status_filter == ALL_STATUSES or patient.status == status_filter)
    ]


def partition_appointments(
    appointments: Iterable[Appointment], today: str
) -> Tuple[List[Appointment], List[Appointment]]:
    """Split into upcoming (``date >= today``, newest first) and past (oldest first)."""

    upcoming = [item for item in appointments if item.date >= today]
    past = [item for item in appointments if item.date < today]
    upcoming.sort(key=lambda item: item.date, reverse=True)
    past.sort(key=lambda item: item.date)
    return upcoming, past


class PatientListController(ViewController):
    def __init__(self, data_access: DataAccess, *, search_term: str = "", status_filter: str = ALL_STATUSES) -> None:
        super().__init__()
        self._data = data_access
        self.patients: List[Patient] = []
        self.search_term = search_term or ""
        self.status_filter = status_filter if status_filter in STATUS_FILTERS else ALL_STATUSES

    def load(self) -> None:
        token = self._begin_fetch()
        try:
            patients = self._data.list_patients()
        except RemoteFetchError:
            if not self._discarded(token, "patients"):
                logger.exception("Error fetching patients")
                self.error = "Failed to load patients. Please try again later."
            self._finish_fetch(token)
            return
        if not self._discarded(token, "patients"):
            self.patients = patients
            self.error = None
        self._finish_fetch(token)

    @property
    def filtered_patients(self) -> List[Patient]:
        return filter_patients(self.patients, self.search_term, self.status_filter)


class PatientDetailController(ViewController):
    """State for one patient and their appointment history."""

    def __init__(self, data_access: DataAccess, patient_id: str) -> None:
        super().__init__()
        self._data = data_access
        self.patient_id = patient_id
        self.patient: Optional[Patient] = None
        self.appointments: List[Appointment] = []
        self.not_found = False
        self.action_error: Optional[str] = None

    def navigate(self, patient_id: str) -> None:
        self.patient_id = patient_id
        self.patient = None
        self.appointments = []
        self.action_error = None
        self.load()

    def load(self) -> None:
        token = self._begin_fetch()
        self.not_found = False
        if not (self.patient_id or "").strip():
            self.patient = None
            self.not_found = True
            self._finish_fetch(token)
            return
        try:
            patient = self._data.get_patient(self.patient_id)
            if self._discarded(token, "patient"):
                return
            if patient is None:
                self.patient = None
                self.not_found = True
                self._finish_fetch(token)
                return
            appointments = self._data.list_appointments_for_patient(self.patient_id)
        except RemoteFetchError:
            if not self._discarded(token, "patient"):
                logger.exception("Error fetching patient data for %s", self.patient_id)
                self.error = "Failed to load patient data. Please try again later."
            self._finish_fetch(token)
            return
        if self._discarded(token, "appointments"):
            return
        self.patient = patient
        self.appointments = appointments
        self.error = None
        self._finish_fetch(token)

    def appointment_history(self, today: Optional[date] = None) -> Tuple[List[Appointment], List[Appointment]]:
        return partition_appointments(self.appointments, today_iso(today))

    def change_status(self, status: str) -> bool:
        patient = self.patient
        if self.submitting or patient is None:
            return False
        if status not in PATIENT_STATUSES:
            self.action_error = f"Unknown patient status {status!r}"
            return False
        if status == patient.status:
            return True

        token = self._generation
        self.submitting = True
        self.action_error = None
        try:
            self._data.update_patient(patient.id or self.patient_id, {"status": status})
        except RemoteWriteError:
            logger.exception("Error updating patient %s", self.patient_id)
            if self._is_current(token):
                self.action_error = "Failed to update patient status. Please try again."
            return False
        finally:
            self.submitting = False

        if self._discarded(token, "status update"):
            return False
        self.patient = replace(patient, status=status)
        return True


@dataclass
class PatientForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    age: str = ""
    gender: str = ""
    height: str = ""
    weight: str = ""
    allergies: str = ""
    medical_conditions: str = ""
    diet_plan: str = ""
    status: str = "Active"
    notes: str = ""

    OPTIONAL_TEXT: ClassVar[Tuple[str, ...]] = (
        "date_of_birth",
        "height",
        "weight",
        "allergies",
        "medical_conditions",
        "diet_plan",
        "notes",
    )


class PatientCreateController(ViewController):
    status_choices: Sequence[str] = PATIENT_STATUSES
    gender_choices: Sequence[str] = GENDER_OPTIONS

    def __init__(self, data_access: DataAccess, form: Optional[PatientForm] = None) -> None:
        super().__init__()
        self._data = data_access
        self.form = form or PatientForm()
        self.created: Optional[Patient] = None

    def build_patient(self) -> Patient:
        form = self.form
        name = " ".join(part for part in (form.first_name.strip(), form.last_name.strip()) if part)
        email = form.email.strip()
        phone = form.phone.strip()
        if not name:
            raise ValidationError("Please enter the patient's name")
        if not email or "@" not in email:
            raise ValidationError("Please enter a valid email address")
        if not phone:
            raise ValidationError("Please enter a phone number")
        if form.status not in PATIENT_STATUSES:
            raise ValidationError("Please choose a valid status")

        gender = form.gender.strip() or None
        if gender is not None and gender not in GENDER_OPTIONS:
            raise ValidationError("Please choose a valid gender")

        age: Optional[int] = None
        if form.age.strip():
            try:
                age = int(form.age.strip())
            except ValueError as exc:
                raise ValidationError("Age must be a whole number") from exc
            if age < 0:
                raise ValidationError("Age must be a whole number")

        optional = {key: getattr(form, key).strip() or None for key in PatientForm.OPTIONAL_TEXT}
        return Patient(
            name=name,
            email=email,
            phone=phone,
            status=form.status,
            age=age,
            gender=gender,
            **optional,
        )

    def submit(self) -> Optional[Patient]:
        if self.submitting:
            return None
        try:
            patient = self.build_patient()
        except ValidationError as exc:
            self.error = str(exc)
            return None

        token = self._generation
        self.submitting = True
        self.error = None
        try:
            created = self._data.create_patient(patient)
        except RemoteWriteError:
            logger.exception("Error creating patient")
            if self._is_current(token):
                self.error = "Failed to create patient. Please try again."
            return None
        finally:
            self.submitting = False

        if self._discarded(token, "create"):
            return None
        self.created = created
        return created
