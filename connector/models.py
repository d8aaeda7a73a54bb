"""Record types for the practice's patients and appointments.

Rows arrive from the store keyed by its column names (``patientid``,
``dateofbirth`` ...). The dataclasses below expose Python attribute names and
translate in both directions. Optional attributes stay ``None`` when the store
has no value for them; they are never defaulted to an empty or falsy value.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Optional

PATIENT_STATUSES = ("Active", "Inactive", "On Hold")

APPOINTMENT_STATUSES = ("Scheduled", "Completed", "Cancelled", "No-show")

APPOINTMENT_TYPES = (
    "Initial Consultation",
    "Follow-up",
    "Diet Review",
    "Comprehensive Review",
    "Weight Check",
    "Lab Results Review",
    "Meal Planning Session",
)

DURATION_OPTIONS = (15, 30, 45, 60, 90, 120)

GENDER_OPTIONS = ("Male", "Female", "Non-binary", "Prefer not to say")

# Compared against URL segments, so always held as strings.
IDENTIFIER_FIELDS = ("id", "patient_id")


class StoreRecord:
    """Mixin translating between attribute names and store columns."""

    COLUMNS: ClassVar[Dict[str, str]] = {}
    REQUIRED: ClassVar[tuple] = ()

    @classmethod
    def column_for(cls, attribute: str) -> str:
        return cls.COLUMNS.get(attribute, attribute)

    @classmethod
    def to_columns(cls, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename a mapping of attribute values to store columns."""

        known = {item.name for item in fields(cls)}  # type: ignore[arg-type]
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} fields: {sorted(unknown)}")
        return {cls.column_for(key): value for key, value in values.items()}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        if not row:
            raise ValueError(f"{cls.__name__} row payload is empty")

        kwargs: Dict[str, Any] = {}
        for item in fields(cls):  # type: ignore[arg-type]
            column = cls.column_for(item.name)
            if column in row:
                value = row[column]
                if value is None and item.name in cls.REQUIRED:
                    raise ValueError(f"{cls.__name__} row has a null {column!r}")
                if item.name in IDENTIFIER_FIELDS and value is not None:
                    value = str(value)
                kwargs[item.name] = value
            elif item.name in cls.REQUIRED:
                raise KeyError(f"{cls.__name__} row is missing required column {column!r}")
        return cls(**kwargs)

    def to_row(self) -> Dict[str, Any]:
        """Return the store payload for this record, without its identifier."""

        row: Dict[str, Any] = {}
        for item in fields(self):  # type: ignore[arg-type]
            if item.name in ("id", "created_at", "updated_at"):
                continue
            value = getattr(self, item.name)
            if value is None:
                continue
            row[self.column_for(item.name)] = value
        return row


@dataclass(frozen=True)
class Patient(StoreRecord):
    """A patient of the practice."""

    COLUMNS: ClassVar[Dict[str, str]] = {
        "date_of_birth": "dateofbirth",
        "medical_conditions": "medicalconditions",
        "last_visit": "lastvisit",
        "next_appointment": "nextappointment",
        "diet_plan": "dietplan",
    }
    REQUIRED: ClassVar[tuple] = ("name", "email", "phone", "status")

    name: str
    email: str
    phone: str
    status: str
    id: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    allergies: Optional[str] = None
    medical_conditions: Optional[str] = None
    last_visit: Optional[str] = None
    next_appointment: Optional[str] = None
    diet_plan: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Appointment(StoreRecord):
    """A booked consultation.

    ``patient_name`` is copied from the patient when the appointment is
    created and is not updated if the patient is renamed later.
    """

    COLUMNS: ClassVar[Dict[str, str]] = {
        "patient_id": "patientid",
        "patient_name": "patientname",
    }
    REQUIRED: ClassVar[tuple] = ("patient_id", "patient_name", "date", "time", "status")

    patient_id: str
    patient_name: str
    date: str
    time: str
    status: str
    duration: Optional[int] = None
    type: Optional[str] = None
    id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_scheduled(self) -> bool:
        return self.status == "Scheduled"


__all__ = [
    "APPOINTMENT_STATUSES",
    "APPOINTMENT_TYPES",
    "Appointment",
    "DURATION_OPTIONS",
    "GENDER_OPTIONS",
    "PATIENT_STATUSES",
    "Patient",
    "StoreRecord",
]
