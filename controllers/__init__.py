"""Screen controllers exposing view state for the dashboard."""

from .appointments import (
    AppointmentCreateController,
    AppointmentDetailController,
    AppointmentForm,
    AppointmentListController,
    DateBucket,
    appointment_type_options,
    filter_appointments,
    group_by_date,
    matches_search,
)
from .base import ViewController
from .dashboard import DashboardController, DashboardStats
from .patients import (
    PatientCreateController,
    PatientDetailController,
    PatientForm,
    PatientListController,
    filter_patients,
    matches_patient_search,
    partition_appointments,
)
from .session import AuthResult, Identity, SessionProvider

__all__ = [
    "AppointmentCreateController",
    "AppointmentDetailController",
    "AppointmentForm",
    "AppointmentListController",
    "AuthResult",
    "DashboardController",
    "DashboardStats",
    "DateBucket",
    "Identity",
    "PatientCreateController",
    "PatientDetailController",
    "PatientForm",
    "PatientListController",
    "SessionProvider",
    "ViewController",
    "appointment_type_options",
    "filter_appointments",
    "filter_patients",
    "group_by_date",
    "matches_patient_search",
    "matches_search",
    "partition_appointments",
]
