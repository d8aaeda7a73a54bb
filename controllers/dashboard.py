"""Overview screen: practice statistics and today's schedule."""
from __future__ import annotations

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from connector import Appointment, Patient
from services import DataAccess, RemoteFetchError

from .base import ViewController, today_iso

logger = logging.getLogger(__name__)

RECENT_PATIENT_LIMIT = 4
TODAY_APPOINTMENT_LIMIT = 3


@dataclass(frozen=True)
class DashboardStats:
    total_patients: int
    appointments_today: int
    active_diet_plans: int
    upcoming_scheduled: int


class DashboardController(ViewController):
    """Loads patients and appointments together; either failing fails the screen."""

    def __init__(self, data_access: DataAccess, *, practitioner_email: Optional[str] = None) -> None:
        super().__init__()
        self._data = data_access
        self.practitioner_email = practitioner_email
        self.patients: List[Patient] = []
        self.appointments: List[Appointment] = []

    @property
    def greeting_name(self) -> str:
        if self.practitioner_email and "@" in self.practitioner_email:
            return self.practitioner_email.split("@")[0]
        return "User"

    def load(self) -> None:
        token = self._begin_fetch()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dashboard-fetch") as pool:
            # Workers run in copies of the caller's context; the store client reads the request token from it.
            patients_future = pool.submit(contextvars.copy_context().run, self._data.list_patients)
            appointments_future = pool.submit(contextvars.copy_context().run, self._data.list_appointments)
            try:
                patients = patients_future.result()
                appointments = appointments_future.result()
            except RemoteFetchError:
                if not self._discarded(token, "overview"):
                    logger.exception("Error fetching dashboard data")
                    self.error = "Failed to load dashboard data. Please try again later."
                self._finish_fetch(token)
                return
        if self._discarded(token, "overview"):
            return
        self.patients = patients
        self.appointments = appointments
        self.error = None
        self._finish_fetch(token)

    def todays_appointments(self, today: Optional[date] = None) -> List[Appointment]:
        current = today_iso(today)
        todays = [item for item in self.appointments if item.date == current]
        return sorted(todays, key=lambda item: item.time or "")

    def stats(self, today: Optional[date] = None) -> DashboardStats:
        current = today_iso(today)
        return DashboardStats(
            total_patients=len(self.patients),
            appointments_today=len(self.todays_appointments(today)),
            active_diet_plans=sum(1 for p in self.patients if p.status == "Active" and p.diet_plan),
            upcoming_scheduled=sum(
                1 for a in self.appointments if a.status == "Scheduled" and a.date >= current
            ),
        )

    def recent_patients(self) -> List[Patient]:
        visited = [patient for patient in self.patients if patient.last_visit]
        visited.sort(key=lambda patient: patient.last_visit or "", reverse=True)
        return visited[:RECENT_PATIENT_LIMIT]

    def schedule_preview(self, today: Optional[date] = None) -> List[Appointment]:
        return self.todays_appointments(today)[:TODAY_APPOINTMENT_LIMIT]
