"""Appointment screens: list/calendar, detail and creation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from connector import APPOINTMENT_TYPES, DURATION_OPTIONS, Appointment, Patient
from services import DataAccess, RemoteFetchError, RemoteWriteError, ValidationError

from .base import ViewController, today_iso
from .formatting import format_duration, format_long_date

logger = logging.getLogger(__name__)

ALL_TYPES = "all"
VIEWS = ("list", "calendar")


def matches_search(appointment: Appointment, term: str) -> bool:
    """Case-insensitive match of ``term`` against the patient name or the notes."""

    if not term:
        return True
    needle = term.lower()
    return needle in (appointment.patient_name or "").lower() or needle in (appointment.notes or "").lower()


def filter_appointments(
    appointments: Iterable[Appointment],
    search_term: str = "",
    date_filter: str = "",
    type_filter: str = ALL_TYPES,
) -> List[Appointment]:
    filtered: List[Appointment] = []
    for appointment in appointments:
        if not matches_search(appointment, search_term):
            continue
        if date_filter and appointment.date != date_filter:
            continue
        if type_filter != ALL_TYPES and appointment.type != type_filter:
            continue
        filtered.append(appointment)
    return filtered


def appointment_type_options(appointments: Iterable[Appointment]) -> List[str]:
    """``"all"`` followed by each distinct type in first-seen order."""

    options = [ALL_TYPES]
    seen = {ALL_TYPES}
    for appointment in appointments:
        if appointment.type is not None and appointment.type not in seen:
            options.append(appointment.type)
            seen.add(appointment.type)
    return options


@dataclass
class DateBucket:
    date: str
    appointments: List[Appointment]
    is_today: bool = False

    @property
    def label(self) -> str:
        return format_long_date(self.date)


def group_by_date(appointments: Iterable[Appointment], today: Optional[str] = None) -> List[DateBucket]:
    """Group appointments into per-date buckets for the calendar view.

    Buckets are ordered by their date string and each bucket is ordered by a
    plain string comparison of ``time``, so ``"10:00 AM"`` sorts before
    ``"9:00 AM"``.
    """

    groups: Dict[str, List[Appointment]] = {}
    for appointment in appointments:
        groups.setdefault(appointment.date, []).append(appointment)

    return [
        DateBucket(
            date=key,
            appointments=sorted(groups[key], key=lambda item: item.time or ""),
            is_today=key == today,
        )
        for key in sorted(groups)
    ]


class AppointmentListController(ViewController):
    """State for the appointment list and calendar screen."""

    def __init__(
        self,
        data_access: DataAccess,
        *,
        view: str = "list",
        search_term: str = "",
        date_filter: str = "",
        type_filter: str = ALL_TYPES,
    ) -> None:
        super().__init__()
        self._data = data_access
        self.appointments: List[Appointment] = []
        self.view = view if view in VIEWS else "list"
        self.search_term = search_term or ""
        self.date_filter = date_filter or ""
        self.type_filter = type_filter or ALL_TYPES

    def load(self) -> None:
        token = self._begin_fetch()
        try:
            appointments = self._data.list_appointments()
        except RemoteFetchError:
            if not self._discarded(token, "appointments"):
                logger.exception("Error fetching appointments")
                self.error = "Failed to load appointments. Please try again later."
            self._finish_fetch(token)
            return
        if not self._discarded(token, "appointments"):
            self.appointments = appointments
            self.error = None
        self._finish_fetch(token)

    @property
    def filtered_appointments(self) -> List[Appointment]:
        return filter_appointments(self.appointments, self.search_term, self.date_filter, self.type_filter)

    @property
    def type_options(self) -> List[str]:
        return appointment_type_options(self.appointments)

    def calendar(self, today: Optional[date] = None) -> List[DateBucket]:
        return group_by_date(self.filtered_appointments, today_iso(today))


class AppointmentDetailController(ViewController):
    """State for a single appointment and its status actions."""

    def __init__(self, data_access: DataAccess, appointment_id: str) -> None:
        super().__init__()
        self._data = data_access
        self.appointment_id = appointment_id
        self.appointment: Optional[Appointment] = None
        self.patient: Optional[Patient] = None
        self.not_found = False
        self.failed_step: Optional[str] = None
        self.show_cancel_confirm = False
        self.action_error: Optional[str] = None

    def navigate(self, appointment_id: str) -> None:
        """Point the screen at another appointment and fetch it."""

        self.appointment_id = appointment_id
        self.appointment = None
        self.patient = None
        self.show_cancel_confirm = False
        self.action_error = None
        self.load()

    def load(self) -> None:
        token = self._begin_fetch()
        self.not_found = False
        self.failed_step = None

        if not (self.appointment_id or "").strip():
            self.appointment = None
            self.not_found = True
            self._finish_fetch(token)
            return

        try:
            appointment = self._data.get_appointment(self.appointment_id)
        except RemoteFetchError:
            self._fail(token, "appointment")
            return
        if self._discarded(token, "appointment"):
            return
        if appointment is None:
            self.appointment = None
            self.not_found = True
            self._finish_fetch(token)
            return
        self.appointment = appointment

        patient: Optional[Patient] = None
        if appointment.patient_id:
            try:
                patient = self._data.get_patient(appointment.patient_id)
            except RemoteFetchError:
                self._fail(token, "patient")
                return
            if self._discarded(token, "patient"):
                return
        self.patient = patient
        self.error = None
        self._finish_fetch(token)

    def _fail(self, token: int, step: str) -> None:
        if self._discarded(token, step):
            return
        logger.exception("Error fetching %s for appointment %s", step, self.appointment_id)
        self.failed_step = step
        self.error = "Failed to load appointment details. Please try again later."
        self._finish_fetch(token)

    @property
    def can_modify(self) -> bool:
        return self.appointment is not None and self.appointment.is_scheduled

    def request_cancel(self) -> bool:
        """Open the cancellation prompt."""

        if not self.can_modify:
            return False
        self.show_cancel_confirm = True
        return True

    def dismiss_cancel(self) -> None:
        self.show_cancel_confirm = False

    def confirm_cancel(self) -> bool:
        if not self.show_cancel_confirm:
            return False
        if self._apply({"status": "Cancelled"}, "Failed to cancel appointment. Please try again."):
            self.show_cancel_confirm = False
            return True
        return False

    def complete(self) -> bool:
        return self._apply({"status": "Completed"}, "Failed to mark appointment as completed. Please try again.")

    def reschedule(self, new_date: str, new_time: str, duration: Any = None) -> bool:
        if not self.can_modify:
            return False
        try:
            changes = _reschedule_changes(new_date, new_time, duration)
        except ValidationError as exc:
            self.action_error = str(exc)
            return False
        return self._apply(changes, "Failed to reschedule appointment. Please try again.")

    def _apply(self, changes: Dict[str, Any], failure_message: str) -> bool:
        """Write ``changes`` and merge them into the local record on success.

        The record is not re-read after the write, so values the store
        derives on its own (``updated_at``) stay stale until the next load.
        """

        appointment = self.appointment
        if self.submitting or appointment is None or not appointment.is_scheduled:
            return False
        token = self._generation
        self.submitting = True
        self.action_error = None
        try:
            self._data.update_appointment(appointment.id or self.appointment_id, changes)
        except RemoteWriteError:
            logger.exception("Error updating appointment %s", self.appointment_id)
            if self._is_current(token):
                self.action_error = failure_message
            return False
        finally:
            self.submitting = False

        if self._discarded(token, "update"):
            return False
        self.appointment = replace(appointment, **changes)
        return True


def _reschedule_changes(new_date: str, new_time: str, duration: Any) -> Dict[str, Any]:
    new_date = (new_date or "").strip()
    new_time = (new_time or "").strip()
    if not new_date or not new_time:
        raise ValidationError("Please choose a date and time")
    changes: Dict[str, Any] = {"date": new_date, "time": new_time}
    if duration not in (None, ""):
        changes["duration"] = _parse_duration(duration)
    return changes


def _parse_duration(value: Any) -> int:
    try:
        minutes = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Please choose a valid duration") from exc
    if minutes not in DURATION_OPTIONS:
        raise ValidationError("Please choose a valid duration")
    return minutes


@dataclass
class AppointmentForm:
    patient_id: str = ""
    date: str = ""
    time: str = ""
    duration: str = "30"
    type: str = "Follow-up"
    notes: str = ""


@dataclass
class AppointmentPreview:
    patient_name: str
    date: str
    time: str
    duration: str
    type: str
    notes: str


class AppointmentCreateController(ViewController):
    """State for the new appointment form."""

    type_choices: Sequence[str] = APPOINTMENT_TYPES
    duration_choices: Sequence[int] = DURATION_OPTIONS

    def __init__(self, data_access: DataAccess, form: Optional[AppointmentForm] = None) -> None:
        super().__init__()
        self._data = data_access
        self.patients: List[Patient] = []
        self.form = form or AppointmentForm()
        self.created: Optional[Appointment] = None

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

    def update_form(self, **values: str) -> None:
        self.form = replace(self.form, **values)

    @property
    def selected_patient(self) -> Optional[Patient]:
        for patient in self.patients:
            if patient.id == self.form.patient_id:
                return patient
        return None

    def preview(self) -> AppointmentPreview:
        """Summary of the in-progress selections."""

        patient = self.selected_patient
        try:
            duration = format_duration(int(self.form.duration))
        except (TypeError, ValueError):
            duration = ""
        return AppointmentPreview(
            patient_name=patient.name if patient else "",
            date=format_long_date(self.form.date),
            time=self.form.time,
            duration=duration,
            type=self.form.type,
            notes=self.form.notes,
        )

    def build_appointment(self) -> Appointment:
        """Validate the form and build the record to create."""

        patient = self.selected_patient
        if patient is None or not patient.id:
            raise ValidationError("Please select a patient")
        appointment_date = self.form.date.strip()
        appointment_time = self.form.time.strip()
        if not appointment_date or not appointment_time:
            raise ValidationError("Please choose a date and time")
        appointment_type = self.form.type.strip()
        if not appointment_type:
            raise ValidationError("Please choose an appointment type")

        return Appointment(
            patient_id=patient.id,
            patient_name=patient.name,
            date=appointment_date,
            time=appointment_time,
            duration=_parse_duration(self.form.duration),
            type=appointment_type,
            status="Scheduled",
            notes=self.form.notes.strip() or None,
        )

    def submit(self) -> Optional[Appointment]:
        if self.submitting:
            return None
        try:
            appointment = self.build_appointment()
        except ValidationError as exc:
            self.error = str(exc)
            return None

        token = self._generation
        self.submitting = True
        self.error = None
        try:
            created = self._data.create_appointment(appointment)
        except RemoteWriteError:
            logger.exception("Error creating appointment")
            if self._is_current(token):
                self.error = "Failed to create appointment. Please try again."
            return None
        finally:
            self.submitting = False

        if self._discarded(token, "create"):
            return None
        self.created = created
        return created
