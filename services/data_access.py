"""Typed data access for patients and appointments.

Each method is one logical action against the store. Store and transport
failures surface as :class:`RemoteFetchError` for reads and
:class:`RemoteWriteError` for writes. A lookup by identifier that matches no
row returns ``None``; every lookup in the dashboard follows that rule.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

from connector import Appointment, Patient, StoreClientError, TableClientProtocol

from .errors import RemoteFetchError, RemoteWriteError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Patient, Appointment)


@dataclass(frozen=True)
class Entity(Generic[RecordT]):
    """A store collection and the record type its rows map to."""

    table: str
    model: Type[RecordT]
    default_order: Sequence[str]

    def parse(self, row: Mapping[str, Any]) -> RecordT:
        return self.model.from_row(row)


PATIENTS: Entity[Patient] = Entity("patients", Patient, ("name",))
APPOINTMENTS: Entity[Appointment] = Entity("appointments", Appointment, ("date", "time"))


def _validate_identifier(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} must be a non-empty string")
    return value.strip()


class DataAccess:
    """Semantic operations over the ``patients`` and ``appointments`` tables."""

    def __init__(self, table_client: TableClientProtocol) -> None:
        self._client = table_client

    # Generic operations -------------------------------------------------

    def list_all(self, entity: Entity[RecordT], order_by: Optional[Sequence[str]] = None) -> List[RecordT]:
        order = list(order_by or entity.default_order)
        try:
            rows = self._client.select(entity.table, order=[entity.model.column_for(c) for c in order])
            return [entity.parse(row) for row in rows]
        except (StoreClientError, KeyError, ValueError, TypeError) as exc:
            logger.error("Error fetching %s: %s", entity.table, exc)
            raise RemoteFetchError(f"Failed to load {entity.table}") from exc

    def get_by_id(self, entity: Entity[RecordT], record_id: str) -> Optional[RecordT]:
        record_id = _validate_identifier(record_id, "id")
        try:
            rows = self._client.select(entity.table, filters={"id": record_id})
            if not rows:
                logger.info("No row in %s with id %s", entity.table, record_id)
                return None
            return entity.parse(rows[0])
        except (StoreClientError, KeyError, ValueError, TypeError) as exc:
            logger.error("Error fetching %s with id %s: %s", entity.table, record_id, exc)
            raise RemoteFetchError(f"Failed to load {entity.table} record {record_id}") from exc

    def list_by_foreign_key(
        self,
        entity: Entity[RecordT],
        attribute: str,
        value: str,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[RecordT]:
        value = _validate_identifier(value, attribute)
        order = list(order_by or entity.default_order)
        column = entity.model.column_for(attribute)
        try:
            rows = self._client.select(
                entity.table,
                filters={column: value},
                order=[entity.model.column_for(c) for c in order],
            )
            return [entity.parse(row) for row in rows]
        except (StoreClientError, KeyError, ValueError, TypeError) as exc:
            logger.error("Error fetching %s for %s %s: %s", entity.table, attribute, value, exc)
            raise RemoteFetchError(f"Failed to load {entity.table} for {value}") from exc

    def create(self, entity: Entity[RecordT], record: RecordT) -> RecordT:
        """Persist ``record`` (its id is ignored) and return it as stored."""

        try:
            row = self._client.insert(entity.table, record.to_row())
            return entity.parse(row)
        except (StoreClientError, KeyError, ValueError, TypeError) as exc:
            logger.error("Error creating %s row: %s", entity.table, exc)
            raise RemoteWriteError(f"Failed to create {entity.table} record") from exc

    def update(self, entity: Entity[RecordT], record_id: str, changes: Mapping[str, Any]) -> RecordT:
        """Apply a partial update. An unknown id fails; nothing is created."""

        record_id = _validate_identifier(record_id, "id")
        if "id" in changes:
            raise ValueError("id cannot be changed")
        try:
            values = entity.model.to_columns(changes)
            rows = self._client.update(entity.table, {"id": record_id}, values)
        except (StoreClientError, ValueError) as exc:
            logger.error("Error updating %s with id %s: %s", entity.table, record_id, exc)
            raise RemoteWriteError(f"Failed to update {entity.table} record {record_id}") from exc
        if not rows:
            logger.error("Update of %s with id %s matched no rows", entity.table, record_id)
            raise RemoteWriteError(f"{entity.table} record {record_id} does not exist")
        try:
            return entity.parse(rows[0])
        except (KeyError, ValueError, TypeError) as exc:
            raise RemoteWriteError(f"Store returned an invalid {entity.table} row") from exc

    def delete(self, entity: Entity[RecordT], record_id: str) -> bool:
        record_id = _validate_identifier(record_id, "id")
        try:
            rows = self._client.delete(entity.table, {"id": record_id})
        except StoreClientError as exc:
            logger.error("Error deleting %s with id %s: %s", entity.table, record_id, exc)
            raise RemoteWriteError(f"Failed to delete {entity.table} record {record_id}") from exc
        if not rows:
            raise RemoteWriteError(f"{entity.table} record {record_id} does not exist")
        return True

    # Patients -----------------------------------------------------------

    def list_patients(self) -> List[Patient]:
        return self.list_all(PATIENTS)

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        return self.get_by_id(PATIENTS, patient_id)

    def create_patient(self, patient: Patient) -> Patient:
        return self.create(PATIENTS, patient)

    def update_patient(self, patient_id: str, changes: Mapping[str, Any]) -> Patient:
        return self.update(PATIENTS, patient_id, changes)

    def delete_patient(self, patient_id: str) -> bool:
        return self.delete(PATIENTS, patient_id)

    # Appointments -------------------------------------------------------

    def list_appointments(self) -> List[Appointment]:
        return self.list_all(APPOINTMENTS)

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.get_by_id(APPOINTMENTS, appointment_id)

    def list_appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        return self.list_by_foreign_key(APPOINTMENTS, "patient_id", patient_id, ("date", "time"))

    def create_appointment(self, appointment: Appointment) -> Appointment:
        return self.create(APPOINTMENTS, appointment)

    def update_appointment(self, appointment_id: str, changes: Mapping[str, Any]) -> Appointment:
        return self.update(APPOINTMENTS, appointment_id, changes)

    def delete_appointment(self, appointment_id: str) -> bool:
        return self.delete(APPOINTMENTS, appointment_id)


__all__ = ["APPOINTMENTS", "DataAccess", "Entity", "PATIENTS"]
