"""Connector interfaces for the NutriTrack dashboard."""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .models import (
    APPOINTMENT_STATUSES,
    APPOINTMENT_TYPES,
    DURATION_OPTIONS,
    GENDER_OPTIONS,
    PATIENT_STATUSES,
    Appointment,
    Patient,
)
from .store_client import (
    StoreAPIError,
    StoreAuthClient,
    StoreAuthError,
    StoreClientError,
    StoreTableClient,
    TokenData,
)


class TableClientProtocol(Protocol):
    """Protocol describing the table operations the data access layer needs."""

    def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching ``filters`` ordered ascending by ``order``."""

    def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it with its assigned identifier."""

    def update(
        self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them."""

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Delete matching rows and return them."""


class AuthClientProtocol(Protocol):
    def sign_in(self, email: str, password: str) -> TokenData: ...

    def sign_up(self, email: str, password: str) -> Optional[TokenData]: ...

    def refresh(self, refresh_token: str) -> TokenData: ...

    def sign_out(self, access_token: str) -> None: ...

    def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None: ...


def _order_key(row: Mapping[str, Any], order: Sequence[str]) -> tuple:
    # Nulls sort last, matching the store's ascending order.
    return tuple((row.get(column) is None, row.get(column)) for column in order)


class InMemoryTableClient:
    """In-memory table store simulator for tests and the demo server."""

    def __init__(self, tables: Sequence[str] = ("patients", "appointments")) -> None:
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in tables}
        self._sequence: int = 1
        self._lock = threading.Lock()

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        if table not in self._tables:
            raise StoreAPIError(f'relation "public.{table}" does not exist', status_code=404)
        return self._tables[table]

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
        for column, value in (filters or {}).items():
            current = row.get(column)
            if value is None:
                if current is not None:
                    return False
            elif current is None or str(current) != str(value):
                return False
        return True

    def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [copy.deepcopy(row) for row in self._table(table).values() if self._matches(row, filters)]
        if order:
            rows.sort(key=lambda row: _order_key(row, order))
        return rows

    def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        if not row:
            raise StoreAPIError("Cannot insert an empty row", status_code=400)
        with self._lock:
            rows = self._table(table)
            record_id = str(self._sequence)
            self._sequence += 1
            timestamp = datetime.now(timezone.utc).isoformat()
            stored = {**dict(row), "id": record_id, "created_at": timestamp, "updated_at": timestamp}
            rows[record_id] = stored
            return copy.deepcopy(stored)

    def update(
        self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        if "id" in values:
            raise StoreAPIError("Cannot change a row identifier", status_code=400)
        with self._lock:
            updated: List[Dict[str, Any]] = []
            for row in self._table(table).values():
                if self._matches(row, filters):
                    row.update(values)
                    row["updated_at"] = datetime.now(timezone.utc).isoformat()
                    updated.append(copy.deepcopy(row))
            return updated

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._table(table)
            doomed = [record_id for record_id, row in rows.items() if self._matches(row, filters)]
            return [rows.pop(record_id) for record_id in doomed]


class InMemoryAuthClient:
    """In-memory authentication simulator for tests and the demo server."""

    def __init__(self, *, session_seconds: int = 3600) -> None:
        self._users: Dict[str, Dict[str, str]] = {}
        self._refresh_tokens: Dict[str, str] = {}
        self._session_seconds = session_seconds
        self._sequence = 1
        self.reset_requests: List[str] = []

    def register(self, email: str, password: str) -> None:
        user_id = f"user-{self._sequence}"
        self._sequence += 1
        self._users[email.lower()] = {"id": user_id, "email": email, "password": password}

    def _issue(self, user: Mapping[str, str]) -> TokenData:
        refresh_token = f"refresh-{user['id']}-{self._sequence}"
        self._sequence += 1
        self._refresh_tokens[refresh_token] = user["email"].lower()
        return TokenData(
            access_token=f"access-{user['id']}-{self._sequence}",
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self._session_seconds),
            user_id=user["id"],
            email=user["email"],
        )

    def sign_in(self, email: str, password: str) -> TokenData:
        user = self._users.get(email.lower())
        if user is None or user["password"] != password:
            raise StoreAuthError("Invalid login credentials")
        return self._issue(user)

    def sign_up(self, email: str, password: str) -> Optional[TokenData]:
        if email.lower() in self._users:
            raise StoreAuthError("User already registered")
        self.register(email, password)
        return None

    def refresh(self, refresh_token: str) -> TokenData:
        email = self._refresh_tokens.pop(refresh_token, None)
        if email is None:
            raise StoreAuthError("Invalid Refresh Token")
        return self._issue(self._users[email])

    def sign_out(self, access_token: str) -> None:
        return None

    def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None:
        self.reset_requests.append(email)


__all__ = [
    "APPOINTMENT_STATUSES",
    "APPOINTMENT_TYPES",
    "Appointment",
    "AuthClientProtocol",
    "DURATION_OPTIONS",
    "GENDER_OPTIONS",
    "InMemoryAuthClient",
    "InMemoryTableClient",
    "PATIENT_STATUSES",
    "Patient",
    "StoreAPIError",
    "StoreAuthClient",
    "StoreAuthError",
    "StoreClientError",
    "StoreTableClient",
    "TableClientProtocol",
    "TokenData",
]
