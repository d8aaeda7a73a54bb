"""Hosted store client utilities.

This module provides clients for the Supabase-compatible backend the
dashboard runs against: a PostgREST table client for the ``patients`` and
``appointments`` collections and a GoTrue client for practitioner sign-in.
The clients manage HTTP session handling with retries and structured error
reporting so callers only ever see :class:`StoreClientError` subclasses.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

__all__ = [
    "StoreAPIError",
    "StoreAuthClient",
    "StoreAuthError",
    "StoreClientError",
    "StoreTableClient",
    "TokenData",
]


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5
DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS = 60

# Inserts are not idempotent and are never retried.
RETRYABLE_METHODS = ("GET", "HEAD", "OPTIONS", "PATCH", "DELETE")


class StoreClientError(RuntimeError):
    """Base exception for hosted store client errors."""


class StoreAuthError(StoreClientError):
    """Raised when an authentication request is rejected or fails."""


class StoreAPIError(StoreClientError):
    """Raised when the store returns an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class TokenData:
    """Container for a signed-in practitioner's tokens."""

    access_token: str
    refresh_token: Optional[str]
    expires_at: datetime
    user_id: str
    email: str

    def is_valid(self, buffer_seconds: int = DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS) -> bool:
        """Check if the token is still valid with a refresh buffer."""

        return datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds) < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.isoformat(),
            "user_id": self.user_id,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenData":
        try:
            expires_at = datetime.fromisoformat(str(data["expires_at"]))
            return cls(
                access_token=str(data["access_token"]),
                refresh_token=data.get("refresh_token"),
                expires_at=expires_at,
                user_id=str(data["user_id"]),
                email=str(data["email"]),
            )
        except (KeyError, ValueError) as exc:
            raise StoreAuthError("Stored session is malformed") from exc

    @classmethod
    def from_session_payload(cls, data: Mapping[str, Any]) -> "TokenData":
        """Build token data from a GoTrue session response."""

        access_token = data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            logger.error("Session response did not include access_token")
            raise StoreAuthError("Session response missing access_token")

        expires_in = data.get("expires_in")
        if not expires_in:
            logger.warning("Session response missing expires_in; defaulting to 1 hour")
            expires_in = 3600
        try:
            expires_in_int = int(expires_in)
        except (TypeError, ValueError) as exc:
            logger.error("Invalid expires_in value in session response: %s", expires_in)
            raise StoreAuthError("Invalid expires_in value in session response") from exc

        user = data.get("user") or {}
        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in_int),
            user_id=str(user.get("id", "")),
            email=str(user.get("email", "")),
        )


class StoreBaseClient:
    """Shared functionality for hosted store API clients."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be provided")
        if not api_key:
            raise ValueError("api_key must be provided")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or self._build_session(
            max_retries=max_retries, backoff_factor=backoff_factor
        )

    def _build_session(self, *, max_retries: int, backoff_factor: float) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            status=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=RETRYABLE_METHODS,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json_payload: Any = None,
        headers: Optional[Dict[str, str]] = None,
        bearer: Optional[str] = None,
        expected_status: Union[int, Tuple[int, ...]] = (200,),
        error_class: type = StoreAPIError,
    ) -> Response:
        if not path:
            raise ValueError("path must be provided")
        if isinstance(expected_status, int):
            expected_status = (expected_status,)

        url = f"{self.base_url}/{path.lstrip('/')}"
        request_headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {bearer or self.api_key}",
            "Accept": "application/json",
        }
        if headers:
            request_headers.update(headers)

        try:
            response = self._session.request(
                method=method.upper(),
                url=url,
                params=params,
                json=json_payload,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Request to store failed: %s", exc)
            raise error_class("Failed to reach the data store") from exc

        if response.status_code not in expected_status:
            self._log_error_response(response)
            message = self._error_message(response)
            if error_class is StoreAPIError:
                raise StoreAPIError(message, status_code=response.status_code)
            raise error_class(message)

        return response

    @staticmethod
    def _error_message(response: Response) -> str:
        try:
            parsed = response.json()
        except ValueError:
            parsed = None
        if isinstance(parsed, Mapping):
            for key in ("error_description", "msg", "message", "error"):
                value = parsed.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"Store responded with unexpected status {response.status_code}"

    @staticmethod
    def _log_error_response(response: Response) -> None:
        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            try:
                parsed = response.json()
                logger.error("Store error response: status=%s body=%s", response.status_code, parsed)
                return
            except ValueError:
                pass
        logger.error("Store error response: status=%s body=%s", response.status_code, response.text[:2048])

    @staticmethod
    def _json(response: Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreAPIError("Store response was not valid JSON", status_code=response.status_code) from exc


class StoreTableClient(StoreBaseClient):
    """Client for the store's PostgREST table API.

    ``token_provider`` returns the signed-in practitioner's access token, if
    any, so row-level policies apply to every request.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            session=session,
        )
        self._token_provider = token_provider

    def _bearer(self) -> Optional[str]:
        if self._token_provider is None:
            return None
        return self._token_provider()

    @staticmethod
    def _filter_params(filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for column, value in (filters or {}).items():
            params[column] = "is.null" if value is None else f"eq.{value}"
        return params

    @staticmethod
    def _table_path(table: str) -> str:
        if not table:
            raise ValueError("table must be provided")
        return f"rest/v1/{table}"

    def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Return all rows of ``table`` matching ``filters``, ordered ascending."""

        params = self._filter_params(filters)
        params["select"] = "*"
        if order:
            params["order"] = ",".join(f"{column}.asc" for column in order)
        response = self._request("GET", self._table_path(table), params=params, bearer=self._bearer())
        rows = self._json(response)
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise StoreAPIError(f"Expected a list of rows from {table}", status_code=response.status_code)
        return rows

    def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert ``row`` and return it as persisted, including its identifier."""

        if not isinstance(row, Mapping) or not row:
            raise ValueError("row must be a non-empty mapping")
        response = self._request(
            "POST",
            self._table_path(table),
            params={"select": "*"},
            json_payload=[dict(row)],
            headers={"Prefer": "return=representation"},
            bearer=self._bearer(),
            expected_status=(200, 201),
        )
        rows = self._json(response) or []
        if not rows:
            raise StoreAPIError(f"Insert into {table} returned no rows", status_code=response.status_code)
        return rows[0]

    def update(
        self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        """Apply ``values`` to the matching rows and return them as updated."""

        if not filters:
            raise ValueError("filters must be provided for an update")
        if not values:
            raise ValueError("values must be a non-empty mapping")
        response = self._request(
            "PATCH",
            self._table_path(table),
            params={**self._filter_params(filters), "select": "*"},
            json_payload=dict(values),
            headers={"Prefer": "return=representation"},
            bearer=self._bearer(),
            expected_status=(200, 204),
        )
        return self._json(response) or []

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Delete the matching rows and return them."""

        if not filters:
            raise ValueError("filters must be provided for a delete")
        response = self._request(
            "DELETE",
            self._table_path(table),
            params={**self._filter_params(filters), "select": "*"},
            headers={"Prefer": "return=representation"},
            bearer=self._bearer(),
            expected_status=(200, 204),
        )
        return self._json(response) or []


class StoreAuthClient(StoreBaseClient):
    """Client for the store's GoTrue authentication API."""

    def sign_in(self, email: str, password: str) -> TokenData:
        """Exchange email and password for a session."""

        if not email or not password:
            raise ValueError("email and password must be provided")
        response = self._request(
            "POST",
            "auth/v1/token",
            params={"grant_type": "password"},
            json_payload={"email": email, "password": password},
            error_class=StoreAuthError,
        )
        token = TokenData.from_session_payload(self._json(response) or {})
        logger.info("Practitioner %s signed in; session expires at %s", token.email, token.expires_at.isoformat())
        return token

    def refresh(self, refresh_token: str) -> TokenData:
        if not refresh_token:
            raise ValueError("refresh_token must be provided")
        logger.debug("Refreshing store session token")
        response = self._request(
            "POST",
            "auth/v1/token",
            params={"grant_type": "refresh_token"},
            json_payload={"refresh_token": refresh_token},
            error_class=StoreAuthError,
        )
        return TokenData.from_session_payload(self._json(response) or {})

    def sign_up(self, email: str, password: str) -> Optional[TokenData]:
        """Register a practitioner.

        Returns a session when the store signs the user in immediately, or
        ``None`` when email confirmation is required first.
        """

        if not email or not password:
            raise ValueError("email and password must be provided")
        response = self._request(
            "POST",
            "auth/v1/signup",
            json_payload={"email": email, "password": password},
            expected_status=(200, 201),
            error_class=StoreAuthError,
        )
        payload = self._json(response) or {}
        if payload.get("access_token"):
            return TokenData.from_session_payload(payload)
        return None

    def sign_out(self, access_token: str) -> None:
        self._request(
            "POST",
            "auth/v1/logout",
            bearer=access_token,
            expected_status=(200, 204),
            error_class=StoreAuthError,
        )

    def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None:
        if not email:
            raise ValueError("email must be provided")
        params = {"redirect_to": redirect_to} if redirect_to else None
        self._request(
            "POST",
            "auth/v1/recover",
            params=params,
            json_payload={"email": email},
            error_class=StoreAuthError,
        )
