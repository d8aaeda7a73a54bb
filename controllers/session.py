"""Practitioner identity for the dashboard screens.

A :class:`SessionProvider` is built for each request around the shared auth
client and the request's session storage (the signed Flask session cookie).
Screens read :attr:`SessionProvider.identity` and use the action methods;
nothing else touches the stored tokens.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from connector import AuthClientProtocol, StoreAuthError, TokenData

logger = logging.getLogger(__name__)

SESSION_KEY = "store_session"
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    access_token: str


@dataclass(frozen=True)
class AuthResult:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionProvider:
    def __init__(
        self,
        auth_client: AuthClientProtocol,
        storage: MutableMapping[str, Any],
        *,
        reset_redirect: Optional[str] = None,
        refresh_buffer: int = 60,
    ) -> None:
        self._auth = auth_client
        self._storage = storage
        self._reset_redirect = reset_redirect
        self._refresh_buffer = refresh_buffer
        self.identity: Optional[Identity] = None
        self.is_loading = True

    @property
    def access_token(self) -> Optional[str]:
        return self.identity.access_token if self.identity else None

    def restore(self) -> Optional[Identity]:
        """Resolve the identity from storage, refreshing an expired token once."""

        self.is_loading = True
        try:
            stored = self._storage.get(SESSION_KEY)
            if not stored:
                self.identity = None
                return None
            try:
                token = TokenData.from_dict(stored)
            except StoreAuthError:
                logger.warning("Discarding malformed stored session")
                self._clear()
                return None

            if not token.is_valid(self._refresh_buffer):
                token = self._refresh(token)
                if token is None:
                    return None
            self.identity = self._identity_for(token)
            return self.identity
        finally:
            self.is_loading = False

    def _refresh(self, token: TokenData) -> Optional[TokenData]:
        if not token.refresh_token:
            self._clear()
            return None
        try:
            refreshed = self._auth.refresh(token.refresh_token)
        except StoreAuthError as exc:
            logger.info("Session refresh failed for %s: %s", token.email, exc)
            self._clear()
            return None
        self._store(refreshed)
        return refreshed

    def _store(self, token: TokenData) -> None:
        self._storage[SESSION_KEY] = token.to_dict()

    def _clear(self) -> None:
        self._storage.pop(SESSION_KEY, None)
        self.identity = None

    @staticmethod
    def _identity_for(token: TokenData) -> Identity:
        return Identity(user_id=token.user_id, email=token.email, access_token=token.access_token)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            token = self._auth.sign_in(email.strip(), password)
        except (StoreAuthError, ValueError) as exc:
            return AuthResult(error=str(exc) or "An unexpected error occurred")
        self._store(token)
        self.identity = self._identity_for(token)
        self.is_loading = False
        return AuthResult(data=self.identity)

    def sign_up(self, email: str, password: str, confirm_password: Optional[str] = None) -> AuthResult:
        if confirm_password is not None and password != confirm_password:
            return AuthResult(error="Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult(error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        try:
            token = self._auth.sign_up(email.strip(), password)
        except (StoreAuthError, ValueError) as exc:
            return AuthResult(error=str(exc) or "An unexpected error occurred")
        if token is not None:
            self._store(token)
            self.identity = self._identity_for(token)
        return AuthResult(data=self.identity)

    def sign_out(self) -> None:
        token = self.access_token
        self._clear()
        if not token:
            return
        try:
            self._auth.sign_out(token)
        except StoreAuthError as exc:
            # The local session is already gone; the remote token expires on its own.
            logger.warning("Remote sign-out failed: %s", exc)

    def reset_password(self, email: str) -> AuthResult:
        try:
            self._auth.reset_password(email.strip(), self._reset_redirect)
        except (StoreAuthError, ValueError) as exc:
            return AuthResult(error=str(exc) or "An unexpected error occurred")
        return AuthResult(data=True)
