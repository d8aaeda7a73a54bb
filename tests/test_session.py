import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from connector import InMemoryAuthClient, StoreAuthError, TokenData
from controllers import SessionProvider
from controllers.session import SESSION_KEY


def _token(seconds: int, refresh_token="refresh-1") -> TokenData:
    return TokenData(
        access_token="access-1",
        refresh_token=refresh_token,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=seconds),
        user_id="user-1",
        email="dr.smith@example.com",
    )


class SessionProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.auth = InMemoryAuthClient()
        self.auth.register("dr.smith@example.com", "correct-horse")
        self.storage = {}
        self.provider = SessionProvider(self.auth, self.storage)

    def test_loading_until_restored(self) -> None:
        self.assertTrue(self.provider.is_loading)

        self.assertIsNone(self.provider.restore())

        self.assertFalse(self.provider.is_loading)
        self.assertIsNone(self.provider.identity)

    def test_sign_in_persists_session_for_next_request(self) -> None:
        result = self.provider.sign_in("dr.smith@example.com", "correct-horse")

        self.assertTrue(result.ok)
        restored = SessionProvider(self.auth, self.storage).restore()
        self.assertEqual(restored.email, "dr.smith@example.com")
        self.assertEqual(restored, self.provider.identity)

    def test_sign_in_failure_returns_error(self) -> None:
        result = self.provider.sign_in("dr.smith@example.com", "wrong")

        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Invalid login credentials")
        self.assertNotIn(SESSION_KEY, self.storage)

    def test_expired_token_is_refreshed_once(self) -> None:
        auth = MagicMock()
        auth.refresh.return_value = _token(3600, refresh_token="refresh-2")
        storage = {SESSION_KEY: _token(-10).to_dict()}

        identity = SessionProvider(auth, storage).restore()

        auth.refresh.assert_called_once_with("refresh-1")
        self.assertEqual(identity.user_id, "user-1")
        self.assertEqual(storage[SESSION_KEY]["refresh_token"], "refresh-2")

    def test_failed_refresh_clears_identity(self) -> None:
        auth = MagicMock()
        auth.refresh.side_effect = StoreAuthError("Invalid Refresh Token")
        storage = {SESSION_KEY: _token(-10).to_dict()}
        provider = SessionProvider(auth, storage)

        self.assertIsNone(provider.restore())

        self.assertNotIn(SESSION_KEY, storage)
        self.assertFalse(provider.is_loading)

    def test_malformed_storage_is_discarded(self) -> None:
        self.storage[SESSION_KEY] = {"access_token": "x"}

        self.assertIsNone(self.provider.restore())
        self.assertNotIn(SESSION_KEY, self.storage)

    def test_sign_up_validates_before_remote_call(self) -> None:
        auth = MagicMock()
        provider = SessionProvider(auth, {})

        mismatch = provider.sign_up("new@example.com", "long-enough", "different")
        too_short = provider.sign_up("new@example.com", "short", "short")

        self.assertEqual(mismatch.error, "Passwords do not match")
        self.assertEqual(too_short.error, "Password must be at least 8 characters long")
        auth.sign_up.assert_not_called()

    def test_sign_up_awaiting_confirmation_stays_signed_out(self) -> None:
        result = self.provider.sign_up("new@example.com", "long-enough", "long-enough")

        self.assertTrue(result.ok)
        self.assertIsNone(self.provider.identity)
        self.assertTrue(self.auth.sign_in("new@example.com", "long-enough").access_token)

    def test_sign_out_clears_local_session_even_if_remote_fails(self) -> None:
        auth = MagicMock()
        auth.sign_in.return_value = _token(3600)
        auth.sign_out.side_effect = StoreAuthError("network")
        storage = {}
        provider = SessionProvider(auth, storage)
        provider.sign_in("dr.smith@example.com", "correct-horse")

        provider.sign_out()

        self.assertIsNone(provider.identity)
        self.assertNotIn(SESSION_KEY, storage)
        auth.sign_out.assert_called_once_with("access-1")

    def test_reset_password_uses_configured_redirect(self) -> None:
        auth = MagicMock()
        provider = SessionProvider(auth, {}, reset_redirect="https://app.example.com/reset-password")

        result = provider.reset_password(" dr.smith@example.com ")

        self.assertTrue(result.ok)
        auth.reset_password.assert_called_once_with(
            "dr.smith@example.com", "https://app.example.com/reset-password"
        )


if __name__ == "__main__":
    unittest.main()
