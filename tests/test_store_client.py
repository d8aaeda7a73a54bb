import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import requests

from connector import StoreAPIError, StoreAuthClient, StoreAuthError, StoreTableClient, TokenData

BASE_URL = "https://project.supabase.co"
ANON_KEY = "anon-key"


def _response(status_code: int = 200, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = b"" if payload is None else b"payload"
    response.json.return_value = payload
    response.headers = {"Content-Type": "application/json"}
    response.text = ""
    return response


class StoreTableClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock(spec=requests.Session)
        self.token = None
        self.client = StoreTableClient(
            base_url=f"{BASE_URL}/",
            api_key=ANON_KEY,
            token_provider=lambda: self.token,
            session=self.session,
        )

    def test_select_builds_filters_and_order(self) -> None:
        self.session.request.return_value = _response(payload=[{"id": "1"}])

        rows = self.client.select("appointments", filters={"patientid": "4"}, order=["date", "time"])

        self.assertEqual(rows, [{"id": "1"}])
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs["method"], "GET")
        self.assertEqual(kwargs["url"], f"{BASE_URL}/rest/v1/appointments")
        self.assertEqual(
            kwargs["params"],
            {"patientid": "eq.4", "select": "*", "order": "date.asc,time.asc"},
        )
        self.assertEqual(kwargs["headers"]["apikey"], ANON_KEY)
        self.assertEqual(kwargs["headers"]["Authorization"], f"Bearer {ANON_KEY}")

    def test_requests_carry_practitioner_token_when_signed_in(self) -> None:
        self.token = "user-token"
        self.session.request.return_value = _response(payload=[])

        self.client.select("patients")

        headers = self.session.request.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer user-token")
        self.assertEqual(headers["apikey"], ANON_KEY)

    def test_insert_requests_representation(self) -> None:
        self.session.request.return_value = _response(201, [{"id": "9", "name": "Emma"}])

        row = self.client.insert("patients", {"name": "Emma"})

        self.assertEqual(row["id"], "9")
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs["method"], "POST")
        self.assertEqual(kwargs["json"], [{"name": "Emma"}])
        self.assertEqual(kwargs["headers"]["Prefer"], "return=representation")

    def test_update_returns_no_rows_for_unknown_identifier(self) -> None:
        self.session.request.return_value = _response(payload=[])

        rows = self.client.update("appointments", {"id": "missing"}, {"status": "Cancelled"})

        self.assertEqual(rows, [])
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs["method"], "PATCH")
        self.assertEqual(kwargs["params"]["id"], "eq.missing")

    def test_update_requires_filters(self) -> None:
        with self.assertRaises(ValueError):
            self.client.update("appointments", {}, {"status": "Cancelled"})
        self.session.request.assert_not_called()

    def test_error_status_raises_api_error_with_store_message(self) -> None:
        self.session.request.return_value = _response(401, {"message": "JWT expired"})

        with self.assertRaises(StoreAPIError) as ctx:
            self.client.select("patients")

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(str(ctx.exception), "JWT expired")

    def test_transport_failure_raises_api_error(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("offline")

        with self.assertRaises(StoreAPIError):
            self.client.delete("patients", {"id": "1"})

    def test_default_session_does_not_retry_inserts(self) -> None:
        client = StoreTableClient(base_url=BASE_URL, api_key=ANON_KEY)
        retry = client._session.get_adapter(BASE_URL).max_retries

        self.assertNotIn("POST", retry.allowed_methods)
        self.assertIn("PATCH", retry.allowed_methods)
        self.assertIn(503, retry.status_forcelist)


class StoreAuthClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock(spec=requests.Session)
        self.client = StoreAuthClient(base_url=BASE_URL, api_key=ANON_KEY, session=self.session)

    def test_sign_in_returns_token_data(self) -> None:
        self.session.request.return_value = _response(
            payload={
                "access_token": "access",
                "refresh_token": "refresh",
                "expires_in": 3600,
                "user": {"id": "user-1", "email": "dr.smith@example.com"},
            }
        )

        token = self.client.sign_in("dr.smith@example.com", "secret-password")

        self.assertEqual(token.access_token, "access")
        self.assertEqual(token.user_id, "user-1")
        self.assertTrue(token.is_valid())
        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs["url"], f"{BASE_URL}/auth/v1/token")
        self.assertEqual(kwargs["params"], {"grant_type": "password"})

    def test_sign_in_failure_raises_auth_error(self) -> None:
        self.session.request.return_value = _response(
            400, {"error": "invalid_grant", "error_description": "Invalid login credentials"}
        )

        with self.assertRaises(StoreAuthError) as ctx:
            self.client.sign_in("dr.smith@example.com", "wrong")

        self.assertEqual(str(ctx.exception), "Invalid login credentials")

    def test_sign_up_without_session_returns_none(self) -> None:
        self.session.request.return_value = _response(200, {"id": "user-2", "email": "new@example.com"})

        self.assertIsNone(self.client.sign_up("new@example.com", "long-enough"))

    def test_reset_password_passes_redirect(self) -> None:
        self.session.request.return_value = _response(200, {})

        self.client.reset_password("dr.smith@example.com", "https://app.example.com/reset-password")

        kwargs = self.session.request.call_args.kwargs
        self.assertEqual(kwargs["url"], f"{BASE_URL}/auth/v1/recover")
        self.assertEqual(kwargs["params"], {"redirect_to": "https://app.example.com/reset-password"})


class TokenDataTests(unittest.TestCase):
    def test_dict_round_trip_and_expiry(self) -> None:
        token = TokenData(
            access_token="a",
            refresh_token="r",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=30),
            user_id="u",
            email="dr@example.com",
        )

        restored = TokenData.from_dict(token.to_dict())

        self.assertEqual(restored, token)
        self.assertFalse(restored.is_valid(buffer_seconds=60))
        self.assertTrue(restored.is_valid(buffer_seconds=0))

    def test_malformed_dict_raises_auth_error(self) -> None:
        with self.assertRaises(StoreAuthError):
            TokenData.from_dict({"access_token": "a"})


if __name__ == "__main__":
    unittest.main()
