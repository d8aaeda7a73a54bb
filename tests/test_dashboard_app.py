import unittest
from datetime import date
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

from connector import Appointment, InMemoryAuthClient, InMemoryTableClient, Patient
from services import DataAccess, RemoteFetchError
from ui.dashboard import create_app

EMAIL = "dr.smith@example.com"
PASSWORD = "correct-horse"


class DashboardAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self.table_client = InMemoryTableClient()
        self.auth_client = InMemoryAuthClient()
        self.auth_client.register(EMAIL, PASSWORD)
        self.data = DataAccess(self.table_client)
        self.emma = self.data.create_patient(
            Patient(
                name="Emma Johnson",
                email="emma.johnson@example.com",
                phone="(555) 123-4567",
                status="Active",
                diet_plan="Low Carb",
                last_visit="2023-06-15",
            )
        )
        self.michael = self.data.create_patient(
            Patient(name="Michael Smith", email="michael@example.com", phone="(555) 987-6543", status="Inactive")
        )
        self.appointment = self.data.create_appointment(
            Appointment(
                patient_id=self.emma.id,
                patient_name=self.emma.name,
                date="2023-06-22",
                time="10:00 AM",
                duration=30,
                type="Follow-up",
                status="Scheduled",
            )
        )
        self.app = create_app(
            table_client=self.table_client,
            auth_client=self.auth_client,
            secret_key="test-secret",
        )
        self.app.testing = True
        self.client = self.app.test_client()

    def _login(self):
        return self.client.post("/login", data={"email": EMAIL, "password": PASSWORD})

    def test_healthz(self) -> None:
        response = self.client.get("/healthz")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"status": "ok"})

    def test_dashboard_requires_sign_in(self) -> None:
        response = self.client.get("/dashboard/patients")

        location = urlsplit(response.headers["Location"])
        self.assertEqual(response.status_code, 302)
        self.assertEqual(location.path, "/login")
        self.assertEqual(parse_qs(location.query)["next"], ["/dashboard/patients"])

    def test_invalid_credentials_rerender_login(self) -> None:
        response = self.client.post("/login", data={"email": EMAIL, "password": "wrong"})

        self.assertEqual(response.status_code, 401)
        self.assertIn(b"Invalid login credentials", response.data)

    def test_login_redirects_to_requested_page(self) -> None:
        response = self.client.post(
            "/login", data={"email": EMAIL, "password": PASSWORD, "next": "/dashboard/appointments"}
        )

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers["Location"].endswith("/dashboard/appointments"))

    def test_login_ignores_external_next_url(self) -> None:
        response = self.client.post(
            "/login", data={"email": EMAIL, "password": PASSWORD, "next": "//evil.example.com/"}
        )

        self.assertTrue(response.headers["Location"].endswith("/dashboard"))

    def test_login_ignores_backslash_next_url(self) -> None:
        response = self.client.post(
            "/login", data={"email": EMAIL, "password": PASSWORD, "next": "/\\evil.example.com"}
        )

        self.assertTrue(response.headers["Location"].endswith("/dashboard"))

    def test_overview_greets_practitioner(self) -> None:
        self._login()

        response = self.client.get("/dashboard")

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Welcome back, Dr. dr.smith", response.data)
        self.assertIn(b"Emma Johnson", response.data)

    def test_patient_search(self) -> None:
        self._login()

        response = self.client.get("/dashboard/patients?search=emma")

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Emma Johnson", response.data)
        self.assertNotIn(b"Michael Smith", response.data)

    def test_unknown_patient_is_404(self) -> None:
        self._login()

        response = self.client.get("/dashboard/patients/999")

        self.assertEqual(response.status_code, 404)
        self.assertIn(b"Patient Not Found", response.data)

    def test_blank_identifiers_are_404(self) -> None:
        self._login()

        for url in ("/dashboard/appointments/%20", "/dashboard/patients/%20"):
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, 404)

    def test_create_patient_redirects_to_list(self) -> None:
        self._login()

        response = self.client.post(
            "/dashboard/patients/new",
            data={
                "first_name": "Olivia",
                "last_name": "Taylor",
                "email": "olivia.taylor@example.com",
                "phone": "(555) 456-7890",
                "status": "Active",
                "diet_plan": "",
            },
        )

        self.assertEqual(response.status_code, 302)
        created = [p for p in self.data.list_patients() if p.name == "Olivia Taylor"]
        self.assertEqual(len(created), 1)
        self.assertIsNone(created[0].diet_plan)

    def test_create_patient_validation_error(self) -> None:
        self._login()

        response = self.client.post("/dashboard/patients/new", data={"first_name": "Olivia", "email": "bad"})

        self.assertEqual(response.status_code, 400)
        self.assertIn(b"Please enter a valid email address", response.data)

    def test_patient_status_change(self) -> None:
        self._login()

        response = self.client.post(f"/dashboard/patients/{self.michael.id}/status", data={"status": "Active"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(self.data.get_patient(self.michael.id).status, "Active")

    def test_cancel_requires_confirmation_then_blocks_completion(self) -> None:
        self._login()
        url = f"/dashboard/appointments/{self.appointment.id}"

        prompt = self.client.post(f"{url}/cancel")
        self.assertEqual(prompt.status_code, 302)
        self.assertIn("confirm=cancel", prompt.headers["Location"])
        self.assertEqual(self.data.get_appointment(self.appointment.id).status, "Scheduled")

        confirmed = self.client.post(f"{url}/cancel", data={"confirm": "yes"})
        self.assertEqual(confirmed.status_code, 302)
        self.assertEqual(self.data.get_appointment(self.appointment.id).status, "Cancelled")

        self.client.post(f"{url}/complete")
        self.assertEqual(self.data.get_appointment(self.appointment.id).status, "Cancelled")

        page = self.client.get(url)
        self.assertNotIn(b"Mark as Completed", page.data)

    def test_new_appointment_without_patient(self) -> None:
        self._login()

        response = self.client.post(
            "/dashboard/appointments/new",
            data={"patient_id": "", "date": "2023-06-30", "time": "09:00", "action": "create"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn(b"Please select a patient", response.data)
        self.assertEqual(len(self.data.list_appointments()), 1)

    def test_new_appointment_preview_does_not_create(self) -> None:
        self._login()

        response = self.client.post(
            "/dashboard/appointments/new",
            data={"patient_id": self.emma.id, "date": "2023-06-30", "time": "09:00", "action": "preview"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Friday, June 30, 2023", response.data)
        self.assertEqual(len(self.data.list_appointments()), 1)

    def test_new_appointment_is_created(self) -> None:
        self._login()

        response = self.client.post(
            "/dashboard/appointments/new",
            data={
                "patient_id": self.emma.id,
                "date": "2023-06-30",
                "time": "09:00",
                "duration": "45",
                "type": "Diet Review",
                "action": "create",
            },
        )

        self.assertEqual(response.status_code, 302)
        created = [a for a in self.data.list_appointments() if a.date == "2023-06-30"]
        self.assertEqual(created[0].patient_name, "Emma Johnson")
        self.assertEqual(created[0].duration, 45)

    def test_calendar_orders_raw_time_strings(self) -> None:
        self.data.create_appointment(
            Appointment(
                patient_id=self.michael.id,
                patient_name="Michael Smith",
                date="2023-06-22",
                time="9:00 AM",
                status="Scheduled",
            )
        )
        self._login()

        with patch("controllers.base.date") as fake_date:
            fake_date.today.return_value = date(2023, 6, 22)
            response = self.client.get("/dashboard/appointments?view=calendar")

        body = response.data.decode()
        self.assertEqual(response.status_code, 200)
        self.assertIn("Thursday, June 22, 2023", body)
        self.assertLess(body.index("10:00 AM"), body.index("9:00 AM"))
        self.assertIn("Today", body)

    def test_fetch_failure_shows_retry_panel(self) -> None:
        self._login()

        with patch.object(DataAccess, "list_appointments", side_effect=RemoteFetchError("down")):
            response = self.client.get("/dashboard/appointments")

        self.assertEqual(response.status_code, 503)
        self.assertIn(b"Failed to load appointments. Please try again later.", response.data)
        self.assertIn(b"Try Again", response.data)

    def test_forgot_password_sends_reset_link(self) -> None:
        response = self.client.post("/forgot-password", data={"email": EMAIL})

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Password reset link sent!", response.data)
        self.assertEqual(self.auth_client.reset_requests, [EMAIL])

    def test_signup_rejects_mismatched_passwords(self) -> None:
        response = self.client.post(
            "/signup",
            data={"email": "new@example.com", "password": "long-enough", "confirm_password": "different"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn(b"Passwords do not match", response.data)

    def test_logout_clears_session(self) -> None:
        self._login()

        self.client.post("/logout")
        response = self.client.get("/dashboard")

        self.assertEqual(response.status_code, 302)
        self.assertIn("/login", response.headers["Location"])


if __name__ == "__main__":
    unittest.main()
