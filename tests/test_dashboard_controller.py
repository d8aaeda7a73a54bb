import contextvars
import unittest
from datetime import date
from unittest.mock import MagicMock

from connector import Appointment, Patient
from controllers import DashboardController, DashboardStats
from services import DataAccess, RemoteFetchError

TODAY = date(2023, 6, 22)
REQUEST_TOKEN: contextvars.ContextVar = contextvars.ContextVar("request_token", default=None)


def _patient(name: str, last_visit=None, status="Active", diet_plan=None) -> Patient:
    return Patient(
        name=name,
        email=f"{name.split()[0].lower()}@example.com",
        phone="555-0100",
        status=status,
        last_visit=last_visit,
        diet_plan=diet_plan,
    )


def _appointment(day: str, time: str, status: str = "Scheduled") -> Appointment:
    return Appointment(patient_id="p1", patient_name="Emma Johnson", date=day, time=time, status=status)


class DashboardControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.data = MagicMock(spec=DataAccess)
        self.data.list_patients.return_value = [
            _patient("Emma Johnson", "2023-06-15", diet_plan="Low Carb"),
            _patient("Michael Chen", "2023-05-30", diet_plan="DASH Diet"),
            _patient("Sophia Rodriguez", "2023-06-10", status="Inactive", diet_plan="Low FODMAP"),
            _patient("James Wilson", "2023-05-20"),
            _patient("Olivia Taylor", "2023-06-05", diet_plan="Gluten-Free"),
            _patient("Noah Brown"),
        ]
        self.data.list_appointments.return_value = [
            _appointment("2023-06-22", "9:00 AM"),
            _appointment("2023-06-22", "10:00 AM"),
            _appointment("2023-06-22", "11:30 AM", status="Cancelled"),
            _appointment("2023-06-22", "1:00 PM"),
            _appointment("2023-06-25", "9:00 AM"),
            _appointment("2023-06-01", "9:00 AM", status="Completed"),
        ]

    def test_stats_and_previews(self) -> None:
        controller = DashboardController(self.data, practitioner_email="dr.smith@example.com")

        controller.load()

        self.assertIsNone(controller.error)
        self.assertEqual(
            controller.stats(TODAY),
            DashboardStats(total_patients=6, appointments_today=4, active_diet_plans=3, upcoming_scheduled=4),
        )
        self.assertEqual(
            [p.name for p in controller.recent_patients()],
            ["Emma Johnson", "Sophia Rodriguez", "Olivia Taylor", "Michael Chen"],
        )
        self.assertEqual([a.time for a in controller.schedule_preview(TODAY)], ["1:00 PM", "10:00 AM", "11:30 AM"])
        self.assertEqual(controller.greeting_name, "dr.smith")

    def test_fetches_see_the_callers_context(self) -> None:
        seen = []
        self.data.list_patients.side_effect = lambda: seen.append(REQUEST_TOKEN.get()) or []
        token = REQUEST_TOKEN.set("access-1")
        try:
            DashboardController(self.data).load()
        finally:
            REQUEST_TOKEN.reset(token)

        self.assertEqual(seen, ["access-1"])

    def test_either_fetch_failing_fails_the_screen(self) -> None:
        self.data.list_appointments.side_effect = RemoteFetchError("down")
        controller = DashboardController(self.data)

        controller.load()

        self.assertEqual(controller.error, "Failed to load dashboard data. Please try again later.")
        self.assertEqual(controller.patients, [])
        self.assertFalse(controller.loading)
        self.assertEqual(controller.greeting_name, "User")


if __name__ == "__main__":
    unittest.main()
