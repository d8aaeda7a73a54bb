import random
import unittest
from datetime import date, timedelta
from unittest.mock import patch

from cli import main as cli_main
from cli.seed import SAMPLE_PATIENTS, seed_database
from connector import InMemoryTableClient, Patient
from connector.settings import ConfigurationError
from services import DataAccess

TODAY = date(2024, 3, 1)


class SeedDatabaseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.data = DataAccess(InMemoryTableClient())

    def test_seed_replaces_existing_rows(self) -> None:
        self.data.create_patient(Patient(name="Stale Record", email="s@example.com", phone="0", status="Active"))

        summary = seed_database(self.data, random.Random(7), today=TODAY)

        patients = self.data.list_patients()
        self.assertEqual(summary.patients, len(SAMPLE_PATIENTS))
        self.assertEqual(summary.appointments, 25)
        self.assertNotIn("Stale Record", [p.name for p in patients])
        self.assertEqual(len(patients), 5)

    def test_generated_appointments_follow_past_and_upcoming_rules(self) -> None:
        seed_database(self.data, random.Random(11), today=TODAY)
        patients = {p.id: p.name for p in self.data.list_patients()}

        appointments = self.data.list_appointments()
        past = [a for a in appointments if a.date < TODAY.isoformat()]
        upcoming = [a for a in appointments if a.date > TODAY.isoformat()]

        self.assertEqual(len(past), 15)
        self.assertEqual(len(upcoming), 10)
        self.assertTrue(all(a.status in ("Completed", "Cancelled", "No-show") for a in past))
        self.assertTrue(all(a.status == "Scheduled" for a in upcoming))
        self.assertTrue(all(a.date >= (TODAY - timedelta(days=60)).isoformat() for a in past))
        self.assertTrue(all(a.date <= (TODAY + timedelta(days=30)).isoformat() for a in upcoming))
        for appointment in appointments:
            hour, minute = appointment.time.split(":")
            self.assertIn(int(hour), range(9, 17))
            self.assertIn(minute, ("00", "30"))
            self.assertIn(appointment.duration, (30, 45, 60))
            self.assertEqual(patients[appointment.patient_id], appointment.patient_name)

    def test_same_seed_is_reproducible(self) -> None:
        other = DataAccess(InMemoryTableClient())

        seed_database(self.data, random.Random(3), today=TODAY)
        seed_database(other, random.Random(3), today=TODAY)

        self.assertEqual(
            [(a.date, a.time, a.type) for a in self.data.list_appointments()],
            [(a.date, a.time, a.type) for a in other.list_appointments()],
        )


class CommandLineTests(unittest.TestCase):
    def test_missing_configuration_exits_with_error(self) -> None:
        with patch("cli.main.Settings.from_env", side_effect=ConfigurationError("Missing store environment variables")):
            self.assertEqual(cli_main.main(["seed"]), 1)

    def test_demo_server_uses_in_memory_store(self) -> None:
        with patch("flask.Flask.run") as run:
            self.assertEqual(cli_main.main(["serve", "--demo", "--port", "5050"]), 0)

        run.assert_called_once_with(host="127.0.0.1", port=5050, debug=False)


if __name__ == "__main__":
    unittest.main()
