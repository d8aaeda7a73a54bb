import unittest
from unittest.mock import patch

from connector.settings import ConfigurationError, Settings


class SettingsTests(unittest.TestCase):
    def test_missing_store_variables_fail_fast(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            Settings.from_env({"SUPABASE_URL": "https://project.supabase.co"})

        self.assertIn("SUPABASE_ANON_KEY", str(ctx.exception))

    def test_reads_optional_values(self) -> None:
        settings = Settings.from_env(
            {
                "SUPABASE_URL": "https://project.supabase.co",
                "SUPABASE_ANON_KEY": "anon-key  # from the dashboard",
                "FLASK_SECRET_KEY": "s3cret",
                "PORT": "8080",
                "STORE_MAX_RETRIES": "5",
                "PASSWORD_RESET_REDIRECT_URL": "https://app.example.com/#/reset",
            }
        )

        self.assertEqual(settings.store_key, "anon-key")
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.max_retries, 5)
        self.assertEqual(settings.timeout, 30)
        self.assertEqual(settings.secret_key, "s3cret")
        self.assertEqual(settings.password_reset_redirect, "https://app.example.com/#/reset")

    def test_non_integer_port_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            Settings.from_env({"SUPABASE_URL": "https://x", "SUPABASE_ANON_KEY": "k", "PORT": "eighty"})

    def test_process_environment_loads_dotenv(self) -> None:
        environ = {"SUPABASE_URL": "https://project.supabase.co", "SUPABASE_ANON_KEY": "anon-key"}
        with patch("connector.settings.load_dotenv") as load_dotenv, patch.dict(
            "connector.settings.os.environ", environ, clear=True
        ):
            settings = Settings.from_env()

        load_dotenv.assert_called_once_with()
        self.assertEqual(settings.store_url, "https://project.supabase.co")


if __name__ == "__main__":
    unittest.main()
