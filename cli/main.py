"""Command line entry point for the NutriTrack dashboard."""
from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import List, Optional

from connector import InMemoryAuthClient, InMemoryTableClient, StoreClientError, StoreTableClient
from connector.settings import ConfigurationError, Settings
from services import DashboardError, DataAccess
from ui.dashboard import create_app

from .seed import seed_database

logger = logging.getLogger("cli")

DEMO_EMAIL = "demo@nutritrack.test"
DEMO_PASSWORD = "demo-password"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="NutriTrack practice dashboard")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the dashboard web server")
    serve.add_argument("--demo", action="store_true", help="Serve seeded in-memory data instead of the store")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on (defaults to PORT or 5000)")

    seed = commands.add_parser("seed", help="Replace the store contents with sample data")
    seed.add_argument("--seed", type=int, default=None, help="Random seed for reproducible sample data")
    return parser.parse_args(argv)


def _demo_app():
    table_client = InMemoryTableClient()
    auth_client = InMemoryAuthClient()
    auth_client.register(DEMO_EMAIL, DEMO_PASSWORD)
    seed_database(DataAccess(table_client))
    logger.info("Demo mode: sign in as %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
    return create_app(table_client=table_client, auth_client=auth_client)


def serve(args: argparse.Namespace) -> int:
    if args.demo:
        app = _demo_app()
        port = args.port or 5000
    else:
        settings = Settings.from_env()
        app = create_app(settings)
        port = args.port or settings.port
    app.run(host=args.host, port=port, debug=False)
    return 0


def seed(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    table_client = StoreTableClient(
        base_url=settings.store_url,
        api_key=settings.store_key,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    )
    summary = seed_database(DataAccess(table_client), random.Random(args.seed))
    logger.info(
        "Database seeded with %d patients and %d appointments",
        summary.patients,
        summary.appointments,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "seed":
            return seed(args)
        return serve(args)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    except (DashboardError, StoreClientError) as exc:
        logger.error("Command %s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
