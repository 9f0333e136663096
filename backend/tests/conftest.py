"""
Central pytest configuration for the book marketplace tests.

Environment variables are set before any ``bookmarket`` import so the lazy
engine binds to a shared in-memory SQLite database and the app factory runs
without rate limits or log files.
"""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["LOG_TO_FILE"] = "0"

pytest_plugins = [
    "tests.config.markers",
    "tests.fixtures.database_fixtures",
    "tests.fixtures.domain_fixtures",
    "tests.fixtures.app_fixtures",
]
