"""Pytest configuration.

The application loads its configuration at import time, so the test
environment is exported before anything from ``catalog_grader`` is imported.
"""

import os
from pathlib import Path

os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_CONFIG_FILE", str(Path(__file__).parent.parent / "config.yaml"))
os.environ.setdefault("SESSION_SIGNING_SECRET", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")
os.environ["LOG_FILE"] = ""

from tests.fixtures import *  # noqa: E402,F401,F403
