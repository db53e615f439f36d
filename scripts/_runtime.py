"""Shared setup for the cron entry points."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_engine.attendance_engine.container import Container, build_container
from src.attendance_engine.attendance_engine.core.constants import DEFAULT_TRANSACTION_ATTEMPTS
from src.attendance_engine.attendance_engine.main import configure_logging


def build_runtime_container() -> Container:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    return build_container(
        db_config=dict(settings.DB_CONFIG),
        transaction_max_attempts=int(getattr(settings, "TRANSACTION_MAX_ATTEMPTS", DEFAULT_TRANSACTION_ATTEMPTS)),
    )
