"""Load demo employees, company settings and a pending leave into an existing schema.

Safe to re-run: every seed.sql insert is an ON DUPLICATE KEY UPDATE.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_engine.attendance_engine.database.bootstrap import apply_seed_sql
from src.attendance_engine.attendance_engine.database.connection import DBConfig
from src.attendance_engine.attendance_engine.main import configure_logging

logger = logging.getLogger("seed_db")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Apply a seed SQL file to the configured MySQL database.")
    parser.add_argument(
        "--file",
        type=Path,
        default=REPO_ROOT / "database" / "seed.sql",
        help="seed script to apply (default: database/seed.sql)",
    )
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=args.file)
    logger.info("Seeded %s from %s", DBConfig.from_mapping(db_config).describe(), args.file.name)


if __name__ == "__main__":
    main()
