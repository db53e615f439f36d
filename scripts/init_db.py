"""Create the engine's database and tables.

    python scripts/init_db.py            # schema only
    python scripts/init_db.py --seed     # schema + demo employees/settings
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

from src.attendance_engine.attendance_engine.database.bootstrap import apply_schema, apply_seed_sql, list_tables
from src.attendance_engine.attendance_engine.database.connection import DBConfig
from src.attendance_engine.attendance_engine.main import configure_logging

logger = logging.getLogger("init_db")

DATABASE_DIR = REPO_ROOT / "database"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql to the configured MySQL database.")
    parser.add_argument("--seed", action="store_true", help="also load database/seed.sql")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)
    target = DBConfig.from_mapping(db_config)

    apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

    tables = list_tables(db_config)
    logger.info("Schema ready on %s: %s", target.describe(), ", ".join(sorted(tables)))


if __name__ == "__main__":
    main()
