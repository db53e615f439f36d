"""Close out one working day. Meant to run from cron shortly after midnight.

Usage: python scripts/finalize_day.py [YYYY-MM-DD]   (default: yesterday, company time zone)
"""

from __future__ import annotations

import argparse
from datetime import timedelta

from _runtime import build_runtime_container

from src.attendance_engine.attendance_engine.common.datetime_utils import local_date, now_utc, parse_iso_date


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Finalize attendance records for one day.")
    parser.add_argument("date", nargs="?", help="YYYY-MM-DD, defaults to yesterday in the company time zone")
    args = parser.parse_args(argv)

    container = build_runtime_container()
    if args.date:
        work_date = parse_iso_date(args.date)
    else:
        tz = container.settings_provider.get_company_settings().tz
        work_date = local_date(now_utc(), tz) - timedelta(days=1)

    result = container.finalization_job.finalize_attendance(work_date)
    print(
        f"OK: Finalized {work_date.isoformat()} -> processed={result.processed} "
        f"absent_created={result.absent_records_created} updated={result.records_updated}"
    )


if __name__ == "__main__":
    main()
