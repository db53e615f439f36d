"""Monthly violation tally and penalty issuance. Meant to run from cron on the 1st.

Usage: python scripts/calculate_violations.py [YYYY-MM] [--employee-id N]
(default month: the previous month in the company time zone)
"""

from __future__ import annotations

import argparse

from _runtime import build_runtime_container

from src.attendance_engine.attendance_engine.common.datetime_utils import local_date, now_utc, previous_month_key


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Calculate monthly violations and issue penalties.")
    parser.add_argument("month", nargs="?", help="YYYY-MM, defaults to the previous month")
    parser.add_argument("--employee-id", type=int, default=None, help="Only recalculate this employee")
    args = parser.parse_args(argv)

    container = build_runtime_container()
    month = args.month
    if not month:
        tz = container.settings_provider.get_company_settings().tz
        month = previous_month_key(local_date(now_utc(), tz))

    result = container.penalty_service.calculate_monthly_violations(month, args.employee_id)
    print(f"OK: Violations for {month} -> processed={result.processed} penalties_created={result.penalties_created}")


if __name__ == "__main__":
    main()
