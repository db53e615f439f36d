"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000
MAX_CLOCK_SKEW_MINUTES = 5
DEFAULT_TRANSACTION_ATTEMPTS = 5
DEFAULT_TRANSACTION_BACKOFF_SECONDS = 0.05
DEFAULT_TIMEZONE = "UTC"
DEFAULT_PENALTY_PAGE_SIZE = 20
MAX_PENALTY_PAGE_SIZE = 100

# MySQL error numbers that mean "another transaction got there first".
RETRYABLE_MYSQL_ERRNOS = frozenset({1205, 1213})

LEAVE_REASON_MIN_LENGTH = 5
LEAVE_REASON_MAX_LENGTH = 500
