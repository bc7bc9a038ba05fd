"""Absolute expiry timestamps relative to the current time."""

import time

MINUTE_IN_SECONDS = 60
HOUR_IN_SECONDS = 60 * MINUTE_IN_SECONDS
DAY_IN_SECONDS = 24 * HOUR_IN_SECONDS
WEEK_IN_SECONDS = 7 * DAY_IN_SECONDS
MONTH_IN_SECONDS = 30 * DAY_IN_SECONDS
YEAR_IN_SECONDS = 365 * DAY_IN_SECONDS

__all__ = [
    "now",
    "seconds",
    "minutes",
    "hours",
    "days",
    "weeks",
    "months",
    "years",
]


def now() -> int:
    return int(time.time())


def seconds(seconds: int = 1) -> int:
    return now() + seconds


def minutes(minutes: int = 1) -> int:
    return now() + minutes * MINUTE_IN_SECONDS


def hours(hours: int = 1) -> int:
    return now() + hours * HOUR_IN_SECONDS


def days(days: int = 1) -> int:
    return now() + days * DAY_IN_SECONDS


def weeks(weeks: int = 1) -> int:
    return now() + weeks * WEEK_IN_SECONDS


def months(months: int = 1) -> int:
    """Month is a fixed 30 day period, not a calendar month."""
    return now() + months * MONTH_IN_SECONDS


def years(years: int = 1) -> int:
    """Year is a fixed 365 day period."""
    return now() + years * YEAR_IN_SECONDS
