"""Calendar boundaries computed from a single captured instant."""

from datetime import datetime, timedelta


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Local midnight of the most recent Sunday."""
    days_since_sunday = now.isoweekday() % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def start_of_quarter(now: datetime) -> datetime:
    first_month = (now.month - 1) // 3 * 3 + 1
    return start_of_month(now).replace(month=first_month)
