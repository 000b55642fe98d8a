import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from complianceapi.exceptions import InvalidScheduleError

NONE = "none"
DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"


def utcnow() -> datetime.datetime:
    """Naive UTC now, the form every timestamp column is stored in."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def is_recurring(recurrence_type: str, recurrence_interval: Optional[int]) -> bool:
    return recurrence_type != NONE and bool(recurrence_interval) and recurrence_interval > 0


def advance(
    due_date: datetime.datetime, recurrence_type: str, interval: int
) -> datetime.datetime:
    """Shift ``due_date`` forward by ``interval`` recurrence units.

    Months are calendar months; a day-of-month missing from the target month
    is clamped to its last day (Jan 31 + 1 month is Feb 28 or 29).
    """
    if recurrence_type not in (DAILY, WEEKLY, MONTHLY):
        raise InvalidScheduleError(f"Cannot advance a task with recurrence '{recurrence_type}'")

    try:
        if recurrence_type == DAILY:
            return due_date + datetime.timedelta(days=interval)
        if recurrence_type == WEEKLY:
            return due_date + datetime.timedelta(days=interval * 7)
        return due_date + relativedelta(months=interval)
    except (OverflowError, ValueError) as e:
        raise InvalidScheduleError(
            f"Next due date after {due_date.isoformat()} is out of range"
        ) from e


def next_due_date(
    due_date: datetime.datetime, recurrence_type: str, recurrence_interval: Optional[int]
) -> Optional[datetime.datetime]:
    if not is_recurring(recurrence_type, recurrence_interval):
        return None
    return advance(due_date, recurrence_type, recurrence_interval)
