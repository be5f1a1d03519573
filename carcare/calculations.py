"""Helper functions for due status, recurrence and fuel calculations."""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .due_status import DueStatus
from .fuel_entry import FuelEntry
from .reminder import Reminder
from .status import Status

DUE_SOON_DAYS = 7
UPCOMING_DAYS = 30


def calc_next_due_date(
    due_date: Optional[date], interval_months: Optional[int]
) -> Optional[date]:
    """Next due date: due + interval months (clamped to the end of short months)."""
    if due_date is None or interval_months is None:
        return None
    return due_date + relativedelta(months=int(interval_months))


def calc_next_due_odometer(
    due_odometer: Optional[int], interval_km: Optional[int]
) -> Optional[int]:
    """
    Next due odometer: the previous *due* value + interval.

    The reading at completion time is deliberately not used, so the schedule
    does not drift when a service is logged late.
    """
    if due_odometer is None or interval_km is None:
        return None
    return due_odometer + interval_km


def check_status(
    days_until_due: Optional[int],
    odometer_remaining: Optional[int],
    is_overdue: bool,
    notify_km_before: Optional[int] = None,
) -> Status:
    """Determine urgency from the remaining days and distance."""
    if is_overdue:
        return Status.OVERDUE
    if days_until_due is None and odometer_remaining is None:
        return Status.UNKNOWN

    status = Status.OK
    if days_until_due is not None:
        if days_until_due <= DUE_SOON_DAYS:
            status = Status.DUE_SOON
        elif days_until_due <= UPCOMING_DAYS:
            status = Status.UPCOMING
    if odometer_remaining is not None and notify_km_before is not None:
        if odometer_remaining <= notify_km_before:
            status = Status.DUE_SOON
    return status


def compute_due_status(
    reminder: Reminder, today: date, latest_odometer: Optional[int] = None
) -> DueStatus:
    """
    Calculate the due status of a reminder.

    Overdue when the due date is before today, or the latest odometer reading
    has reached the due odometer. Completed reminders are never overdue.
    """
    days_until_due = None
    if reminder.due_date is not None:
        days_until_due = (reminder.due_date - today).days

    odometer_remaining = None
    if reminder.due_odometer is not None and latest_odometer is not None:
        odometer_remaining = reminder.due_odometer - latest_odometer

    is_overdue = False
    if not reminder.is_completed:
        if reminder.due_date is not None and reminder.due_date < today:
            is_overdue = True
        if odometer_remaining is not None and odometer_remaining <= 0:
            is_overdue = True

    return DueStatus(
        is_overdue=is_overdue,
        days_until_due=days_until_due,
        odometer_remaining=odometer_remaining,
        status=check_status(
            days_until_due, odometer_remaining, is_overdue, reminder.notify_km_before
        ),
    )


def reminder_sort_key(reminder: Reminder) -> Tuple[int, date, date]:
    """Sort by due date ascending; reminders without a date go last."""
    if reminder.due_date is None:
        return (1, date.max, reminder.created_at)
    return (0, reminder.due_date, reminder.created_at)


def sort_reminders(reminders: Iterable[Reminder]) -> List[Reminder]:
    return sorted(reminders, key=reminder_sort_key)


# =============================================================================
# Fuel
# =============================================================================


def calc_consumption(current: FuelEntry, previous: FuelEntry) -> Optional[float]:
    """L/100km between two full-tank fill-ups, None if not computable."""
    if not (current.is_full_tank and previous.is_full_tank):
        return None
    distance = current.odometer - previous.odometer
    if distance <= 0:
        return None
    return current.liters / distance * 100


def average_consumption(entries: Iterable[FuelEntry]) -> Optional[float]:
    """Mean consumption over consecutive fill-ups ordered by odometer."""
    ordered = sorted(entries, key=lambda e: e.odometer)
    consumptions = []
    for previous, current in zip(ordered, ordered[1:]):
        value = calc_consumption(current, previous)
        if value is not None:
            consumptions.append(value)
    if not consumptions:
        return None
    return sum(consumptions) / len(consumptions)


def cost_this_month(entries: Iterable[FuelEntry], today: date) -> float:
    """Total fuel cost from the first of today's month onwards."""
    start_of_month = today.replace(day=1)
    return sum(e.total_cost for e in entries if e.date >= start_of_month)


def last_entry(entries: Iterable[FuelEntry]) -> Optional[FuelEntry]:
    """Most recent fill-up by date, then odometer."""
    entries = list(entries)
    if not entries:
        return None
    return max(entries, key=lambda e: (e.date, e.odometer))
