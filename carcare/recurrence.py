"""Reminder completion and recurrence."""

from datetime import date
from typing import Optional, Tuple

from .calculations import calc_next_due_date, calc_next_due_odometer
from .errors import AlreadyCompleted
from .reminder import Reminder


def next_occurrence(reminder: Reminder, today: date) -> Optional[Reminder]:
    """
    Build the successor of a recurring reminder, or None if it does not recur.

    Each trigger axis advances only when both the due value and its interval
    are present, so the successor may carry neither trigger.
    """
    if not reminder.is_recurring:
        return None
    return Reminder(
        type=reminder.type,
        title=reminder.title,
        notes=reminder.notes,
        due_date=calc_next_due_date(
            reminder.due_date, reminder.recurring_interval_months
        ),
        due_odometer=calc_next_due_odometer(
            reminder.due_odometer, reminder.recurring_interval_km
        ),
        notify_days_before=reminder.notify_days_before,
        notify_km_before=reminder.notify_km_before,
        is_recurring=True,
        recurring_interval_months=reminder.recurring_interval_months,
        recurring_interval_km=reminder.recurring_interval_km,
        car_id=reminder.car_id,
        created_at=today,
    )


def complete(reminder: Reminder, today: date) -> Tuple[Reminder, Optional[Reminder]]:
    """
    Complete a reminder.

    Returns the completed copy of the reminder and, for recurring reminders,
    its successor. The input is not modified; persisting both is up to the
    caller.

    Raises:
        AlreadyCompleted: if the reminder was completed before.
    """
    if reminder.is_completed:
        raise AlreadyCompleted(reminder.id)

    updated = reminder.copy()
    updated.is_completed = True
    updated.completed_date = today
    return updated, next_occurrence(reminder, today)
