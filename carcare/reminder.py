"""Reminder class for maintenance obligations."""
import copy
import uuid
from datetime import date
from typing import Optional

from .errors import InvalidReminder
from .reminder_type import ReminderType


class Reminder:
    """
    A maintenance obligation with optional date and odometer triggers.

    Both triggers may be set; the reminder is due when either one is reached.
    A reminder with neither trigger is kept but never surfaces as due.

    notify_days_before is always an int: None means no lead time and is
    stored as 0. notify_km_before stays optional.
    """

    def __init__(
            self,
            type: ReminderType,
            title: Optional[str] = None,
            notes: Optional[str] = None,
            due_date: Optional[date] = None,
            due_odometer: Optional[int] = None,
            notify_days_before: int = 7,
            notify_km_before: Optional[int] = None,
            is_recurring: bool = False,
            recurring_interval_months: Optional[int] = None,
            recurring_interval_km: Optional[int] = None,
            car_id: Optional[str] = None,
            is_completed: bool = False,
            completed_date: Optional[date] = None,
            created_at: Optional[date] = None,
            id: Optional[str] = None,
    ):
        if is_recurring and recurring_interval_months is None and recurring_interval_km is None:
            raise InvalidReminder(
                "A recurring reminder needs recurring_interval_months or recurring_interval_km"
            )
        if notify_days_before is not None and notify_days_before < 0:
            raise InvalidReminder("notify_days_before cannot be negative")

        self.id = id or uuid.uuid4().hex
        self.type = type
        self.title = title or type.default_title
        self.notes = notes
        self.due_date = due_date
        self.due_odometer = due_odometer
        self.notify_days_before = notify_days_before or 0
        self.notify_km_before = notify_km_before
        self.is_recurring = is_recurring
        self.recurring_interval_months = recurring_interval_months
        self.recurring_interval_km = recurring_interval_km
        self.car_id = car_id
        self.is_completed = is_completed
        self.completed_date = completed_date
        self.created_at = created_at or date.today()

    @property
    def is_active(self) -> bool:
        return not self.is_completed

    @property
    def has_trigger(self) -> bool:
        """True if the reminder can ever become due."""
        return self.due_date is not None or self.due_odometer is not None

    def copy(self) -> "Reminder":
        """Shallow copy; every field is immutable so this is a full copy."""
        return copy.copy(self)
