"""Odometer threshold monitor for distance-based reminders."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from .calculations import compute_due_status
from .reminder import Reminder
from .scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


@dataclass
class OdometerCheck:
    """Reminders whose state changed with a new odometer reading."""

    car_id: str
    previous_reading: int
    reading: int
    newly_overdue: List[Reminder] = field(default_factory=list)
    newly_due_soon: List[Reminder] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.newly_overdue or self.newly_due_soon)


def _lead_threshold(reminder: Reminder) -> int:
    """Reading at which the km lead time starts."""
    return reminder.due_odometer - (reminder.notify_km_before or 0)


class OdometerMonitor:
    """
    Re-evaluates distance reminders whenever a reading is recorded.

    A distance cannot be scheduled ahead like a date, so each crossing of a
    reminder's km lead threshold or of its due odometer fires one immediate
    alert through the scheduler. Readings that do not move the odometer
    forward change nothing.
    """

    def __init__(self, scheduler: Optional[NotificationScheduler] = None):
        self.scheduler = scheduler

    def record_reading(
        self,
        car_id: str,
        previous_reading: int,
        reading: int,
        reminders: Iterable[Reminder],
        today: date,
    ) -> OdometerCheck:
        check = OdometerCheck(car_id, previous_reading, reading)
        if reading <= previous_reading:
            return check

        for reminder in reminders:
            if reminder.is_completed or reminder.car_id != car_id:
                continue
            if reminder.due_odometer is None:
                continue

            before = compute_due_status(reminder, today, previous_reading)
            after = compute_due_status(reminder, today, reading)
            if before.is_overdue:
                continue
            if after.is_overdue:
                check.newly_overdue.append(reminder)
            elif previous_reading < _lead_threshold(reminder) <= reading:
                check.newly_due_soon.append(reminder)
            else:
                continue

            logger.info(
                "Reminder %s crossed a km threshold at %d km", reminder.id, reading
            )
            if self.scheduler is not None:
                self.scheduler.fire_odometer_alert(reminder, reading, today)
        return check
