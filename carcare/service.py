"""
ReminderService - runs every mutation through store, alerts and snapshot.

Each operation commits to the store first, then reconciles alerts, then
republishes the widget snapshot. Alert and snapshot problems never undo the
committed change; they are logged and reported on the returned ChangeResult.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from .alerts import FileAlertService
from .car import Car
from .config import Settings
from .errors import SnapshotWriteFailed, StoreError
from .fuel_entry import FuelEntry
from .odometer import OdometerCheck, OdometerMonitor
from .recurrence import complete
from .reminder import Reminder
from .scheduler import NotificationScheduler
from .snapshot import FileSnapshotStore, FuelAggregate, SnapshotPublisher
from .store import GarageStore

logger = logging.getLogger(__name__)


@dataclass
class ChangeResult:
    """Outcome of a mutation and its follow-up work."""

    reminder: Optional[Reminder] = None
    successor: Optional[Reminder] = None
    odometer_check: Optional[OdometerCheck] = None
    alerts_scheduled: int = 0
    snapshot_error: Optional[SnapshotWriteFailed] = None
    notice: Optional[str] = None


class ReminderService:
    """Application-level operations on reminders, cars and fuel entries."""

    def __init__(
        self,
        store: GarageStore,
        scheduler: NotificationScheduler,
        publisher: SnapshotPublisher,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.scheduler = scheduler
        self.publisher = publisher
        self.monitor = OdometerMonitor(scheduler)
        self._today = today

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReminderService":
        """Wire file-backed store, alert registry and snapshot store."""
        store = GarageStore(settings.garage_file)
        alerts = FileAlertService(
            settings.alerts_file, authorized=settings.notifications_enabled
        )
        publisher = SnapshotPublisher(
            FileSnapshotStore(settings.shared_dir), settings.widget_reminder_limit
        )
        return cls(store, NotificationScheduler(alerts), publisher)

    # -- Helpers --------------------------------------------------------------

    def _refresh_car_names(self) -> None:
        self.scheduler.car_names = {c.id: c.display_name for c in self.store.cars()}

    def fuel_aggregate(self, today: date, car_id: Optional[str] = None) -> FuelAggregate:
        return FuelAggregate.from_entries(self.store.fuel_entries(car_id), today)

    def _finish(self, result: ChangeResult, today: date) -> ChangeResult:
        """Republish the snapshot and attach any pending notice."""
        try:
            self.publisher.publish(
                self.store.cars(),
                self.store.active_reminders(),
                self.fuel_aggregate(today),
                today,
            )
        except SnapshotWriteFailed as e:
            logger.warning("%s", e)
            result.snapshot_error = e
        result.notice = self.scheduler.take_notice()
        return result

    # -- Operations -----------------------------------------------------------

    def sync(self, today: Optional[date] = None) -> ChangeResult:
        """Reconcile all alerts and republish; run at start-up."""
        today = today or self._today()
        self._refresh_car_names()
        scheduled = self.scheduler.reconcile_all(self.store.reminders(), today)
        return self._finish(ChangeResult(alerts_scheduled=scheduled), today)

    def add_car(self, car: Car, today: Optional[date] = None) -> ChangeResult:
        today = today or self._today()
        self.store.add_car(car)
        self._refresh_car_names()
        return self._finish(ChangeResult(), today)

    def add_reminder(self, reminder: Reminder, today: Optional[date] = None) -> ChangeResult:
        today = today or self._today()
        self.store.add_reminder(reminder)
        self._refresh_car_names()
        alert = self.scheduler.reconcile(reminder, today)
        return self._finish(
            ChangeResult(reminder=reminder, alerts_scheduled=int(alert is not None)), today
        )

    def edit_reminder(self, reminder: Reminder, today: Optional[date] = None) -> ChangeResult:
        today = today or self._today()
        self.store.update_reminder(reminder)
        self._refresh_car_names()
        alert = self.scheduler.reconcile(reminder, today)
        return self._finish(
            ChangeResult(reminder=reminder, alerts_scheduled=int(alert is not None)), today
        )

    def complete_reminder(self, reminder_id: str, today: Optional[date] = None) -> ChangeResult:
        """
        Complete a reminder and store its successor in one transaction.

        Raises:
            StoreError: if the reminder does not exist.
            AlreadyCompleted: if it was completed before.
        """
        today = today or self._today()
        reminder = self.store.get_reminder(reminder_id)
        if reminder is None:
            raise StoreError(f"Unknown reminder {reminder_id}")

        updated, successor = complete(reminder, today)
        self.store.update_reminder(updated, successor)
        logger.info("Completed reminder %s", updated.id)

        self._refresh_car_names()
        self.scheduler.reconcile(updated, today)
        scheduled = 0
        if successor is not None:
            logger.info("Created next occurrence %s", successor.id)
            if self.scheduler.reconcile(successor, today) is not None:
                scheduled = 1
        return self._finish(
            ChangeResult(reminder=updated, successor=successor, alerts_scheduled=scheduled),
            today,
        )

    def delete_reminder(self, reminder_id: str, today: Optional[date] = None) -> ChangeResult:
        today = today or self._today()
        self.store.delete_reminder(reminder_id)
        self.scheduler.cancel(reminder_id)
        return self._finish(ChangeResult(), today)

    def record_fuel_entry(self, entry: FuelEntry, today: Optional[date] = None) -> ChangeResult:
        """Store a fill-up and re-check the car's distance reminders."""
        today = today or self._today()
        car = self.store.get_car(entry.car_id)
        if car is None:
            raise StoreError(f"Unknown car {entry.car_id}")
        previous_reading = car.current_odometer

        self.store.add_fuel_entry(entry)
        return self._check_reading(entry.car_id, previous_reading, entry.odometer, today)

    def record_odometer(self, car_id: str, reading: int, today: Optional[date] = None) -> ChangeResult:
        """Store a plain odometer reading, e.g. from a workshop invoice."""
        today = today or self._today()
        car = self.store.get_car(car_id)
        if car is None:
            raise StoreError(f"Unknown car {car_id}")
        previous_reading = car.current_odometer

        self.store.record_odometer(car_id, reading)
        return self._check_reading(car_id, previous_reading, reading, today)

    def _check_reading(
        self, car_id: str, previous_reading: int, reading: int, today: date
    ) -> ChangeResult:
        self._refresh_car_names()
        check = self.monitor.record_reading(
            car_id,
            previous_reading,
            reading,
            self.store.active_reminders(car_id),
            today,
        )
        return self._finish(ChangeResult(odometer_check=check), today)
