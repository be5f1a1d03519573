"""
Vehicle maintenance reminders.

This package tracks maintenance obligations and keeps alerts and the
home-screen widget in step with them:
- Reminder, ReminderType, Car, FuelEntry: data model
- DueStatus, Status: calculated due state and urgency
- complete: completion and recurrence
- GarageStore: transactional YAML store
- NotificationScheduler: date alerts; OdometerMonitor: distance thresholds
- SnapshotPublisher / SnapshotReader: widget snapshot channel
- ReminderService: runs mutations through all of the above
"""

from .status import Status
from .errors import (
    CarcareError,
    InvalidReminder,
    AlreadyCompleted,
    StoreError,
    AlertAuthorizationDenied,
    SnapshotUnavailable,
    SnapshotWriteFailed,
)
from .reminder_type import ReminderType
from .car import Car
from .fuel_entry import FuelEntry
from .reminder import Reminder
from .due_status import DueStatus
from .calculations import (
    calc_next_due_date,
    calc_next_due_odometer,
    compute_due_status,
    sort_reminders,
    average_consumption,
)
from .recurrence import complete, next_occurrence
from .store import GarageStore
from .alerts import ScheduledAlert, AlertService, MemoryAlertService, FileAlertService
from .scheduler import NotificationScheduler, calc_fire_at
from .odometer import OdometerMonitor, OdometerCheck
from .snapshot import (
    WidgetSnapshot,
    FuelAggregate,
    FileSnapshotStore,
    SnapshotPublisher,
    SnapshotReader,
    placeholder_snapshot,
)
from .config import Settings, load_settings
from .service import ReminderService, ChangeResult

__all__ = [
    "Status",
    "CarcareError",
    "InvalidReminder",
    "AlreadyCompleted",
    "StoreError",
    "AlertAuthorizationDenied",
    "SnapshotUnavailable",
    "SnapshotWriteFailed",
    "ReminderType",
    "Car",
    "FuelEntry",
    "Reminder",
    "DueStatus",
    "calc_next_due_date",
    "calc_next_due_odometer",
    "compute_due_status",
    "sort_reminders",
    "average_consumption",
    "complete",
    "next_occurrence",
    "GarageStore",
    "ScheduledAlert",
    "AlertService",
    "MemoryAlertService",
    "FileAlertService",
    "NotificationScheduler",
    "calc_fire_at",
    "OdometerMonitor",
    "OdometerCheck",
    "WidgetSnapshot",
    "FuelAggregate",
    "FileSnapshotStore",
    "SnapshotPublisher",
    "SnapshotReader",
    "placeholder_snapshot",
    "Settings",
    "load_settings",
    "ReminderService",
    "ChangeResult",
]
