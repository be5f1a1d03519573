"""Exceptions raised by the reminder engine, scheduler, store and snapshot channel."""


class CarcareError(Exception):
    """Base class for all carcare errors."""


class InvalidReminder(CarcareError):
    """A reminder was built with fields that break its invariants."""


class AlreadyCompleted(CarcareError):
    """Completing a reminder that is already completed."""

    def __init__(self, reminder_id: str):
        super().__init__(f"Reminder {reminder_id} is already completed")
        self.reminder_id = reminder_id


class StoreError(CarcareError):
    """A store write was rejected. Prior state is left untouched."""


class AlertAuthorizationDenied(CarcareError):
    """The alert service refused permission to schedule alerts."""


class SnapshotUnavailable(CarcareError):
    """No usable widget snapshot could be read."""


class SnapshotWriteFailed(CarcareError):
    """Writing the widget snapshot to the shared store failed."""
