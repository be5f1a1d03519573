"""Notification scheduler: keeps registered alerts in line with reminders."""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from .alerts import AlertService, ScheduledAlert
from .errors import AlertAuthorizationDenied
from .reminder import Reminder

logger = logging.getLogger(__name__)

ODOMETER_SUFFIX = "/odometer"

AUTHORIZATION_NOTICE = (
    "Notifications are turned off, so reminders will not alert you. "
    "Due dates are still tracked."
)


def odometer_alert_id(reminder_id: str) -> str:
    return reminder_id + ODOMETER_SUFFIX


def calc_fire_at(due_date: date, notify_days_before: int, today: date) -> date:
    """Alert day: due date minus lead time, never earlier than today."""
    return max(due_date - timedelta(days=notify_days_before or 0), today)


class NotificationScheduler:
    """
    Maps reminders onto alerts in an AlertService.

    Holds at most one date alert per active, dated reminder (keyed by the
    reminder id) and none for completed or date-less reminders. Registration
    always cancels by id first, so reconciling twice is harmless.
    """

    def __init__(self, alerts: AlertService, car_names: Optional[Dict[str, str]] = None):
        self.alerts = alerts
        self.car_names = car_names or {}
        self._authorized: Optional[bool] = None
        self._notice_pending = False

    # -- Authorization --------------------------------------------------------

    @property
    def authorized(self) -> bool:
        """Ask the alert service once; remember the answer."""
        if self._authorized is None:
            self._authorized = bool(self.alerts.request_authorization())
            if not self._authorized:
                logger.warning("Alert authorization denied; alerts will not be scheduled")
                self._notice_pending = True
        return self._authorized

    def ensure_authorized(self) -> None:
        """Raise AlertAuthorizationDenied if alerts cannot be scheduled."""
        if not self.authorized:
            raise AlertAuthorizationDenied(AUTHORIZATION_NOTICE)

    def take_notice(self) -> Optional[str]:
        """Return the authorization notice once, then None."""
        if self._notice_pending:
            self._notice_pending = False
            return AUTHORIZATION_NOTICE
        return None

    # -- Reconciliation -------------------------------------------------------

    def _body(self, reminder: Reminder) -> str:
        due = f"Due: {reminder.due_date.isoformat()}" if reminder.due_date else "Due now"
        car_name = self.car_names.get(reminder.car_id or "")
        return f"{car_name} - {due}" if car_name else due

    def reconcile(self, reminder: Reminder, today: date) -> Optional[ScheduledAlert]:
        """
        Bring the date alert for one reminder in line with its state.

        Returns the alert now scheduled, or None if there is none.
        """
        if reminder.is_completed:
            self.alerts.cancel(reminder.id)
            self.alerts.cancel(odometer_alert_id(reminder.id))
            logger.debug("Cancelled alerts for completed reminder %s", reminder.id)
            return None
        # Any earlier alert is out of date, whether or not a new one follows
        self.alerts.cancel(reminder.id)
        if reminder.due_date is None:
            return None

        try:
            self.ensure_authorized()
        except AlertAuthorizationDenied:
            return None

        alert = ScheduledAlert(
            alert_id=reminder.id,
            fire_at=calc_fire_at(reminder.due_date, reminder.notify_days_before, today),
            reminder_id=reminder.id,
            title=reminder.title,
            body=self._body(reminder),
        )
        self.alerts.register(alert)
        logger.debug("Scheduled alert for %s at %s", reminder.id, alert.fire_at)
        return alert

    def reconcile_all(self, reminders: Iterable[Reminder], today: date) -> int:
        """
        Reconcile every reminder and drop alerts for reminders no longer active.

        Returns the number of date alerts scheduled.
        """
        active_ids = set()
        scheduled = 0
        for reminder in reminders:
            if reminder.is_completed:
                self.reconcile(reminder, today)
                continue
            active_ids.add(reminder.id)
            if self.reconcile(reminder, today) is not None:
                scheduled += 1

        for alert in self.alerts.pending():
            if alert.reminder_id not in active_ids:
                self.alerts.cancel(alert.alert_id)
                logger.debug("Removed stale alert %s", alert.alert_id)
        return scheduled

    def cancel(self, reminder_id: str) -> None:
        """Remove every alert held for a reminder."""
        self.alerts.cancel(reminder_id)
        self.alerts.cancel(odometer_alert_id(reminder_id))

    def fire_odometer_alert(self, reminder: Reminder, reading: int, today: date) -> Optional[ScheduledAlert]:
        """Register a one-time alert for today when a km threshold is crossed."""
        try:
            self.ensure_authorized()
        except AlertAuthorizationDenied:
            return None
        car_name = self.car_names.get(reminder.car_id or "")
        if reminder.due_odometer is None:
            return None
        remaining = reminder.due_odometer - reading
        if remaining <= 0:
            body = f"Due at {reminder.due_odometer:,} km, now at {reading:,} km"
        else:
            body = f"Due in {remaining:,} km"
        alert = ScheduledAlert(
            alert_id=odometer_alert_id(reminder.id),
            fire_at=today,
            reminder_id=reminder.id,
            title=reminder.title,
            body=f"{car_name} - {body}" if car_name else body,
        )
        self.alerts.cancel(alert.alert_id)
        self.alerts.register(alert)
        return alert
