#!/usr/bin/env python3
"""Tests for NotificationScheduler."""
import pytest
from datetime import date

from carcare import (
    AlertAuthorizationDenied,
    FileAlertService,
    MemoryAlertService,
    NotificationScheduler,
    Reminder,
    ReminderType,
    calc_fire_at,
    complete,
)
from carcare.alerts import ScheduledAlert
from carcare.scheduler import AUTHORIZATION_NOTICE, odometer_alert_id


@pytest.fixture
def alerts():
    return MemoryAlertService()


@pytest.fixture
def scheduler(alerts):
    return NotificationScheduler(alerts, car_names={"car-1": "VW Golf"})


@pytest.fixture
def reminder():
    return Reminder(
        ReminderType.INSPECTION,
        due_date=date(2025, 6, 1),
        notify_days_before=7,
        car_id="car-1",
    )


class TestCalcFireAt:
    """Tests for calc_fire_at."""

    def test_lead_time_ahead(self):
        assert calc_fire_at(date(2025, 6, 1), 7, date(2025, 5, 20)) == date(2025, 5, 25)

    def test_lead_time_passed_clamps_to_today(self):
        assert calc_fire_at(date(2025, 6, 1), 7, date(2025, 5, 28)) == date(2025, 5, 28)

    def test_zero_lead_time(self):
        assert calc_fire_at(date(2025, 6, 1), 0, date(2025, 5, 1)) == date(2025, 6, 1)


class TestReconcile:
    """Tests for reconcile()."""

    def test_schedules_alert_before_due(self, scheduler, alerts, reminder):
        alert = scheduler.reconcile(reminder, date(2025, 5, 20))

        assert alert.fire_at == date(2025, 5, 25)
        assert alerts.get(reminder.id) == alert
        assert alert.payload["reminder_id"] == reminder.id
        assert alert.payload["title"] == "Technical Inspection"
        assert alert.body == "VW Golf - Due: 2025-06-01"

    def test_clamps_to_today(self, scheduler, alerts, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 28))
        assert alerts.get(reminder.id).fire_at == date(2025, 5, 28)

    def test_idempotent(self, scheduler, alerts, reminder):
        """Reconciling twice leaves exactly one alert."""
        scheduler.reconcile(reminder, date(2025, 5, 20))
        scheduler.reconcile(reminder, date(2025, 5, 20))

        pending = alerts.pending()
        assert len(pending) == 1
        assert pending[0].alert_id == reminder.id

    def test_edit_replaces_alert(self, scheduler, alerts, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 20))
        reminder.due_date = date(2025, 7, 1)
        scheduler.reconcile(reminder, date(2025, 5, 20))

        pending = alerts.pending()
        assert len(pending) == 1
        assert pending[0].fire_at == date(2025, 6, 24)

    def test_completed_has_no_alert(self, scheduler, alerts, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 20))
        updated, _ = complete(reminder, date(2025, 5, 21))

        assert scheduler.reconcile(updated, date(2025, 5, 21)) is None
        assert alerts.pending() == []

    def test_completed_cancels_odometer_alert(self, scheduler, alerts, reminder):
        alerts.register(
            ScheduledAlert(odometer_alert_id(reminder.id), date(2025, 5, 1), reminder.id, "x")
        )
        updated, _ = complete(reminder, date(2025, 5, 21))
        scheduler.reconcile(updated, date(2025, 5, 21))
        assert alerts.pending() == []

    def test_dateless_has_no_alert(self, scheduler, alerts, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 20))
        reminder.due_date = None
        reminder.due_odometer = 60000

        assert scheduler.reconcile(reminder, date(2025, 5, 20)) is None
        assert alerts.get(reminder.id) is None


class TestAuthorization:
    """Tests for degraded behavior when alerts are not authorized."""

    def test_denied_schedules_nothing(self, reminder):
        alerts = MemoryAlertService(authorized=False)
        scheduler = NotificationScheduler(alerts)

        assert scheduler.reconcile(reminder, date(2025, 5, 20)) is None
        assert alerts.pending() == []

    def test_denied_drops_alert_registered_earlier(self, tmp_path, reminder):
        """Turning notifications off must not leave an alert with an old date."""
        path = tmp_path / "alerts.yaml"
        NotificationScheduler(FileAlertService(path)).reconcile(reminder, date(2025, 5, 20))
        assert len(FileAlertService(path).pending()) == 1

        denied = FileAlertService(path, authorized=False)
        reminder.due_date = date(2025, 9, 1)
        NotificationScheduler(denied).reconcile_all([reminder], date(2025, 5, 20))

        assert denied.pending() == []
        assert denied.deliver_due(date(2025, 12, 31)) == []

    def test_asks_once_and_notices_once(self, reminder):
        alerts = MemoryAlertService(authorized=False)
        scheduler = NotificationScheduler(alerts)
        other = Reminder(ReminderType.INSURANCE, due_date=date(2025, 8, 1))

        scheduler.reconcile_all([reminder, other], date(2025, 5, 20))

        assert alerts.authorization_requests == 1
        assert scheduler.take_notice() == AUTHORIZATION_NOTICE
        assert scheduler.take_notice() is None

    def test_ensure_authorized_raises(self):
        scheduler = NotificationScheduler(MemoryAlertService(authorized=False))
        with pytest.raises(AlertAuthorizationDenied):
            scheduler.ensure_authorized()

    def test_granted_has_no_notice(self, scheduler, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 20))
        assert scheduler.take_notice() is None


class TestReconcileAll:
    """Tests for reconcile_all()."""

    def test_schedules_every_dated_active_reminder(self, scheduler, alerts, reminder):
        insurance = Reminder(ReminderType.INSURANCE, due_date=date(2025, 9, 1))
        oil = Reminder(ReminderType.OIL_CHANGE, due_odometer=60000)

        scheduled = scheduler.reconcile_all([reminder, insurance, oil], date(2025, 5, 20))

        assert scheduled == 2
        assert {a.alert_id for a in alerts.pending()} == {reminder.id, insurance.id}

    def test_removes_stale_alerts(self, scheduler, alerts, reminder):
        alerts.register(ScheduledAlert("gone", date(2025, 5, 25), "gone", "Deleted reminder"))

        scheduler.reconcile_all([reminder], date(2025, 5, 20))

        assert [a.alert_id for a in alerts.pending()] == [reminder.id]

    def test_completed_in_list_is_cancelled(self, scheduler, alerts, reminder):
        scheduler.reconcile(reminder, date(2025, 5, 20))
        updated, _ = complete(reminder, date(2025, 5, 21))

        assert scheduler.reconcile_all([updated], date(2025, 5, 21)) == 0
        assert alerts.pending() == []

    def test_repeated_runs_are_stable(self, scheduler, alerts, reminder):
        scheduler.reconcile_all([reminder], date(2025, 5, 20))
        scheduler.reconcile_all([reminder], date(2025, 5, 20))
        assert len(alerts.pending()) == 1


class TestCancel:
    """Tests for cancel()."""

    def test_cancel_removes_both_alerts(self, scheduler, alerts, reminder):
        reminder.due_odometer = 900
        scheduler.reconcile(reminder, date(2025, 5, 20))
        scheduler.fire_odometer_alert(reminder, 1000, date(2025, 5, 20))
        assert len(alerts.pending()) == 2

        scheduler.cancel(reminder.id)

        assert alerts.pending() == []
