#!/usr/bin/env python3
"""Tests for OdometerMonitor."""
import pytest
from datetime import date

from carcare import (
    MemoryAlertService,
    NotificationScheduler,
    OdometerMonitor,
    Reminder,
    ReminderType,
)
from carcare.scheduler import odometer_alert_id

TODAY = date(2025, 5, 20)


@pytest.fixture
def alerts():
    return MemoryAlertService()


@pytest.fixture
def monitor(alerts):
    return OdometerMonitor(NotificationScheduler(alerts, car_names={"car-1": "VW Golf"}))


@pytest.fixture
def oil():
    return Reminder(
        ReminderType.OIL_CHANGE, due_odometer=60000, notify_km_before=1000, car_id="car-1"
    )


class TestRecordReading:
    """Tests for OdometerMonitor.record_reading."""

    def test_crossing_due_odometer_is_newly_overdue(self, monitor, alerts, oil):
        check = monitor.record_reading("car-1", 59500, 60200, [oil], TODAY)

        assert check.newly_overdue == [oil]
        assert check.newly_due_soon == []
        alert = alerts.get(odometer_alert_id(oil.id))
        assert alert.fire_at == TODAY
        assert alert.body == "VW Golf - Due at 60,000 km, now at 60,200 km"

    def test_crossing_lead_threshold_is_due_soon(self, monitor, alerts, oil):
        check = monitor.record_reading("car-1", 58500, 59200, [oil], TODAY)

        assert check.newly_due_soon == [oil]
        assert check.newly_overdue == []
        assert alerts.get(odometer_alert_id(oil.id)).body == "VW Golf - Due in 800 km"

    def test_already_overdue_is_not_reported_again(self, monitor, alerts, oil):
        check = monitor.record_reading("car-1", 60500, 61000, [oil], TODAY)

        assert check.changed is False
        assert alerts.pending() == []

    def test_no_crossing(self, monitor, alerts, oil):
        check = monitor.record_reading("car-1", 50000, 51000, [oil], TODAY)
        assert check.changed is False
        assert alerts.pending() == []

    def test_lower_reading_changes_nothing(self, monitor, oil):
        check = monitor.record_reading("car-1", 61000, 59000, [oil], TODAY)
        assert check.changed is False

    def test_ignores_other_cars_completed_and_dateless(self, monitor, alerts, oil):
        other_car = Reminder(ReminderType.OIL_CHANGE, due_odometer=60000, car_id="car-2")
        done = Reminder(
            ReminderType.OIL_CHANGE, due_odometer=60000, car_id="car-1", is_completed=True
        )
        date_only = Reminder(ReminderType.INSURANCE, due_date=date(2025, 9, 1), car_id="car-1")

        check = monitor.record_reading(
            "car-1", 59000, 61000, [oil, other_car, done, date_only], TODAY
        )

        assert check.newly_overdue == [oil]
        assert len(alerts.pending()) == 1

    def test_without_lead_time_only_overdue_counts(self, monitor):
        reminder = Reminder(ReminderType.TIMING_BELT, due_odometer=100000, car_id="car-1")
        check = monitor.record_reading("car-1", 99000, 99900, [reminder], TODAY)
        assert check.changed is False

    def test_one_alert_per_reminder(self, monitor, alerts, oil):
        monitor.record_reading("car-1", 58500, 59200, [oil], TODAY)
        monitor.record_reading("car-1", 59200, 60100, [oil], TODAY)
        assert len(alerts.pending()) == 1

    def test_denied_authorization_still_reports(self, oil):
        alerts = MemoryAlertService(authorized=False)
        monitor = OdometerMonitor(NotificationScheduler(alerts))

        check = monitor.record_reading("car-1", 59500, 60200, [oil], TODAY)

        assert check.newly_overdue == [oil]
        assert alerts.pending() == []

    def test_without_scheduler(self, oil):
        check = OdometerMonitor().record_reading("car-1", 59500, 60200, [oil], TODAY)
        assert check.newly_overdue == [oil]
