#!/usr/bin/env python3
"""Tests for calculation helper functions."""
import pytest
from datetime import date

from carcare import (
    Reminder,
    ReminderType,
    FuelEntry,
    Status,
    calc_next_due_date,
    calc_next_due_odometer,
    compute_due_status,
    sort_reminders,
    average_consumption,
)
from carcare.calculations import (
    calc_consumption,
    check_status,
    cost_this_month,
    last_entry,
)


class TestCalcNextDueDate:
    """Tests for calc_next_due_date helper function."""

    def test_adds_months(self):
        assert calc_next_due_date(date(2025, 6, 1), 12) == date(2026, 6, 1)

    def test_clamps_to_month_end(self):
        """Jan 31 + 1 month lands on the last day of February."""
        assert calc_next_due_date(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_missing_date(self):
        assert calc_next_due_date(None, 12) is None

    def test_missing_interval(self):
        assert calc_next_due_date(date(2025, 6, 1), None) is None


class TestCalcNextDueOdometer:
    """Tests for calc_next_due_odometer helper function."""

    def test_adds_interval_to_due_value(self):
        assert calc_next_due_odometer(10000, 5000) == 15000

    def test_missing_values(self):
        assert calc_next_due_odometer(None, 5000) is None
        assert calc_next_due_odometer(10000, None) is None


class TestComputeDueStatus:
    """Tests for compute_due_status."""

    def test_past_due_date_is_overdue(self):
        reminder = Reminder(ReminderType.INSURANCE, due_date=date(2025, 5, 1))
        due = compute_due_status(reminder, date(2025, 5, 20))
        assert due.is_overdue is True
        assert due.days_until_due == -19
        assert due.status == Status.OVERDUE

    def test_due_today_is_not_overdue(self):
        reminder = Reminder(ReminderType.INSURANCE, due_date=date(2025, 6, 1))
        due = compute_due_status(reminder, date(2025, 6, 1))
        assert due.is_overdue is False
        assert due.days_until_due == 0

    def test_day_after_due_is_overdue(self):
        reminder = Reminder(ReminderType.INSURANCE, due_date=date(2025, 6, 1))
        assert compute_due_status(reminder, date(2025, 6, 2)).is_overdue is True

    def test_odometer_reached_is_overdue(self):
        reminder = Reminder(ReminderType.OIL_CHANGE, due_odometer=10000)
        assert compute_due_status(reminder, date(2025, 1, 1), 10000).is_overdue is True
        assert compute_due_status(reminder, date(2025, 1, 1), 10500).is_overdue is True

    def test_odometer_below_due_is_not_overdue(self):
        reminder = Reminder(ReminderType.OIL_CHANGE, due_odometer=10000)
        due = compute_due_status(reminder, date(2025, 1, 1), 9000)
        assert due.is_overdue is False
        assert due.odometer_remaining == 1000
        assert due.days_until_due is None

    def test_unknown_odometer_ignores_distance_axis(self):
        reminder = Reminder(ReminderType.OIL_CHANGE, due_odometer=10000)
        due = compute_due_status(reminder, date(2025, 1, 1), None)
        assert due.is_overdue is False
        assert due.status == Status.UNKNOWN

    def test_either_axis_makes_overdue(self):
        """Date still ahead, odometer already passed."""
        reminder = Reminder(
            ReminderType.OIL_CHANGE, due_date=date(2026, 1, 1), due_odometer=10000
        )
        due = compute_due_status(reminder, date(2025, 1, 1), 12000)
        assert due.is_overdue is True
        assert due.days_until_due == 365

    def test_completed_is_never_overdue(self):
        reminder = Reminder(
            ReminderType.INSURANCE, due_date=date(2025, 1, 1), is_completed=True
        )
        assert compute_due_status(reminder, date(2025, 6, 1)).is_overdue is False

    def test_no_trigger(self):
        reminder = Reminder(ReminderType.CUSTOM, title="Wash car")
        due = compute_due_status(reminder, date(2025, 6, 1), 50000)
        assert due.is_overdue is False
        assert due.days_until_due is None
        assert due.status == Status.UNKNOWN

    def test_km_lead_time_makes_due_soon(self):
        reminder = Reminder(ReminderType.OIL_CHANGE, due_odometer=10000, notify_km_before=500)
        due = compute_due_status(reminder, date(2025, 1, 1), 9600)
        assert due.status == Status.DUE_SOON
        assert due.is_due is True


class TestCheckStatus:
    """Tests for check_status helper function."""

    def test_overdue_wins(self):
        assert check_status(10, None, True) == Status.OVERDUE

    def test_due_soon_within_week(self):
        assert check_status(7, None, False) == Status.DUE_SOON
        assert check_status(0, None, False) == Status.DUE_SOON

    def test_upcoming_within_month(self):
        assert check_status(8, None, False) == Status.UPCOMING
        assert check_status(30, None, False) == Status.UPCOMING

    def test_ok(self):
        assert check_status(31, None, False) == Status.OK
        assert check_status(None, 5000, False, notify_km_before=1000) == Status.OK

    def test_unknown(self):
        assert check_status(None, None, False) == Status.UNKNOWN


class TestSortReminders:
    """Tests for due-date ordering."""

    def test_dated_first_ascending_then_dateless(self):
        late = Reminder(ReminderType.INSURANCE, due_date=date(2025, 9, 1))
        undated = Reminder(ReminderType.OIL_CHANGE, due_odometer=60000)
        early = Reminder(ReminderType.INSPECTION, due_date=date(2025, 6, 1))

        ordered = sort_reminders([late, undated, early])

        assert ordered == [early, late, undated]


class TestFuelCalculations:
    """Tests for consumption and cost helpers."""

    @pytest.fixture
    def entries(self):
        return [
            FuelEntry("car", date(2025, 4, 28), 10000, 40.0, 1.60),
            FuelEntry("car", date(2025, 5, 10), 10500, 35.0, 1.70),
            FuelEntry("car", date(2025, 5, 20), 11000, 40.0, 1.65),
        ]

    def test_consumption_between_full_tanks(self, entries):
        assert calc_consumption(entries[1], entries[0]) == pytest.approx(7.0)

    def test_partial_tank_is_skipped(self, entries):
        entries[1].is_full_tank = False
        assert calc_consumption(entries[1], entries[0]) is None

    def test_no_distance(self):
        a = FuelEntry("car", date(2025, 5, 1), 10000, 40.0, 1.6)
        b = FuelEntry("car", date(2025, 5, 2), 10000, 10.0, 1.6)
        assert calc_consumption(b, a) is None

    def test_average_consumption(self, entries):
        assert average_consumption(entries) == pytest.approx(7.5)

    def test_average_needs_two_entries(self, entries):
        assert average_consumption(entries[:1]) is None
        assert average_consumption([]) is None

    def test_cost_this_month(self, entries):
        assert cost_this_month(entries, date(2025, 5, 25)) == pytest.approx(35 * 1.70 + 40 * 1.65)

    def test_total_cost_defaults_to_liters_times_price(self):
        entry = FuelEntry("car", date(2025, 5, 1), 10000, 40.0, 1.5)
        assert entry.total_cost == pytest.approx(60.0)

    def test_last_entry(self, entries):
        assert last_entry(entries) is entries[2]
        assert last_entry([]) is None
