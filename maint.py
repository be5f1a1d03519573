#!/usr/bin/env python3
"""
Unified CLI for vehicle maintenance reminders.

Commands:
  cars      - List cars
  add-car   - Add a car
  status    - Show active reminders with what is due, overdue, or upcoming
  add       - Add a reminder
  complete  - Complete a reminder (recurring ones get a successor)
  delete    - Delete a reminder
  fuel      - Record a fill-up (also an odometer reading)
  odometer  - Record an odometer reading
  alerts    - List scheduled alerts, or deliver the ones due today
  widget    - Show what the home-screen widget would render
  sync      - Reconcile alerts and republish the widget snapshot
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from carcare import (
    Car,
    ChangeResult,
    FuelEntry,
    Reminder,
    ReminderService,
    ReminderType,
    SnapshotReader,
    Status,
    CarcareError,
    FileSnapshotStore,
    compute_due_status,
    load_settings,
)
from carcare.alerts import FileAlertService

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"{cost:,.2f}" if cost is not None else "-"


def format_days(days: Optional[int]) -> str:
    """Format remaining days for display (e.g., '3mo 15d' or '-5d')."""
    if days is None:
        return "-"
    sign = "-" if days < 0 else ""
    days = abs(days)
    months = days // 30
    remaining_days = days % 30
    if months > 0:
        return f"{sign}{months}mo {remaining_days}d"
    return f"{sign}{days}d"


def format_due(reminder: Reminder) -> str:
    """Date and/or odometer trigger, e.g. '2025-06-01 / 15,000 km'."""
    parts = []
    if reminder.due_date:
        parts.append(reminder.due_date.isoformat())
    if reminder.due_odometer is not None:
        parts.append(f"{reminder.due_odometer:,} km")
    return " / ".join(parts) if parts else "-"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def short_id(identifier: str) -> str:
    return identifier[:8]


def report(result: ChangeResult) -> None:
    """Print follow-up problems a mutation ran into."""
    if result.notice:
        print(f"Note: {result.notice}")
    if result.snapshot_error:
        print(f"Warning: widget not updated ({result.snapshot_error})")


def parse_date(text: Optional[str]) -> Optional[date]:
    return date.fromisoformat(text) if text else None


# =============================================================================
# Status command
# =============================================================================


def make_status_table(
    reminders: List[Reminder], cars: dict, today: date
) -> List[List[str]]:
    """Convert reminders to table rows."""
    rows = []
    for reminder in reminders:
        car = cars.get(reminder.car_id)
        due = compute_due_status(reminder, today, car.current_odometer if car else None)
        rows.append(
            [
                short_id(reminder.id),
                reminder.title,
                car.display_name if car else "-",
                format_due(reminder),
                format_days(due.days_until_due),
                format_km(due.odometer_remaining),
                "yes" if reminder.is_recurring else "",
            ]
        )
    return rows


def cmd_status(service: ReminderService, args) -> int:
    """Show active reminders grouped by urgency."""
    today = parse_date(args.date) or date.today()
    cars = {c.id: c for c in service.store.cars()}
    car = find_car(service, args.car)
    reminders = service.store.active_reminders(car.id if car else None)

    print(f"Cars: {len(cars)}")
    print(f"Active reminders: {len(reminders)} (as of {today.isoformat()})")
    print()

    headers = ["Id", "Reminder", "Car", "Due", "Remaining (time)", "Remaining (km)", "Recurring"]
    groups = [
        (Status.OVERDUE, "OVERDUE:"),
        (Status.DUE_SOON, "DUE SOON:"),
        (Status.UPCOMING, "UPCOMING:"),
        (Status.OK, "OK:"),
    ]

    def status_of(r: Reminder) -> Status:
        car = cars.get(r.car_id)
        return compute_due_status(r, today, car.current_odometer if car else None).status

    for status, label in groups:
        matching = [r for r in reminders if status_of(r) == status]
        if matching:
            print(label)
            print(tabulate(make_status_table(matching, cars, today), headers=headers, tablefmt="simple"))
            print()

    unknown = [r for r in reminders if status_of(r) == Status.UNKNOWN]
    if unknown:
        print("NO TRIGGER (no due date or odometer):")
        for r in unknown:
            print(f"  {short_id(r.id)}  {r.title}")
        print()

    return 0


# =============================================================================
# Car commands
# =============================================================================


def cmd_cars(service: ReminderService, args) -> int:
    """List cars."""
    cars = service.store.cars()
    if not cars:
        print("No cars yet. Add one with 'add-car'.")
        return 0
    rows = [
        [short_id(c.id), c.full_name, c.year or "-", format_km(c.current_odometer)]
        for c in cars
    ]
    print(tabulate(rows, headers=["Id", "Car", "Year", "Odometer (km)"], tablefmt="simple"))
    return 0


def cmd_add_car(service: ReminderService, args) -> int:
    """Add a car."""
    car = Car(args.make, args.model, args.year, args.variant, args.odometer or 0)
    result = service.add_car(car)
    print(f"Added {car.full_name} ({short_id(car.id)})")
    report(result)
    return 0


def find_car(service: ReminderService, prefix: Optional[str]) -> Optional[Car]:
    """Resolve a car id prefix; None if no prefix given."""
    if prefix is None:
        return None
    matches = [c for c in service.store.cars() if c.id.startswith(prefix.lower())]
    if len(matches) != 1:
        raise CarcareError(f"Unknown or ambiguous car '{prefix}'")
    return matches[0]


# =============================================================================
# Reminder commands
# =============================================================================


def cmd_add(service: ReminderService, args, settings) -> int:
    """Add a reminder."""
    reminder_type = ReminderType.parse(args.type)
    car = find_car(service, args.car)

    every_months = args.every_months
    every_km = args.every_km
    if args.recurring and every_months is None and every_km is None:
        every_months = reminder_type.default_recurring_months
        every_km = reminder_type.default_recurring_km

    notify_days = args.notify_days
    if notify_days is None:
        notify_days = settings.default_notify_days_before

    reminder = Reminder(
        type=reminder_type,
        title=args.title,
        notes=args.notes,
        due_date=parse_date(args.due_date),
        due_odometer=args.due_odometer,
        notify_days_before=notify_days,
        notify_km_before=args.notify_km,
        is_recurring=args.recurring,
        recurring_interval_months=every_months,
        recurring_interval_km=every_km,
        car_id=car.id if car else None,
    )

    print("Adding reminder:")
    print(f"  Title:   {reminder.title}")
    print(f"  Due:     {format_due(reminder)}")
    if car:
        print(f"  Car:     {car.display_name}")
    if reminder.is_recurring:
        every = []
        if every_months:
            every.append(f"{every_months} mo")
        if every_km:
            every.append(f"{every_km:,} km")
        print(f"  Repeats: every {' / '.join(every)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    result = service.add_reminder(reminder)
    print(f"Reminder saved ({short_id(reminder.id)}).")
    report(result)
    return 0


def cmd_complete(service: ReminderService, args) -> int:
    """Complete a reminder."""
    reminder = service.store.find_reminder(args.reminder_id)
    result = service.complete_reminder(reminder.id, parse_date(args.date))
    print(f"Completed: {reminder.title}")
    if result.successor is not None:
        print(f"Next: {format_due(result.successor)} ({short_id(result.successor.id)})")
    report(result)
    return 0


def cmd_delete(service: ReminderService, args) -> int:
    """Delete a reminder."""
    reminder = service.store.find_reminder(args.reminder_id)
    result = service.delete_reminder(reminder.id)
    print(f"Deleted: {reminder.title}")
    report(result)
    return 0


# =============================================================================
# Fuel command
# =============================================================================


def cmd_fuel(service: ReminderService, args) -> int:
    """Record a fill-up."""
    car = find_car(service, args.car)
    entry = FuelEntry(
        car_id=car.id,
        date=parse_date(args.date) or date.today(),
        odometer=args.odometer,
        liters=args.liters,
        price_per_liter=args.price,
        total_cost=args.total,
        is_full_tank=not args.partial,
        station_name=args.station,
    )
    result = service.record_fuel_entry(entry, entry.date)
    print(f"Fill-up saved: {entry.liters:.2f} L for {format_cost(entry.total_cost)}")
    report_odometer_check(result)
    report(result)
    return 0


def cmd_odometer(service: ReminderService, args) -> int:
    """Record an odometer reading without a fill-up."""
    car = find_car(service, args.car)
    result = service.record_odometer(car.id, args.reading, parse_date(args.date))
    current = service.store.get_car(car.id).current_odometer
    if args.reading < current:
        print(f"Reading ignored: {car.display_name} is already at {format_km(current)} km")
    else:
        print(f"{car.display_name}: {format_km(current)} km")
    report_odometer_check(result)
    report(result)
    return 0


def report_odometer_check(result: ChangeResult) -> None:
    """Print the distance reminders a reading has made due."""
    check = result.odometer_check
    if check is None:
        return
    for reminder in check.newly_overdue:
        print(f"OVERDUE: {reminder.title} (due at {format_km(reminder.due_odometer)} km)")
    for reminder in check.newly_due_soon:
        print(f"DUE SOON: {reminder.title} (due at {format_km(reminder.due_odometer)} km)")


# =============================================================================
# Alerts / widget / sync commands
# =============================================================================


def cmd_alerts(service: ReminderService, args) -> int:
    """List scheduled alerts or deliver due ones."""
    alerts = service.scheduler.alerts
    if args.deliver:
        if not isinstance(alerts, FileAlertService):
            print("Error: this alert service cannot deliver alerts")
            return 1
        delivered = alerts.deliver_due(parse_date(args.date) or date.today())
        for alert in delivered:
            print(f"[{alert.fire_at.isoformat()}] {alert.title}: {alert.body or ''}")
        if not delivered:
            print("No alerts due.")
        return 0

    pending = alerts.pending()
    if not pending:
        print("No scheduled alerts.")
        return 0
    rows = [
        [alert.fire_at.isoformat(), alert.title, truncate(alert.body, 40), short_id(alert.reminder_id)]
        for alert in pending
    ]
    print(tabulate(rows, headers=["Fires", "Title", "Body", "Reminder"], tablefmt="simple"))
    return 0


def cmd_widget(settings, args) -> int:
    """Render the widget from the shared snapshot only."""
    reader = SnapshotReader(FileSnapshotStore(settings.shared_dir))
    today = date.today()
    snapshot, is_placeholder = reader.load_or_placeholder(today)

    if is_placeholder:
        print("(no snapshot published - showing sample data)")
    if snapshot.generated_at:
        print(f"Updated: {snapshot.generated_at:%Y-%m-%d %H:%M}")
    print()

    rows = []
    for r in snapshot.upcoming_reminders:
        days = r.days_until_due(today)
        when = "Overdue" if r.is_overdue else (f"in {days} days" if days is not None else "-")
        rows.append([r.title, r.car_name or "-", when])
    if rows:
        print(tabulate(rows, headers=["Next Service", "Car", "When"], tablefmt="simple"))
    else:
        print("No upcoming reminders")
    print()

    fuel = snapshot.fuel
    if fuel.average_consumption is not None:
        print(f"Avg consumption: {fuel.average_consumption:.1f} L/100km")
    print(f"This month:      {format_cost(fuel.total_cost_this_period)}")
    if fuel.last_unit_price is not None:
        print(f"Last price:      {fuel.last_unit_price:.3f}/L")
    return 0


def cmd_sync(service: ReminderService, args) -> int:
    """Reconcile alerts and republish the widget snapshot."""
    result = service.sync(parse_date(args.date))
    print(f"Alerts scheduled: {result.alerts_scheduled}")
    report(result)
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle maintenance reminders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s add-car VW Golf --year 2019 --odometer 45230
  %(prog)s add inspection --car 3f2a --due-date 2025-06-01 --recurring
  %(prog)s add oil_change --car 3f2a --due-odometer 60000 --notify-km 1000 --recurring
  %(prog)s status
  %(prog)s complete 9c1e
  %(prog)s fuel --car 3f2a --odometer 59200 --liters 42.5 --price 1.649
  %(prog)s odometer 59800 --car 3f2a
  %(prog)s alerts --deliver
  %(prog)s widget
""",
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML config file")
    parser.add_argument("--data-dir", type=Path, help="Directory holding garage data")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("cars", help="List cars")

    add_car_parser = subparsers.add_parser("add-car", help="Add a car")
    add_car_parser.add_argument("make", type=str)
    add_car_parser.add_argument("model", type=str)
    add_car_parser.add_argument("--year", type=int)
    add_car_parser.add_argument("--variant", type=str)
    add_car_parser.add_argument("--odometer", type=int, help="Current odometer (km)")

    status_parser = subparsers.add_parser(
        "status", help="Show what is due, overdue, or upcoming"
    )
    status_parser.add_argument("--car", type=str, help="Only this car (id prefix)")
    status_parser.add_argument("--date", type=str, help="Evaluate as of date (YYYY-MM-DD)")

    add_parser = subparsers.add_parser("add", help="Add a reminder")
    add_parser.add_argument(
        "type",
        type=str,
        help="Reminder type (e.g., inspection, insurance, oil_change, custom)",
    )
    add_parser.add_argument("--title", type=str, help="Title (default: type name)")
    add_parser.add_argument("--notes", type=str)
    add_parser.add_argument("--car", type=str, help="Car id prefix")
    add_parser.add_argument("--due-date", type=str, help="Due date (YYYY-MM-DD)")
    add_parser.add_argument("--due-odometer", type=int, help="Due odometer (km)")
    add_parser.add_argument("--notify-days", type=int, help="Alert this many days before")
    add_parser.add_argument("--notify-km", type=int, help="Alert this many km before")
    add_parser.add_argument("--recurring", action="store_true", help="Repeat after completion")
    add_parser.add_argument("--every-months", type=int, help="Recurrence in months")
    add_parser.add_argument("--every-km", type=int, help="Recurrence in km")
    add_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    complete_parser = subparsers.add_parser("complete", help="Complete a reminder")
    complete_parser.add_argument("reminder_id", type=str, help="Reminder id prefix")
    complete_parser.add_argument("--date", type=str, help="Completion date (default: today)")

    delete_parser = subparsers.add_parser("delete", help="Delete a reminder")
    delete_parser.add_argument("reminder_id", type=str, help="Reminder id prefix")

    fuel_parser = subparsers.add_parser("fuel", help="Record a fill-up")
    fuel_parser.add_argument("--car", type=str, required=True, help="Car id prefix")
    fuel_parser.add_argument("--odometer", type=int, required=True)
    fuel_parser.add_argument("--liters", type=float, required=True)
    fuel_parser.add_argument("--price", type=float, required=True, help="Price per liter")
    fuel_parser.add_argument("--total", type=float, help="Total cost (default: liters x price)")
    fuel_parser.add_argument("--partial", action="store_true", help="Not a full tank")
    fuel_parser.add_argument("--station", type=str)
    fuel_parser.add_argument("--date", type=str, help="Fill-up date (default: today)")

    odometer_parser = subparsers.add_parser("odometer", help="Record an odometer reading")
    odometer_parser.add_argument("reading", type=int, help="Odometer (km)")
    odometer_parser.add_argument("--car", type=str, required=True, help="Car id prefix")
    odometer_parser.add_argument("--date", type=str, help="Reading date (default: today)")

    alerts_parser = subparsers.add_parser("alerts", help="List or deliver alerts")
    alerts_parser.add_argument("--deliver", action="store_true", help="Deliver alerts due today")
    alerts_parser.add_argument("--date", type=str, help="Deliver as of date (YYYY-MM-DD)")

    subparsers.add_parser("widget", help="Show the widget as the host renders it")

    sync_parser = subparsers.add_parser("sync", help="Reconcile alerts and publish widget data")
    sync_parser.add_argument("--date", type=str, help="Reconcile as of date (YYYY-MM-DD)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if args.data_dir:
        settings.data_dir = args.data_dir
    logging.basicConfig(level=settings.log_level)

    # The widget reads only the shared snapshot, like the real host process
    if args.command == "widget":
        return cmd_widget(settings, args)

    try:
        service = ReminderService.from_settings(settings)
        if args.command == "cars":
            return cmd_cars(service, args)
        elif args.command == "add-car":
            return cmd_add_car(service, args)
        elif args.command == "status":
            return cmd_status(service, args)
        elif args.command == "add":
            return cmd_add(service, args, settings)
        elif args.command == "complete":
            return cmd_complete(service, args)
        elif args.command == "delete":
            return cmd_delete(service, args)
        elif args.command == "fuel":
            return cmd_fuel(service, args)
        elif args.command == "odometer":
            return cmd_odometer(service, args)
        elif args.command == "alerts":
            return cmd_alerts(service, args)
        elif args.command == "sync":
            return cmd_sync(service, args)
    except (CarcareError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
