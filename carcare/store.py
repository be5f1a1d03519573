"""YAML-backed garage store for cars, reminders and fuel entries."""

import copy
import logging
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml
from jsonschema import ValidationError, validate

from .calculations import sort_reminders
from .car import Car
from .errors import StoreError
from .fuel_entry import FuelEntry
from .reminder import Reminder
from .reminder_type import ReminderType

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


def load_schema() -> dict:
    """Load the garage JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


class Garage:
    """In-memory state of a garage file."""

    def __init__(
        self,
        cars: Optional[List[Car]] = None,
        reminders: Optional[List[Reminder]] = None,
        fuel_entries: Optional[List[FuelEntry]] = None,
    ):
        self.cars = cars or []
        self.reminders = reminders or []
        self.fuel_entries = fuel_entries or []

    def get_car(self, car_id: str) -> Optional[Car]:
        for car in self.cars:
            if car.id == car_id:
                return car
        return None

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        for reminder in self.reminders:
            if reminder.id == reminder_id:
                return reminder
        return None


# =============================================================================
# Serialization
# =============================================================================


def _parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Accept ISO strings and the date objects YAML makes of unquoted dates."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values for cleaner YAML."""
    return {k: v for k, v in d.items() if v is not None}


def _car_to_dict(car: Car) -> Dict[str, Any]:
    return _compact({
        "id": car.id,
        "make": car.make,
        "model": car.model,
        "year": car.year,
        "variant": car.variant,
        "currentOdometer": car.current_odometer,
    })


def _car_from_dict(dct: Dict[str, Any]) -> Car:
    return Car(
        dct["make"],
        dct["model"],
        dct.get("year"),
        dct.get("variant"),
        dct.get("currentOdometer", 0),
        id=dct["id"],
    )


def _reminder_to_dict(reminder: Reminder) -> Dict[str, Any]:
    return _compact({
        "id": reminder.id,
        "type": reminder.type.name.lower(),
        "title": reminder.title,
        "notes": reminder.notes,
        "dueDate": _iso(reminder.due_date),
        "dueOdometer": reminder.due_odometer,
        "notifyDaysBefore": reminder.notify_days_before,
        "notifyKmBefore": reminder.notify_km_before,
        "isRecurring": reminder.is_recurring,
        "recurringIntervalMonths": reminder.recurring_interval_months,
        "recurringIntervalKm": reminder.recurring_interval_km,
        "isCompleted": reminder.is_completed,
        "completedDate": _iso(reminder.completed_date),
        "carId": reminder.car_id,
        "createdAt": _iso(reminder.created_at),
    })


def _reminder_from_dict(dct: Dict[str, Any]) -> Reminder:
    return Reminder(
        type=ReminderType.parse(dct["type"]),
        title=dct.get("title"),
        notes=dct.get("notes"),
        due_date=_parse_date(dct.get("dueDate")),
        due_odometer=dct.get("dueOdometer"),
        notify_days_before=dct.get("notifyDaysBefore", 7),
        notify_km_before=dct.get("notifyKmBefore"),
        is_recurring=dct.get("isRecurring", False),
        recurring_interval_months=dct.get("recurringIntervalMonths"),
        recurring_interval_km=dct.get("recurringIntervalKm"),
        car_id=dct.get("carId"),
        is_completed=dct.get("isCompleted", False),
        completed_date=_parse_date(dct.get("completedDate")),
        created_at=_parse_date(dct.get("createdAt")),
        id=dct["id"],
    )


def _fuel_entry_to_dict(entry: FuelEntry) -> Dict[str, Any]:
    return _compact({
        "id": entry.id,
        "carId": entry.car_id,
        "date": _iso(entry.date),
        "odometer": entry.odometer,
        "liters": entry.liters,
        "pricePerLiter": entry.price_per_liter,
        "totalCost": entry.total_cost,
        "isFullTank": entry.is_full_tank,
        "stationName": entry.station_name,
        "notes": entry.notes,
    })


def _fuel_entry_from_dict(dct: Dict[str, Any]) -> FuelEntry:
    return FuelEntry(
        dct["carId"],
        _parse_date(dct["date"]),
        dct["odometer"],
        dct["liters"],
        dct["pricePerLiter"],
        dct.get("totalCost"),
        dct.get("isFullTank", True),
        dct.get("stationName"),
        dct.get("notes"),
        id=dct["id"],
    )


def garage_to_dict(garage: Garage) -> Dict[str, Any]:
    return {
        "cars": [_car_to_dict(c) for c in garage.cars],
        "reminders": [_reminder_to_dict(r) for r in garage.reminders],
        "fuelEntries": [_fuel_entry_to_dict(e) for e in garage.fuel_entries],
    }


def garage_from_dict(data: Optional[Dict[str, Any]]) -> Garage:
    data = data or {}
    return Garage(
        [_car_from_dict(c) for c in data.get("cars") or []],
        [_reminder_from_dict(r) for r in data.get("reminders") or []],
        [_fuel_entry_from_dict(e) for e in data.get("fuelEntries") or []],
    )


def _check_constraints(garage: Garage) -> None:
    """Reject duplicate ids and references to unknown cars."""
    car_ids = [c.id for c in garage.cars]
    if len(set(car_ids)) != len(car_ids):
        raise StoreError("Duplicate car id")
    reminder_ids = [r.id for r in garage.reminders]
    if len(set(reminder_ids)) != len(reminder_ids):
        raise StoreError("Duplicate reminder id")
    known = set(car_ids)
    for reminder in garage.reminders:
        if reminder.car_id is not None and reminder.car_id not in known:
            raise StoreError(f"Reminder {reminder.id} refers to unknown car {reminder.car_id}")
    for entry in garage.fuel_entries:
        if entry.car_id not in known:
            raise StoreError(f"Fuel entry {entry.id} refers to unknown car {entry.car_id}")


# =============================================================================
# Store
# =============================================================================


class GarageStore:
    """
    Transactional store over a single YAML file.

    Every mutation runs inside transaction(): changes are made on a working
    copy, checked against the schema and constraints, and written atomically.
    If anything fails the file and the in-memory state are left as they were.

    Objects go in and come out as copies; editing a fetched reminder changes
    nothing until it is passed back to update_reminder().
    """

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)
        self._schema = load_schema()
        self._garage = self._load()

    def _load(self) -> Garage:
        if not self.path.exists():
            return Garage()
        with open(self.path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader)
        try:
            return garage_from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e

    def _write(self, garage: Garage) -> None:
        data = garage_to_dict(garage)
        try:
            validate(instance=data, schema=self._schema)
        except ValidationError as e:
            raise StoreError(f"Schema validation error: {e.message}") from e

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )
        tmp_path.replace(self.path)

    @contextmanager
    def transaction(self) -> Iterator[Garage]:
        """Yield a working copy of the garage; commit it if the block succeeds."""
        working = copy.deepcopy(self._garage)
        yield working
        _check_constraints(working)
        self._write(working)
        self._garage = working
        logger.debug("Committed %s", self.path)

    # -- Cars -----------------------------------------------------------------

    def cars(self) -> List[Car]:
        return copy.deepcopy(self._garage.cars)

    def get_car(self, car_id: str) -> Optional[Car]:
        return copy.deepcopy(self._garage.get_car(car_id))

    def add_car(self, car: Car) -> Car:
        with self.transaction() as garage:
            garage.cars.append(copy.deepcopy(car))
        return car

    def update_car(self, car: Car) -> Car:
        with self.transaction() as garage:
            for i, existing in enumerate(garage.cars):
                if existing.id == car.id:
                    garage.cars[i] = copy.deepcopy(car)
                    break
            else:
                raise StoreError(f"Unknown car {car.id}")
        return car

    # -- Reminders ------------------------------------------------------------

    def reminders(self) -> List[Reminder]:
        """All reminders, completed ones included, in due order."""
        return sort_reminders(copy.deepcopy(self._garage.reminders))

    def active_reminders(self, car_id: Optional[str] = None) -> List[Reminder]:
        """Reminders not yet completed, due date ascending, date-less last."""
        return sort_reminders(
            copy.deepcopy(r)
            for r in self._garage.reminders
            if not r.is_completed and (car_id is None or r.car_id == car_id)
        )

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        return copy.deepcopy(self._garage.get_reminder(reminder_id))

    def find_reminder(self, prefix: str) -> Reminder:
        """Find a reminder by a unique id prefix."""
        matches = [r for r in self._garage.reminders if r.id.startswith(prefix.lower())]
        if not matches:
            raise StoreError(f"Unknown reminder '{prefix}'")
        if len(matches) > 1:
            raise StoreError(f"Reminder id '{prefix}' is ambiguous ({len(matches)} matches)")
        return copy.deepcopy(matches[0])

    def add_reminder(self, reminder: Reminder) -> Reminder:
        with self.transaction() as garage:
            garage.reminders.append(copy.deepcopy(reminder))
        return reminder

    def update_reminder(self, reminder: Reminder, successor: Optional[Reminder] = None) -> Reminder:
        """Replace a reminder, optionally inserting its successor in the same write."""
        with self.transaction() as garage:
            for i, existing in enumerate(garage.reminders):
                if existing.id == reminder.id:
                    garage.reminders[i] = copy.deepcopy(reminder)
                    break
            else:
                raise StoreError(f"Unknown reminder {reminder.id}")
            if successor is not None:
                garage.reminders.append(copy.deepcopy(successor))
        return reminder

    def delete_reminder(self, reminder_id: str) -> None:
        with self.transaction() as garage:
            before = len(garage.reminders)
            garage.reminders = [r for r in garage.reminders if r.id != reminder_id]
            if len(garage.reminders) == before:
                raise StoreError(f"Unknown reminder {reminder_id}")

    # -- Fuel -----------------------------------------------------------------

    def fuel_entries(self, car_id: Optional[str] = None) -> List[FuelEntry]:
        return [
            copy.deepcopy(e)
            for e in self._garage.fuel_entries
            if car_id is None or e.car_id == car_id
        ]

    def add_fuel_entry(self, entry: FuelEntry) -> FuelEntry:
        """Add a fill-up and advance the car's odometer if the reading is higher."""
        with self.transaction() as garage:
            car = garage.get_car(entry.car_id)
            if car is None:
                raise StoreError(f"Unknown car {entry.car_id}")
            garage.fuel_entries.append(copy.deepcopy(entry))
            if entry.odometer > car.current_odometer:
                car.current_odometer = entry.odometer
        return entry

    def record_odometer(self, car_id: str, reading: int) -> Car:
        """Advance a car's odometer; lower readings leave it unchanged."""
        if reading < 0:
            raise StoreError("Odometer reading cannot be negative")
        with self.transaction() as garage:
            car = garage.get_car(car_id)
            if car is None:
                raise StoreError(f"Unknown car {car_id}")
            if reading > car.current_odometer:
                car.current_odometer = reading
        return copy.deepcopy(car)
