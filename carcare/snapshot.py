"""
Widget snapshot channel.

The primary application publishes a compact, versioned projection of its
cars, reminders and fuel data into a shared directory. The widget host, a
separate process with no way to call back, reads it on its own schedule.
The snapshot is a cache: it may be stale or missing, and readers fall back
to a fixed placeholder instead of failing.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import yaml
from jsonschema import ValidationError, validate

from .calculations import (
    average_consumption,
    compute_due_status,
    cost_this_month,
    last_entry,
    sort_reminders,
)
from .car import Car
from .errors import SnapshotUnavailable, SnapshotWriteFailed
from .fuel_entry import FuelEntry
from .reminder import Reminder

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
WIDGET_DATA_KEY = "widgetData"
DEFAULT_REMINDER_LIMIT = 5
REFRESH_INTERVAL = timedelta(hours=1)

SCHEMA_PATH = Path(__file__).parent / "snapshot_schema.yaml"


def load_snapshot_schema() -> dict:
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


# =============================================================================
# Snapshot model
# =============================================================================


@dataclass(frozen=True)
class SnapshotCar:
    id: str
    name: str


@dataclass(frozen=True)
class SnapshotReminder:
    id: str
    title: str
    due_date: Optional[date]
    is_overdue: bool
    car_name: Optional[str] = None

    def days_until_due(self, today: date) -> Optional[int]:
        """Days left as seen by the reader, which may render long after publishing."""
        if self.due_date is None:
            return None
        return (self.due_date - today).days


@dataclass(frozen=True)
class FuelAggregate:
    average_consumption: Optional[float] = None
    total_cost_this_period: float = 0.0
    last_unit_price: Optional[float] = None

    @classmethod
    def from_entries(cls, entries: Iterable[FuelEntry], today: date) -> "FuelAggregate":
        """Aggregate fuel entries: L/100km, cost this month, last price per liter."""
        entries = list(entries)
        last = last_entry(entries)
        return cls(
            average_consumption=average_consumption(entries),
            total_cost_this_period=cost_this_month(entries, today),
            last_unit_price=last.price_per_liter if last else None,
        )


@dataclass(frozen=True)
class WidgetSnapshot:
    cars: Tuple[SnapshotCar, ...]
    upcoming_reminders: Tuple[SnapshotReminder, ...]
    fuel: FuelAggregate
    generated_at: Optional[datetime] = None
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
            "cars": [{"id": c.id, "name": c.name} for c in self.cars],
            "upcomingReminders": [
                {
                    "id": r.id,
                    "title": r.title,
                    "dueDate": r.due_date.isoformat() if r.due_date else None,
                    "isOverdue": r.is_overdue,
                    "carName": r.car_name,
                }
                for r in self.upcoming_reminders
            ],
            "fuel": {
                "averageConsumption": self.fuel.average_consumption,
                "totalCostThisPeriod": self.fuel.total_cost_this_period,
                "lastUnitPrice": self.fuel.last_unit_price,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WidgetSnapshot":
        generated_at = data.get("generatedAt")
        fuel = data["fuel"]
        return cls(
            cars=tuple(SnapshotCar(c["id"], c["name"]) for c in data["cars"]),
            upcoming_reminders=tuple(
                SnapshotReminder(
                    id=r["id"],
                    title=r["title"],
                    due_date=date.fromisoformat(r["dueDate"]) if r.get("dueDate") else None,
                    is_overdue=r["isOverdue"],
                    car_name=r.get("carName"),
                )
                for r in data["upcomingReminders"]
            ),
            fuel=FuelAggregate(
                average_consumption=fuel.get("averageConsumption"),
                total_cost_this_period=fuel["totalCostThisPeriod"],
                last_unit_price=fuel.get("lastUnitPrice"),
            ),
            generated_at=datetime.fromisoformat(generated_at) if generated_at else None,
            version=data["version"],
        )

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), indent=2).encode("utf-8")


def placeholder_snapshot(today: Optional[date] = None) -> WidgetSnapshot:
    """Fixed sample data shown when no snapshot can be read."""
    today = today or date.today()
    return WidgetSnapshot(
        cars=(SnapshotCar("placeholder", "VW Golf"),),
        upcoming_reminders=(
            SnapshotReminder(
                "placeholder-inspection", "Technical Inspection",
                today + timedelta(days=15), False, "VW Golf",
            ),
            SnapshotReminder(
                "placeholder-oil", "Oil Change",
                today + timedelta(days=30), False, "VW Golf",
            ),
        ),
        fuel=FuelAggregate(
            average_consumption=7.5,
            total_cost_this_period=156.50,
            last_unit_price=1.589,
        ),
    )


def build_snapshot(
    cars: Iterable[Car],
    reminders: Iterable[Reminder],
    fuel: FuelAggregate,
    today: date,
    limit: int = DEFAULT_REMINDER_LIMIT,
    generated_at: Optional[datetime] = None,
) -> WidgetSnapshot:
    """Project cars and active reminders into a snapshot, soonest due first."""
    cars = list(cars)
    names = {c.id: c.display_name for c in cars}
    odometers = {c.id: c.current_odometer for c in cars}

    active = sort_reminders(r for r in reminders if not r.is_completed)[:limit]
    upcoming = []
    for reminder in active:
        due = compute_due_status(reminder, today, odometers.get(reminder.car_id))
        upcoming.append(
            SnapshotReminder(
                id=reminder.id,
                title=reminder.title,
                due_date=reminder.due_date,
                is_overdue=due.is_overdue,
                car_name=names.get(reminder.car_id),
            )
        )
    return WidgetSnapshot(
        cars=tuple(SnapshotCar(c.id, c.display_name) for c in cars),
        upcoming_reminders=tuple(upcoming),
        fuel=fuel,
        generated_at=generated_at or datetime.now(),
    )


# =============================================================================
# Shared store
# =============================================================================


class SnapshotStore:
    """Contract for the shared key/value store: last write wins."""

    def write(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def read(self, key: str) -> Optional[bytes]:
        raise NotImplementedError


class FileSnapshotStore(SnapshotStore):
    """One file per key in an app-group directory, replaced atomically."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def write(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)

    def read(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()


# =============================================================================
# Publisher / Reader
# =============================================================================


class SnapshotPublisher:
    """Writes the widget snapshot after every change that could alter it."""

    def __init__(self, store: SnapshotStore, limit: int = DEFAULT_REMINDER_LIMIT):
        self.store = store
        self.limit = limit

    def publish(
        self,
        cars: Iterable[Car],
        active_reminders: Iterable[Reminder],
        fuel: FuelAggregate,
        today: date,
    ) -> WidgetSnapshot:
        """
        Build and write a snapshot, replacing the previous one.

        Raises:
            SnapshotWriteFailed: if the shared store cannot be written.
        """
        snapshot = build_snapshot(cars, active_reminders, fuel, today, self.limit)
        try:
            self.store.write(WIDGET_DATA_KEY, snapshot.to_bytes())
        except OSError as e:
            raise SnapshotWriteFailed(f"Cannot write widget snapshot: {e}") from e
        logger.debug(
            "Published snapshot with %d reminder(s)", len(snapshot.upcoming_reminders)
        )
        return snapshot


@dataclass(frozen=True)
class TimelineEntry:
    """What the widget shows now, and when the host should ask again."""

    snapshot: WidgetSnapshot
    is_placeholder: bool
    rendered_at: datetime
    refresh_at: datetime


class SnapshotReader:
    """Reads the last published snapshot. Never publishes, never raises."""

    def __init__(self, store: SnapshotStore):
        self.store = store
        self._schema = load_snapshot_schema()

    def _decode(self, raw: Optional[bytes]) -> WidgetSnapshot:
        if raw is None:
            raise SnapshotUnavailable("No snapshot published yet")
        try:
            data = json.loads(raw.decode("utf-8"))
            validate(instance=data, schema=self._schema)
            if data["version"] != SNAPSHOT_VERSION:
                raise SnapshotUnavailable(f"Unsupported snapshot version {data['version']}")
            return WidgetSnapshot.from_dict(data)
        except (ValueError, ValidationError, KeyError, TypeError, RecursionError) as e:
            raise SnapshotUnavailable(f"Corrupt snapshot: {e}") from e

    def load(self) -> Optional[WidgetSnapshot]:
        """Return the last published snapshot, or None if there is no usable one."""
        try:
            return self._decode(self.store.read(WIDGET_DATA_KEY))
        except OSError as e:
            logger.warning("Snapshot unavailable: %s", e)
        except SnapshotUnavailable as e:
            logger.warning("Snapshot unavailable: %s", e)
        return None

    def load_or_placeholder(self, today: Optional[date] = None) -> Tuple[WidgetSnapshot, bool]:
        """Return (snapshot, is_placeholder); never an empty result."""
        snapshot = self.load()
        if snapshot is None:
            return placeholder_snapshot(today), True
        return snapshot, False

    def timeline(self, now: Optional[datetime] = None) -> TimelineEntry:
        """Entry for the host's timeline, refreshed hourly."""
        now = now or datetime.now()
        snapshot, is_placeholder = self.load_or_placeholder(now.date())
        return TimelineEntry(
            snapshot=snapshot,
            is_placeholder=is_placeholder,
            rendered_at=now,
            refresh_at=now + REFRESH_INTERVAL,
        )
