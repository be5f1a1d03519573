"""FuelEntry class for refuel records."""
import uuid
from datetime import date
from typing import Optional


class FuelEntry:
    """A refuel, which is also an odometer reading for its car."""

    def __init__(
            self,
            car_id: str,
            date: date,
            odometer: int,
            liters: float,
            price_per_liter: float,
            total_cost: Optional[float] = None,
            is_full_tank: bool = True,
            station_name: Optional[str] = None,
            notes: Optional[str] = None,
            id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.car_id = car_id
        self.date = date
        self.odometer = odometer
        self.liters = liters
        self.price_per_liter = price_per_liter
        self.total_cost = total_cost if total_cost is not None else liters * price_per_liter
        self.is_full_tank = is_full_tank
        self.station_name = station_name
        self.notes = notes
