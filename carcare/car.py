"""Car class for vehicle identification and odometer state."""

import uuid
from typing import Optional


class Car:
    """A vehicle that owns reminders and fuel entries."""

    def __init__(
        self,
        make: str,
        model: str,
        year: Optional[int] = None,
        variant: Optional[str] = None,
        current_odometer: int = 0,
        id: Optional[str] = None,
    ):
        self.id = id or uuid.uuid4().hex
        self.make = make
        self.model = model
        self.year = year
        self.variant = variant
        self.current_odometer = current_odometer or 0

    @property
    def display_name(self) -> str:
        """Short name used in lists, alerts and the widget."""
        return f"{self.make} {self.model}"

    @property
    def full_name(self) -> str:
        """Display name including the variant, if any."""
        return f"{self.display_name} {self.variant}" if self.variant else self.display_name
