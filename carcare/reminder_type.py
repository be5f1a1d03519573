"""ReminderType enum: the closed set of reminder categories."""

from enum import Enum
from typing import Optional


class ReminderType(Enum):
    """Reminder category. The value is the default display title."""

    INSPECTION = "Technical Inspection"
    EMISSIONS = "Emissions Test"
    INSURANCE = "Insurance Renewal"
    ROAD_TAX = "Road Tax"
    OIL_CHANGE = "Oil Change"
    TIRE_CHANGE = "Tire Change"
    TIMING_BELT = "Timing Belt"
    BRAKE_FLUID = "Brake Fluid"
    COOLANT = "Coolant"
    AIR_FILTER = "Air Filter"
    CABIN_FILTER = "Cabin Filter"
    SPARK_PLUGS = "Spark Plugs"
    BATTERY = "Battery"
    WARRANTY = "Warranty Expiry"
    VIGNETTE = "Vignette Expiry"
    ENVIRONMENTAL_STICKER = "Environmental Sticker"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, text: str) -> "ReminderType":
        """Look up a type by name ("oil_change", "oil-change") or title."""
        normalized = text.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if normalized in (member.name.lower(), member.value.lower().replace(" ", "_")):
                return member
        raise ValueError(f"Unknown reminder type '{text}'")

    @property
    def default_title(self) -> str:
        return self.value

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @property
    def default_recurring_months(self) -> Optional[int]:
        """Typical recurrence in months, if this type usually recurs by date."""
        return _DEFAULT_MONTHS.get(self)

    @property
    def default_recurring_km(self) -> Optional[int]:
        """Typical recurrence in km, if this type usually recurs by distance."""
        return _DEFAULT_KM.get(self)


_ICONS = {
    ReminderType.INSPECTION: "checkmark.seal.fill",
    ReminderType.EMISSIONS: "smoke.fill",
    ReminderType.INSURANCE: "shield.fill",
    ReminderType.ROAD_TAX: "doc.text.fill",
    ReminderType.OIL_CHANGE: "drop.fill",
    ReminderType.TIRE_CHANGE: "circle.circle.fill",
    ReminderType.TIMING_BELT: "gearshape.2.fill",
    ReminderType.BRAKE_FLUID: "exclamationmark.octagon.fill",
    ReminderType.COOLANT: "thermometer.medium",
    ReminderType.AIR_FILTER: "wind",
    ReminderType.CABIN_FILTER: "air.conditioner.horizontal.fill",
    ReminderType.SPARK_PLUGS: "bolt.fill",
    ReminderType.BATTERY: "battery.100.bolt",
    ReminderType.WARRANTY: "calendar.badge.clock",
    ReminderType.VIGNETTE: "road.lanes",
    ReminderType.ENVIRONMENTAL_STICKER: "leaf.fill",
    ReminderType.CUSTOM: "bell.fill",
}

_COLORS = {
    ReminderType.INSPECTION: "purple",
    ReminderType.EMISSIONS: "gray",
    ReminderType.INSURANCE: "green",
    ReminderType.ROAD_TAX: "orange",
    ReminderType.OIL_CHANGE: "brown",
    ReminderType.TIRE_CHANGE: "blue",
    ReminderType.TIMING_BELT: "red",
    ReminderType.BRAKE_FLUID: "red",
    ReminderType.COOLANT: "cyan",
    ReminderType.AIR_FILTER: "mint",
    ReminderType.CABIN_FILTER: "teal",
    ReminderType.SPARK_PLUGS: "yellow",
    ReminderType.BATTERY: "green",
    ReminderType.WARRANTY: "indigo",
    ReminderType.VIGNETTE: "brown",
    ReminderType.ENVIRONMENTAL_STICKER: "green",
    ReminderType.CUSTOM: "blue",
}

_DEFAULT_MONTHS = {
    ReminderType.INSPECTION: 24,
    ReminderType.EMISSIONS: 12,
    ReminderType.INSURANCE: 12,
    ReminderType.ROAD_TAX: 12,
    ReminderType.OIL_CHANGE: 12,
    ReminderType.TIRE_CHANGE: 6,
    ReminderType.BRAKE_FLUID: 24,
    ReminderType.COOLANT: 48,
    ReminderType.VIGNETTE: 12,
}

_DEFAULT_KM = {
    ReminderType.OIL_CHANGE: 15000,
    ReminderType.TIMING_BELT: 100000,
    ReminderType.AIR_FILTER: 30000,
    ReminderType.CABIN_FILTER: 20000,
    ReminderType.SPARK_PLUGS: 60000,
}
