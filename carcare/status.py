"""Status enum for reminder urgency levels."""

from enum import Enum


class Status(Enum):
    """Reminder urgency categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2  # Within a week, or within the km lead time
    UPCOMING = 3  # Within a month
    OK = 4
    UNKNOWN = 5  # No date or odometer trigger
