"""DueStatus dataclass for calculated reminder status."""

from dataclasses import dataclass
from typing import Optional

from .status import Status


@dataclass(frozen=True)
class DueStatus:
    """Due status of a reminder, derived from today and the latest odometer."""

    is_overdue: bool
    days_until_due: Optional[int] = None
    odometer_remaining: Optional[int] = None
    status: Status = Status.UNKNOWN

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.DUE_SOON)
