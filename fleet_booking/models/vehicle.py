from dataclasses import dataclass, field
from decimal import Decimal

from .date_key import DateKey


@dataclass(frozen=True)
class ScheduleEntry:
    """
    Days occupied by one existing (pending or confirmed) reservation.
    A vehicle carries one entry per historical booking.
    """
    dates: frozenset[DateKey] = frozenset()
    reservation_id: str | None = None


@dataclass(frozen=True)
class Vehicle:
    """
    Fully-typed vehicle as handed to the booking engine by the schedule provider.
    Read-only; a fresh instance is produced on every fetch.
    """
    vehicle_id: str
    model: str
    daily_rate: Decimal  # listed price per day, >= 0
    schedule_entries: tuple[ScheduleEntry, ...] = field(default_factory=tuple)

    def booked_dates(self) -> list[DateKey]:
        """All occupied days across entries, ascending and de-duplicated."""
        return sorted({d for e in self.schedule_entries for d in e.dates})
