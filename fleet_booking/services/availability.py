"""Booked-day lookup for one vehicle."""

from typing import Iterable

from fleet_booking.models.date_key import DateKey
from fleet_booking.models.vehicle import ScheduleEntry


class AvailabilityIndex:
    """
    Set of days a vehicle cannot be reserved for, flattened from its schedule entries.

    Every date it is given is indexed, past ones included; dropping stale bookings
    is the caller's business and happens before `build`.
    """

    def __init__(self, booked: Iterable[DateKey] = ()):
        self._booked: set[DateKey] = set(booked)

    @classmethod
    def build(cls, schedule_entries: Iterable[ScheduleEntry]) -> "AvailabilityIndex":
        return cls(d for entry in schedule_entries for d in entry.dates)

    def is_booked(self, day: DateKey) -> bool:
        return day in self._booked

    def merge(self, days: Iterable[DateKey]) -> None:
        """Mark more days as booked (after an accepted or conflicting submission)."""
        self._booked.update(days)

    def booked_dates(self) -> list[DateKey]:
        return sorted(self._booked)

    def __contains__(self, day) -> bool:
        return day in self._booked

    def __len__(self) -> int:
        return len(self._booked)
