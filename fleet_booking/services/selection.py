"""Multi-day selection with toggle semantics."""

from typing import Iterable

from fleet_booking.models.date_key import DateKey


class SelectionSet:
    """
    Immutable, ascending set of chosen days.

    Only days that are neither past nor booked can get in: `toggle` silently ignores
    anything else, so an invalid selection can never be constructed.
    """

    __slots__ = ("_dates",)

    def __init__(self, dates: Iterable[DateKey] = ()):
        self._dates = tuple(sorted(set(dates)))

    @classmethod
    def empty(cls) -> "SelectionSet":
        return cls()

    def toggle(self, day: DateKey, availability, today: DateKey) -> "SelectionSet":
        if day < today or availability.is_booked(day):
            return self
        if day in self._dates:
            return SelectionSet(d for d in self._dates if d != day)
        return SelectionSet(self._dates + (day,))

    def without(self, days: Iterable[DateKey]) -> "SelectionSet":
        drop = set(days)
        return SelectionSet(d for d in self._dates if d not in drop)

    @property
    def dates(self) -> tuple[DateKey, ...]:
        return self._dates

    def __contains__(self, day) -> bool:
        return day in self._dates

    def __iter__(self):
        return iter(self._dates)

    def __len__(self) -> int:
        return len(self._dates)

    def __bool__(self) -> bool:
        return bool(self._dates)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SelectionSet):
            return NotImplemented
        return self._dates == other._dates

    def __hash__(self) -> int:
        return hash(self._dates)

    def __repr__(self) -> str:
        return f"SelectionSet([{', '.join(d.isoformat() for d in self._dates)}])"
