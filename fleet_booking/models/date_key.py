from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ..utils.filters import to_local_date


@dataclass(frozen=True, order=True)
class DateKey:
    """
    Calendar-day identity with no time-of-day or timezone.
    Equality and ordering are on (year, month, day); month runs 1-12.
    """
    year: int
    month: int
    day: int

    def __post_init__(self):
        # raises ValueError for impossible days such as 2025-02-30
        date(self.year, self.month, self.day)

    @classmethod
    def of(cls, d: date) -> "DateKey":
        return cls(d.year, d.month, d.day)

    @classmethod
    def from_value(cls, value, tz_name: str | None = None) -> "DateKey":
        """Normalize a date, datetime, ISO string or DateKey to a DateKey."""
        if isinstance(value, DateKey):
            return value
        return cls.of(to_local_date(value, tz_name))

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return self.to_date().isoformat()

    def __str__(self) -> str:
        return self.isoformat()

    def weekday(self) -> int:
        """Monday=0 ... Sunday=6."""
        return self.to_date().weekday()

    def add_days(self, n: int) -> "DateKey":
        return DateKey.of(self.to_date() + timedelta(days=n))

    def first_of_month(self) -> "DateKey":
        return DateKey(self.year, self.month, 1)

    def add_months(self, n: int) -> "DateKey":
        """First day of the month `n` months away (the day-of-month is dropped)."""
        idx = self.year * 12 + (self.month - 1) + n
        return DateKey(idx // 12, idx % 12 + 1, 1)

    def same_month(self, other: "DateKey") -> bool:
        return self.year == other.year and self.month == other.month
