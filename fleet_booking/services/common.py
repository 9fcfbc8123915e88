"""Shared service helpers and factories."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from fleet_booking.models.date_key import DateKey
from fleet_booking.models.store import Store
from fleet_booking.models.vehicle import ScheduleEntry, Vehicle
from fleet_booking.utils.filters import today_in

CENTS = Decimal("0.01")


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def _today(tz_name: Optional[str] = None) -> date:
    """Wrapper for easier testing/mocking."""
    return today_in(tz_name)


def today_key(tz_name: Optional[str] = None) -> DateKey:
    return DateKey.of(_today(tz_name))


# -------- money helpers --------
def money(x) -> Decimal:
    """Quantize to cents."""
    return Decimal(x).quantize(CENTS)


def to_decimal_safe(value) -> Optional[Decimal]:
    """Safely convert to Decimal; return None if invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


# -------- dict -> rich model mappers --------
def schedule_entry_from_dates(values, reservation_id: Optional[str] = None,
                              tz_name: Optional[str] = None) -> ScheduleEntry:
    """Normalize a list of date-like values into one ScheduleEntry."""
    return ScheduleEntry(
        dates=frozenset(DateKey.from_value(v, tz_name) for v in (values or [])),
        reservation_id=reservation_id,
    )


def vehicle_from_dict(d: dict, reservations: Optional[list] = None,
                      tz_name: Optional[str] = None) -> Vehicle:
    """
    Map a stored vehicle dict (plus its active reservations) to a fully-typed Vehicle.
    Defaults are filled here once: missing/invalid rate -> 0, missing schedule -> empty.
    Raises ValueError on a negative rate or an unparseable date.
    """
    rate = to_decimal_safe(d.get("rate"))
    if rate is None:
        rate = Decimal("0")
    if rate < 0:
        raise ValueError(f"Negative rate for vehicle {d.get('vehicle_id')!r}")

    entries = []
    # Legacy entries stored on the vehicle itself: [{"date": [...]}, ...]
    for item in d.get("schedule") or []:
        values = item.get("date") if isinstance(item, dict) else item
        entries.append(schedule_entry_from_dates(values, tz_name=tz_name))
    for r in reservations or []:
        entries.append(schedule_entry_from_dates(r.get("dates"), r.get("reservation_id"), tz_name))

    return Vehicle(
        vehicle_id=str(d.get("vehicle_id") or d.get("id")),
        model=d.get("model") or "",
        daily_rate=rate,
        schedule_entries=tuple(entries),
    )
