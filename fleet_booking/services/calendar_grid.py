"""Month grid generation for the booking calendar."""

from dataclasses import dataclass

from fleet_booking.models.date_key import DateKey
from fleet_booking.utils.constants import DAY_NAMES, DEFAULT_WEEK_START, GRID_CELLS
from fleet_booking.utils.filters import fmt_month


@dataclass(frozen=True)
class CalendarCell:
    date: DateKey
    in_current_month: bool
    is_past: bool
    is_booked: bool
    is_selected: bool

    @property
    def selectable(self) -> bool:
        return not (self.is_past or self.is_booked)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "day": self.date.day,
            "inCurrentMonth": self.in_current_month,
            "isPast": self.is_past,
            "isBooked": self.is_booked,
            "isSelected": self.is_selected,
        }


def grid_start(anchor_month: DateKey, week_start: int = DEFAULT_WEEK_START) -> DateKey:
    """Most recent `week_start` weekday on or before the 1st of the anchor month."""
    first = anchor_month.first_of_month()
    back = (first.weekday() - week_start) % 7
    return first.add_days(-back)


def generate(anchor_month: DateKey, availability, selection, today: DateKey,
             week_start: int = DEFAULT_WEEK_START) -> list[CalendarCell]:
    """
    Build the 6-week (42 cell) grid around `anchor_month`.

    The result depends only on the arguments: `today` is fixed for the whole pass
    so every cell is judged against the same reference day.
    """
    start = grid_start(anchor_month, week_start)
    cells = []
    for i in range(GRID_CELLS):
        day = start.add_days(i)
        cells.append(CalendarCell(
            date=day,
            in_current_month=day.same_month(anchor_month),
            is_past=day < today,
            is_booked=availability.is_booked(day),
            is_selected=day in selection,
        ))
    return cells


def shift_month(anchor_month: DateKey, step: int) -> DateKey:
    return anchor_month.add_months(step)


def weekday_header(week_start: int = DEFAULT_WEEK_START) -> list[str]:
    return [DAY_NAMES[(week_start + i) % 7] for i in range(7)]


def month_label(anchor_month: DateKey) -> str:
    return fmt_month(anchor_month.year, anchor_month.month)
