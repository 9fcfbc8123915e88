"""One customer's booking session for one vehicle: the surface the presentation layer drives."""

import logging
import uuid
from decimal import Decimal
from typing import Optional

from fleet_booking.exceptions import (
    BookingValidationError,
    InvalidRateError,
    MissingCustomerFieldError,
    SubmissionInFlightError,
)
from fleet_booking.models.date_key import DateKey
from fleet_booking.models.vehicle import Vehicle
from fleet_booking.services import calendar_grid, common
from fleet_booking.services.availability import AvailabilityIndex
from fleet_booking.services.coordinator import ReservationCoordinator, ResultKind, SubmissionResult
from fleet_booking.services.pricing import PricingCalculator
from fleet_booking.services.reservation_builder import ReservationRequestBuilder
from fleet_booking.services.schedule_provider import VehicleScheduleProvider
from fleet_booking.services.selection import SelectionSet
from fleet_booking.utils.constants import DEFAULT_WEEK_START

logger = logging.getLogger(__name__)


class BookingSession:
    """
    Owns the availability index, the selection and the displayed month for one vehicle.

    Views: grid(), selection, total, state, month_label.
    Commands: navigate_month(), toggle_date(), submit(), plus open()/cancel().
    `today` is accepted explicitly everywhere it matters so tests can pin it.
    """

    def __init__(self, vehicle: Vehicle, sink, today: Optional[DateKey] = None,
                 week_start: int = DEFAULT_WEEK_START):
        self.vehicle = vehicle
        self.week_start = week_start
        self.availability = AvailabilityIndex.build(vehicle.schedule_entries)
        self.coordinator = ReservationCoordinator(sink)
        self.selection = SelectionSet.empty()
        self.session_id = ""
        self.is_open = False
        self.anchor_month = (today or common.today_key()).first_of_month()
        self.open(today)

    @classmethod
    def start(cls, provider: VehicleScheduleProvider, vehicle_id: str, sink,
              today: Optional[DateKey] = None, week_start: int = DEFAULT_WEEK_START) -> "BookingSession":
        """Fetch the vehicle's schedule and open a session (provider errors propagate)."""
        return cls(provider.fetch(vehicle_id), sink, today=today, week_start=week_start)

    # ---------- lifecycle ----------
    def open(self, today: Optional[DateKey] = None) -> None:
        self.session_id = uuid.uuid4().hex
        self.selection = SelectionSet.empty()
        self.anchor_month = (today or common.today_key()).first_of_month()
        self.is_open = True

    def cancel(self) -> None:
        """Discard the selection; any response still in flight will be ignored."""
        self.selection = SelectionSet.empty()
        self.session_id = uuid.uuid4().hex
        self.is_open = False
        logger.info("Booking session for vehicle %s cancelled", self.vehicle.vehicle_id)

    # ---------- views ----------
    @property
    def daily_rate(self) -> Decimal:
        return self.vehicle.daily_rate

    @property
    def total(self) -> Decimal:
        return PricingCalculator.total(self.daily_rate, self.selection)

    @property
    def state(self) -> str:
        return self.coordinator.state

    @property
    def month_label(self) -> str:
        return calendar_grid.month_label(self.anchor_month)

    def grid(self, today: Optional[DateKey] = None) -> list:
        return calendar_grid.generate(
            self.anchor_month, self.availability, self.selection,
            today or common.today_key(), self.week_start,
        )

    # ---------- commands ----------
    def navigate_month(self, step: int) -> DateKey:
        self.anchor_month = calendar_grid.shift_month(self.anchor_month, step)
        return self.anchor_month

    def toggle_date(self, day, today: Optional[DateKey] = None) -> SelectionSet:
        self.selection = self.selection.toggle(
            DateKey.from_value(day), self.availability, today or common.today_key())
        return self.selection

    async def submit(self, customer, special_requests: Optional[str] = None,
                     today: Optional[DateKey] = None) -> SubmissionResult:
        """
        Build the request from the current selection and hand it to the coordinator.
        Days that slipped into the past since they were picked (relative to `today`)
        fail locally without a sink call.
        Validation failures and in-flight rejections come back as results, not exceptions.
        """
        if not self.is_open:
            return SubmissionResult(ResultKind.REJECTED, "Booking session is closed",
                                    selection=self.selection)
        today = today or common.today_key()
        past = tuple(d for d in self.selection if d < today)
        if past:
            return SubmissionResult(
                ResultKind.INVALID, "Selected dates cannot be in the past",
                selection=self.selection, total=self.total, lost_dates=past,
            )
        try:
            request = ReservationRequestBuilder.build(
                self.vehicle.vehicle_id, self.daily_rate, self.selection, customer, special_requests)
        except (BookingValidationError, InvalidRateError) as e:
            return SubmissionResult(
                ResultKind.INVALID, e.message, selection=self.selection,
                total=Decimal("0") if isinstance(e, InvalidRateError) else self.total,
                field_name=e.field if isinstance(e, MissingCustomerFieldError) else None,
            )

        try:
            return await self.coordinator.submit(request, self)
        except SubmissionInFlightError as e:
            return SubmissionResult(ResultKind.REJECTED, e.message,
                                    selection=self.selection, total=self.total)
