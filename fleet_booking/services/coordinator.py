"""
Submission of reservation requests and resolution of their outcome.

Submission is optimistic: the client's AvailabilityIndex may be stale, so the
Reservation Sink arbitrates and the coordinator folds its answer back into the
booking state (selection, availability, total).
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Protocol

from fleet_booking.exceptions import SubmissionInFlightError
from fleet_booking.models.reservation import (
    Accepted,
    ConflictingDates,
    Invalid,
    ReservationOutcome,
    ReservationRequest,
    TransientFailure,
)
from fleet_booking.services.pricing import PricingCalculator
from fleet_booking.services.selection import SelectionSet
from fleet_booking.utils.filters import fmt_day

logger = logging.getLogger(__name__)


class ReservationSink(Protocol):
    async def reserve(self, request: ReservationRequest) -> ReservationOutcome: ...


class CoordinatorState:
    IDLE = "idle"
    SUBMITTING = "submitting"


class ResultKind:
    ACCEPTED = "accepted"
    CONFLICT = "conflict"
    INVALID = "invalid"
    FAILED = "failed"
    REJECTED = "rejected"  # a submission was already in flight
    STALE = "stale"  # response arrived after the session was cancelled


@dataclass(frozen=True)
class SubmissionResult:
    kind: str
    message: str
    outcome: Optional[object] = None
    selection: SelectionSet = field(default_factory=SelectionSet.empty)
    total: Decimal = Decimal("0")
    lost_dates: tuple = ()
    retryable: bool = False
    field_name: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind == ResultKind.ACCEPTED


class ReservationCoordinator:
    """
    Single-flight submitter: Idle -> Submitting -> Idle.

    `booking` passed to submit() is the owning session; it must expose
    `availability`, a settable `selection`, `daily_rate` and `session_id`.
    """

    def __init__(self, sink: ReservationSink):
        self.sink = sink
        self.state = CoordinatorState.IDLE

    @property
    def in_flight(self) -> bool:
        return self.state == CoordinatorState.SUBMITTING

    async def submit(self, request: ReservationRequest, booking) -> SubmissionResult:
        """
        Send `request` to the sink once and apply the outcome to `booking`.
        Raises SubmissionInFlightError, without contacting the sink, if a
        previous submission has not finished.
        """
        # check-and-set happens before the first await, so no second submit can interleave
        if self.in_flight:
            logger.warning("Submission for vehicle %s rejected: another one is in flight",
                           request.vehicle_id)
            raise SubmissionInFlightError()
        self.state = CoordinatorState.SUBMITTING
        token = booking.session_id
        logger.info("Submitting reservation for vehicle %s (%d day(s))",
                    request.vehicle_id, len(request.selected_dates))

        try:
            outcome = await self.sink.reserve(request)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning("Reservation sink unreachable for vehicle %s: %s", request.vehicle_id, e)
            outcome = TransientFailure(str(e) or type(e).__name__)
        finally:
            self.state = CoordinatorState.IDLE

        if booking.session_id != token:
            logger.warning("Ignoring %s outcome for vehicle %s: booking session was closed",
                           getattr(outcome, "kind", "unknown"), request.vehicle_id)
            return SubmissionResult(ResultKind.STALE, "Booking was cancelled", outcome=outcome)

        result = self._apply(outcome, request, booking)
        logger.info("Submission for vehicle %s finished: %s", request.vehicle_id, result.kind)
        return result

    @staticmethod
    def _apply(outcome, request: ReservationRequest, booking) -> SubmissionResult:
        if isinstance(outcome, Accepted):
            booking.availability.merge(request.selected_dates)
            booking.selection = SelectionSet.empty()
            n = len(request.selected_dates)
            return SubmissionResult(
                ResultKind.ACCEPTED,
                f"Reservation received for {n} day{'s' if n != 1 else ''}",
                outcome=outcome,
                selection=booking.selection,
                total=Decimal("0"),
            )

        if isinstance(outcome, ConflictingDates):
            lost = tuple(sorted(outcome.dates))
            booking.availability.merge(lost)
            booking.selection = booking.selection.without(lost)
            total = PricingCalculator.total(booking.daily_rate, booking.selection)
            names = ", ".join(fmt_day(d) for d in lost)
            remaining = len(booking.selection)
            if remaining:
                message = (f"These dates were just taken: {names}. "
                           f"Please confirm the remaining {remaining} day{'s' if remaining != 1 else ''}.")
            else:
                message = f"These dates were just taken: {names}. Please pick other dates."
            return SubmissionResult(
                ResultKind.CONFLICT, message, outcome=outcome,
                selection=booking.selection, total=total, lost_dates=lost,
            )

        if isinstance(outcome, Invalid):
            return SubmissionResult(
                ResultKind.INVALID, outcome.reason, outcome=outcome,
                selection=booking.selection,
                total=PricingCalculator.total(booking.daily_rate, booking.selection),
            )

        if isinstance(outcome, TransientFailure):
            return SubmissionResult(
                ResultKind.FAILED, "Failed to submit booking. Please try again.",
                outcome=outcome, selection=booking.selection,
                total=PricingCalculator.total(booking.daily_rate, booking.selection),
                retryable=True,
            )

        raise TypeError(f"Unknown reservation outcome: {outcome!r}")
