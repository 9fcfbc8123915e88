"""Reservation system of record: server-side validation and atomic check-and-reserve."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from fleet_booking.exceptions import BookingValidationError, StoreUnavailableError
from fleet_booking.models.date_key import DateKey
from fleet_booking.models.reservation import (
    Accepted,
    ConflictingDates,
    Invalid,
    ReservationRequest,
    TransientFailure,
)
from fleet_booking.services import common
from fleet_booking.services.pricing import PricingCalculator
from fleet_booking.services.reservation_builder import ReservationRequestBuilder
from fleet_booking.utils.constants import ACTIVE_RESERVATION_STATES, ReservationStatus
from fleet_booking.utils.security import hash_id_number

logger = logging.getLogger(__name__)


class ReservationService:
    """
    Reserve, list, confirm and cancel reservations.
    Re-validates every request even if the client already did.
    """

    @staticmethod
    def _get_store(store=None):
        return store if store is not None else common._store()

    @staticmethod
    def reserve(request: ReservationRequest, store=None, today: Optional[DateKey] = None):
        """
        Validate and atomically reserve all requested dates, or none of them.

        Returns Accepted, ConflictingDates (the dates already taken) or Invalid.
        Raises StoreUnavailableError when the reservation cannot be persisted.
        """
        st = ReservationService._get_store(store)
        today = today or common.today_key()

        # --- vehicle lookup ---
        veh = st.get_vehicle(request.vehicle_id)
        if not veh:
            return Invalid("Invalid vehicle")

        # --- request shape (same rules as the client-side builder) ---
        try:
            ReservationRequestBuilder.validate(
                request.selected_dates, request.customer, request.special_requests or "")
        except BookingValidationError as e:
            return Invalid(e.message)

        dates = sorted(set(request.selected_dates))
        if dates[0] < today:
            return Invalid("Selected dates cannot be in the past")

        # --- price must match the stored rate ---
        rate = common.to_decimal_safe(veh.get("rate"))
        if rate is None or rate < 0:
            return Invalid("Vehicle has no valid daily rate")
        expected = PricingCalculator.total(rate, dates)
        if common.money(request.total_amount) != common.money(expected):
            return Invalid(f"Total amount does not match {common.money(expected)}")

        # --- atomic check-and-reserve ---
        record = {
            "total_amount": str(common.money(expected)),
            "rate": str(rate),
            "customer": {
                "full_name": request.customer.full_name,
                "email": request.customer.email,
                "phone": request.customer.phone,
                "id_number_hash": hash_id_number(request.customer.id_number),
            },
            "special_requests": request.special_requests or "",
            "status": ReservationStatus.PENDING,
            "created_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        rid, taken = st.reserve_dates(request.vehicle_id, [d.isoformat() for d in dates], record)
        if taken:
            logger.info("Reservation for vehicle %s rejected: %d date(s) already taken",
                        request.vehicle_id, len(taken))
            return ConflictingDates(frozenset(DateKey.from_value(s) for s in taken))

        logger.info("Reservation %s accepted for vehicle %s (%d day(s))",
                    rid, request.vehicle_id, len(dates))
        return Accepted(reservation_id=rid, dates=tuple(dates))

    @staticmethod
    def list_reservations(vehicle_id: Optional[str] = None, store=None) -> list[dict]:
        """All reservations (optionally for one vehicle), without ID number hashes."""
        st = ReservationService._get_store(store)
        rows = []
        for r in st.reservations.values():
            if vehicle_id is not None and str(r.get("vehicle_id")) != str(vehicle_id):
                continue
            row = dict(r)
            customer = dict(row.get("customer") or {})
            customer.pop("id_number_hash", None)
            row["customer"] = customer
            rows.append(row)
        rows.sort(key=lambda x: (x.get("created_at") or ""))
        return rows

    @staticmethod
    def confirm_reservation(rid: str, store=None):
        """Move a pending reservation to confirmed."""
        st = ReservationService._get_store(store)
        ok, current = st.transition(rid, {ReservationStatus.PENDING}, ReservationStatus.CONFIRMED)
        if not ok:
            if current is None:
                return False, "Reservation not found"
            return False, "Only pending reservations can be confirmed"
        return True, "Reservation confirmed"

    @staticmethod
    def cancel_reservation(rid: str, store=None):
        """
        Cancel a reservation and release its dates.
        Raises StoreUnavailableError if the cancellation cannot be persisted.
        """
        st = ReservationService._get_store(store)
        ok, current = st.transition(rid, ACTIVE_RESERVATION_STATES, ReservationStatus.CANCELLED)
        if not ok:
            if current is None:
                return False, "Reservation not found"
            return False, "Reservation already cancelled"
        logger.info("Reservation %s cancelled", rid)
        return True, "Reservation cancelled"


class StoreReservationSink:
    """Async Reservation Sink over ReservationService; storage failures become TransientFailure."""

    def __init__(self, store=None):
        self.store = store

    async def reserve(self, request: ReservationRequest):
        try:
            return await asyncio.to_thread(ReservationService.reserve, request, self.store)
        except StoreUnavailableError as e:
            logger.warning("Reservation for vehicle %s failed transiently: %s", request.vehicle_id, e)
            return TransientFailure(e.message)
