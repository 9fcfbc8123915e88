from flask import Blueprint, current_app, jsonify, request

from ..exceptions import StoreUnavailableError
from ..models.date_key import DateKey
from ..models.reservation import Accepted, ConflictingDates, Invalid
from ..services import calendar_grid
from ..services.availability import AvailabilityIndex
from ..services.common import money, to_decimal_safe, today_key
from ..services.reservation_builder import ReservationRequestBuilder
from ..services.reservation_service import ReservationService
from ..services.schedule_provider import StoreScheduleProvider
from ..services.selection import SelectionSet
from ..utils.decorators import error_response, json_errors

bp = Blueprint("booking", __name__, url_prefix="/api")


def _tz():
    return current_app.config.get("BOOKING_TIMEZONE")


def _provider():
    return StoreScheduleProvider(tz_name=_tz())


@bp.get("/fleet/<vid>")
@json_errors
def vehicle_schedule(vid):
    """Vehicle, daily rate and every booked day (past ones included)."""
    v = _provider().fetch(vid)
    return jsonify({
        "success": True,
        "data": {
            "_id": v.vehicle_id,
            "model": v.model,
            "dailyRate": str(v.daily_rate),
            "bookedDates": [d.isoformat() for d in v.booked_dates()],
        },
    })


@bp.get("/fleet/<vid>/calendar")
@json_errors
def vehicle_calendar(vid):
    """42-cell month grid. ?month=YYYY-MM, defaults to the current month."""
    today = today_key(_tz())
    month = (request.args.get("month") or "").strip()
    if month:
        try:
            anchor = DateKey.from_value(f"{month}-01")
        except ValueError:
            return error_response("Invalid month (YYYY-MM)", 400)
    else:
        anchor = today.first_of_month()

    v = _provider().fetch(vid)
    week_start = current_app.config["BOOKING_WEEK_START"]
    cells = calendar_grid.generate(
        anchor, AvailabilityIndex.build(v.schedule_entries), SelectionSet.empty(), today, week_start)
    return jsonify({
        "success": True,
        "data": {
            "month": calendar_grid.month_label(anchor),
            "weekdays": calendar_grid.weekday_header(week_start),
            "dailyRate": str(v.daily_rate),
            "cells": [c.to_dict() for c in cells],
        },
    })


@bp.post("/booking")
@json_errors
def create_booking():
    """Validate the posted booking form and reserve its dates atomically."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return error_response("Booking must be a JSON object", 400)
    vid = body.get("carId")
    if not isinstance(vid, (str, int)) or not str(vid).strip():
        return error_response("Missing carId", 400)
    vid = str(vid).strip()
    if not isinstance(body.get("selectedDates") or [], list):
        return error_response("selectedDates must be a list", 400)
    if not isinstance(body.get("customerInfo") or {}, dict):
        return error_response("customerInfo must be an object", 400)
    if not isinstance(body.get("specialRequests") or "", str):
        return error_response("specialRequests must be text", 400)

    vehicle = _provider().fetch(vid)
    try:
        dates = [DateKey.from_value(x, _tz()) for x in body.get("selectedDates") or []]
    except (ValueError, TypeError):
        return error_response("Invalid dates (YYYY-MM-DD)", 400)

    req = ReservationRequestBuilder.build(
        vehicle.vehicle_id, vehicle.daily_rate, SelectionSet(dates),
        body.get("customerInfo"), body.get("specialRequests"),
    )
    if body.get("totalAmount") is not None:
        claimed = to_decimal_safe(body.get("totalAmount"))
        if claimed is None or money(claimed) != money(req.total_amount):
            return error_response(f"Total amount does not match {money(req.total_amount)}", 400)

    try:
        outcome = ReservationService.reserve(req, today=today_key(_tz()))
    except StoreUnavailableError as e:
        return error_response(e.message, 503, retryable=True)

    if isinstance(outcome, ConflictingDates):
        return error_response(
            "Selected dates are no longer available", 409,
            conflictingDates=[d.isoformat() for d in sorted(outcome.dates)],
        )
    if isinstance(outcome, Invalid):
        return error_response(outcome.reason, 400)
    if isinstance(outcome, Accepted):
        return jsonify({
            "success": True,
            "data": {
                "reservationId": outcome.reservation_id,
                "carId": vehicle.vehicle_id,
                "selectedDates": [d.isoformat() for d in outcome.dates],
                "totalAmount": str(money(req.total_amount)),
                "status": req.status,
            },
        }), 201
    return error_response("Failed to create booking", 500)


@bp.get("/booking")
def list_bookings():
    car_id = (request.args.get("carId") or "").strip() or None
    return jsonify({"success": True, "data": ReservationService.list_reservations(car_id)})


@bp.post("/booking/<rid>/cancel")
def cancel_booking(rid):
    try:
        ok, msg = ReservationService.cancel_reservation(rid)
    except StoreUnavailableError as e:
        return error_response(e.message, 503, retryable=True)
    if not ok:
        return error_response(msg, 404 if "not found" in msg.lower() else 400)
    return jsonify({"success": True, "message": msg})
