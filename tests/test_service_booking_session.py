import asyncio
from decimal import Decimal

import pytest

from fleet_booking.exceptions import VehicleNotFoundError
from fleet_booking.models.date_key import DateKey
from fleet_booking.services.booking_session import BookingSession
from fleet_booking.services.coordinator import ResultKind
from fleet_booking.services.reservation_service import StoreReservationSink
from fleet_booking.services.schedule_provider import StoreScheduleProvider

TODAY = DateKey(2030, 6, 1)


def seed_vehicle(store, vid="car-1", rate="1000"):
    return store.create_vehicle({"vehicle_id": vid, "model": "Toyota Prado", "rate": rate,
                                 "schedule": [{"date": ["2030-06-10"]}]})


def start_session(store):
    return BookingSession.start(StoreScheduleProvider(store=store), "car-1",
                                StoreReservationSink(store), today=TODAY)


def test_session_opens_on_current_month(store):
    seed_vehicle(store)
    session = start_session(store)
    assert session.anchor_month == DateKey(2030, 6, 1)
    assert session.month_label == "June 2030"
    assert session.total == Decimal("0")


def test_navigation_regenerates_grid(store):
    seed_vehicle(store)
    session = start_session(store)
    session.navigate_month(1)
    cells = session.grid(TODAY)
    assert len(cells) == 42
    assert {c.date.month for c in cells if c.in_current_month} == {7}
    session.navigate_month(-2)
    assert session.month_label == "May 2030"
    assert all(c.is_past for c in session.grid(TODAY) if c.in_current_month)


def test_toggle_accepts_iso_strings(store):
    seed_vehicle(store)
    session = start_session(store)
    session.toggle_date("2030-06-10", TODAY)
    session.toggle_date("2030-06-05", TODAY)
    session.toggle_date("2030-06-07T09:00:00", TODAY)
    assert [d.isoformat() for d in session.selection] == ["2030-06-05", "2030-06-07"]
    assert session.total == Decimal("2000")


def test_unknown_vehicle_stops_the_session(store):
    with pytest.raises(VehicleNotFoundError):
        start_session(store)


def test_two_customers_race_for_the_same_day(store, customer):
    seed_vehicle(store)
    alice, bob = start_session(store), start_session(store)
    for s in (alice, bob):
        s.toggle_date(DateKey(2030, 6, 5), TODAY)
        s.toggle_date(DateKey(2030, 6, 7), TODAY)
    bob.toggle_date(DateKey(2030, 6, 5), TODAY)  # bob only wants the 7th

    first = asyncio.run(alice.submit(customer))
    second = asyncio.run(bob.submit(customer))

    assert first.ok
    assert second.kind == ResultKind.CONFLICT
    assert second.lost_dates == (DateKey(2030, 6, 7),)
    assert len(bob.selection) == 0
    assert bob.availability.is_booked(DateKey(2030, 6, 7))
    assert len(store.reservations) == 1


def test_closed_session_rejects_submit(store, customer):
    seed_vehicle(store)
    session = start_session(store)
    session.toggle_date(DateKey(2030, 6, 5), TODAY)
    session.cancel()
    result = asyncio.run(session.submit(customer))
    assert result.kind == ResultKind.REJECTED
    session.open(TODAY)
    assert len(session.selection) == 0
