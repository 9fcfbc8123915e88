from decimal import Decimal

import pytest

from fleet_booking.exceptions import ScheduleUnavailableError, VehicleNotFoundError
from fleet_booking.models.date_key import DateKey
from fleet_booking.services.schedule_provider import StoreScheduleProvider


def seed_vehicle(store, vid="car-1", rate="1000", schedule=None):
    return store.create_vehicle({"vehicle_id": vid, "model": "Toyota Prado", "rate": rate,
                                 "schedule": schedule})


def test_fetch_normalizes_vehicle_and_schedule(store):
    seed_vehicle(store, schedule=[{"date": ["2030-06-10T00:00:00.000Z", "2030-06-11"]}])
    store.reserve_dates("car-1", ["2030-07-01", "2030-07-02"], {"status": "pending"})

    v = StoreScheduleProvider().fetch("car-1")
    assert v.vehicle_id == "car-1"
    assert v.daily_rate == Decimal("1000")
    assert len(v.schedule_entries) == 2
    assert v.booked_dates() == [DateKey(2030, 6, 10), DateKey(2030, 6, 11),
                                DateKey(2030, 7, 1), DateKey(2030, 7, 2)]


def test_cancelled_reservations_are_not_scheduled(store):
    seed_vehicle(store)
    rid, _ = store.reserve_dates("car-1", ["2030-07-01"], {"status": "pending"})
    store.transition(rid, {"pending"}, "cancelled")
    assert StoreScheduleProvider(store=store).fetch("car-1").booked_dates() == []


def test_missing_rate_defaults_to_zero(store):
    store.vehicles["bare"] = {"vehicle_id": "bare", "model": "Fit"}
    assert StoreScheduleProvider(store=store).fetch("bare").daily_rate == Decimal("0")


def test_unknown_vehicle(store):
    with pytest.raises(VehicleNotFoundError):
        StoreScheduleProvider(store=store).fetch("nope")


def test_malformed_record_is_unavailable(store):
    seed_vehicle(store, rate="-5")
    with pytest.raises(ScheduleUnavailableError):
        StoreScheduleProvider(store=store).fetch("car-1")

    seed_vehicle(store, vid="car-2", schedule=[{"date": ["garbage"]}])
    with pytest.raises(ScheduleUnavailableError):
        StoreScheduleProvider(store=store).fetch("car-2")
