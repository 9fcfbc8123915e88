"""
Server-side arbitration: a reservation touching any already-claimed day of the
same vehicle is rejected as a whole, and concurrent attempts for the same day
produce exactly one winner.
"""

import asyncio
import threading
from dataclasses import replace
from decimal import Decimal

import pytest

from fleet_booking.exceptions import StoreUnavailableError
from fleet_booking.models.date_key import DateKey
from fleet_booking.models.reservation import Accepted, ConflictingDates, Invalid, TransientFailure
from fleet_booking.services.reservation_builder import ReservationRequestBuilder
from fleet_booking.services.reservation_service import ReservationService, StoreReservationSink
from fleet_booking.services.selection import SelectionSet
from fleet_booking.utils.security import check_id_number

TODAY = DateKey(2030, 1, 1)


def seed_vehicle(store, vid="car-1", rate="1000"):
    return store.create_vehicle({"vehicle_id": vid, "model": "Toyota Prado", "rate": rate})


def make_request(customer, *days, vid="car-1", rate=Decimal("1000")):
    selection = SelectionSet(DateKey(2030, 6, d) for d in days)
    return ReservationRequestBuilder.build(vid, rate, selection, customer, "")


def test_accepts_and_persists(store, customer):
    seed_vehicle(store)
    outcome = ReservationService.reserve(make_request(customer, 5, 7), today=TODAY)
    assert isinstance(outcome, Accepted)

    rec = store.reservations[outcome.reservation_id]
    assert rec["dates"] == ["2030-06-05", "2030-06-07"]
    assert rec["status"] == "pending"
    assert rec["total_amount"] == "2000.00"
    assert "id_number" not in rec["customer"]
    assert check_id_number("29876543", rec["customer"]["id_number_hash"])


def test_overlap_rejected_as_a_whole(store, customer):
    seed_vehicle(store)
    ReservationService.reserve(make_request(customer, 7, 8), today=TODAY)

    outcome = ReservationService.reserve(make_request(customer, 5, 7), today=TODAY)
    assert isinstance(outcome, ConflictingDates)
    assert outcome.dates == {DateKey(2030, 6, 7)}
    # nothing of the losing request was claimed
    assert ("car-1", "2030-06-05") not in store.claims
    assert len(store.reservations) == 1


def test_other_vehicle_same_day_is_fine(store, customer):
    seed_vehicle(store)
    seed_vehicle(store, vid="car-2")
    ReservationService.reserve(make_request(customer, 7), today=TODAY)
    outcome = ReservationService.reserve(make_request(customer, 7, vid="car-2"), today=TODAY)
    assert isinstance(outcome, Accepted)


def test_cancel_releases_dates(store, customer):
    seed_vehicle(store)
    first = ReservationService.reserve(make_request(customer, 7), today=TODAY)
    ok, msg = ReservationService.cancel_reservation(first.reservation_id)
    assert ok, msg
    ok, msg = ReservationService.cancel_reservation(first.reservation_id)
    assert not ok and "already" in msg.lower()
    assert isinstance(ReservationService.reserve(make_request(customer, 7), today=TODAY), Accepted)


def test_confirm_keeps_dates_claimed(store, customer):
    seed_vehicle(store)
    first = ReservationService.reserve(make_request(customer, 7), today=TODAY)
    ok, _ = ReservationService.confirm_reservation(first.reservation_id)
    assert ok
    assert store.reservations[first.reservation_id]["status"] == "confirmed"
    assert isinstance(ReservationService.reserve(make_request(customer, 7), today=TODAY), ConflictingDates)


@pytest.mark.parametrize("mutate,reason", [
    (lambda r: replace(r, vehicle_id="ghost"), "vehicle"),
    (lambda r: replace(r, total_amount=Decimal("1")), "total"),
    (lambda r: replace(r, selected_dates=()), "date"),
])
def test_sink_revalidates(store, customer, mutate, reason):
    seed_vehicle(store)
    outcome = ReservationService.reserve(mutate(make_request(customer, 5)), today=TODAY)
    assert isinstance(outcome, Invalid)
    assert reason in outcome.reason.lower()


def test_past_dates_invalid(store, customer):
    seed_vehicle(store)
    outcome = ReservationService.reserve(make_request(customer, 5), today=DateKey(2030, 6, 6))
    assert isinstance(outcome, Invalid)
    assert "past" in outcome.reason.lower()


def test_concurrent_same_day_has_one_winner(store, customer):
    seed_vehicle(store)
    barrier = threading.Barrier(8)
    results = []

    def attempt():
        barrier.wait()
        results.append(ReservationService.reserve(make_request(customer, 15, 16), today=TODAY))

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(isinstance(r, Accepted) for r in results) == 1
    assert sum(isinstance(r, ConflictingDates) for r in results) == 7
    assert len(store.reservations) == 1


def test_persist_failure_rolls_back(store, customer, monkeypatch):
    seed_vehicle(store)

    def boom():
        raise OSError("disk full")

    monkeypatch.setattr(store, "_dump", boom)
    with pytest.raises(StoreUnavailableError):
        ReservationService.reserve(make_request(customer, 5), today=TODAY)
    assert store.reservations == {}
    assert store.claims == {}


def test_store_sink_maps_storage_failure_to_transient(store, customer, monkeypatch):
    seed_vehicle(store)
    def boom():
        raise OSError("disk full")

    monkeypatch.setattr(store, "_dump", boom)
    outcome = asyncio.run(StoreReservationSink(store).reserve(make_request(customer, 5)))
    assert isinstance(outcome, TransientFailure)


def test_list_hides_id_hash(store, customer):
    seed_vehicle(store)
    ReservationService.reserve(make_request(customer, 5), today=TODAY)
    rows = ReservationService.list_reservations("car-1")
    assert len(rows) == 1
    assert "id_number_hash" not in rows[0]["customer"]
    assert ReservationService.list_reservations("car-9") == []


def test_failed_cancel_keeps_reservation_active(store, customer, monkeypatch):
    seed_vehicle(store)
    first = ReservationService.reserve(make_request(customer, 7), today=TODAY)

    def boom():
        raise OSError("disk full")

    monkeypatch.setattr(store, "_dump", boom)
    with pytest.raises(StoreUnavailableError):
        ReservationService.cancel_reservation(first.reservation_id)

    assert store.reservations[first.reservation_id]["status"] == "pending"
    assert store.claims[("car-1", "2030-06-07")] == first.reservation_id


def test_failed_confirm_keeps_pending(store, customer, monkeypatch):
    seed_vehicle(store)
    first = ReservationService.reserve(make_request(customer, 7), today=TODAY)

    def boom():
        raise OSError("disk full")

    monkeypatch.setattr(store, "_dump", boom)
    with pytest.raises(StoreUnavailableError):
        ReservationService.confirm_reservation(first.reservation_id)
    assert store.reservations[first.reservation_id]["status"] == "pending"


def test_concurrent_confirm_and_cancel_keep_claims_consistent(store, customer):
    seed_vehicle(store)
    rids = [ReservationService.reserve(make_request(customer, d), today=TODAY).reservation_id
            for d in range(1, 11)]
    barrier = threading.Barrier(len(rids) * 2)

    def run(fn, rid):
        barrier.wait()
        fn(rid)

    threads = []
    for rid in rids:
        threads.append(threading.Thread(target=run, args=(ReservationService.confirm_reservation, rid)))
        threads.append(threading.Thread(target=run, args=(ReservationService.cancel_reservation, rid)))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for rid in rids:
        r = store.reservations[rid]
        claimed = store.claims.get(("car-1", r["dates"][0])) == rid
        # whichever order the two ran in, cancel always wins in the end
        assert r["status"] == "cancelled"
        assert not claimed


def test_confirm_cancelled_reservation_refused(store, customer):
    seed_vehicle(store)
    first = ReservationService.reserve(make_request(customer, 7), today=TODAY)
    ReservationService.cancel_reservation(first.reservation_id)
    ok, msg = ReservationService.confirm_reservation(first.reservation_id)
    assert not ok and "pending" in msg
    ok, msg = ReservationService.confirm_reservation("missing")
    assert not ok and "not found" in msg.lower()
