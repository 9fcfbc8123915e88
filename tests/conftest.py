import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from fleet_booking.models.reservation import CustomerInfo


@pytest.fixture
def store(tmp_path, monkeypatch):
    """
    A real Store on a throwaway pickle file, returned by common._store() so every
    service resolves to the SAME object.
    """
    from fleet_booking.models.store import Store
    from fleet_booking.services import common as common_mod

    st = Store(tmp_path / "data.pkl")
    monkeypatch.setattr(common_mod, "_store", lambda: st, raising=True)
    yield st


@pytest.fixture
def client(tmp_path, store):
    """Flask test client sharing the `store` fixture."""
    from fleet_booking import create_app
    from fleet_booking.models.store import Store

    app = create_app({"TESTING": True, "BOOKING_DATA_PATH": str(tmp_path / "app.pkl")})
    Store._inst = store
    with app.test_client() as c:
        yield c
    Store.reset_instance()


@pytest.fixture
def customer():
    return CustomerInfo(
        full_name="Jane Wanjiru",
        email="jane@example.com",
        phone="0712345678",
        id_number="29876543",
    )


