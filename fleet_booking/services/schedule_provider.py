"""Vehicle Schedule Provider backed by the Store."""

import logging
from typing import Optional, Protocol

from fleet_booking.exceptions import ScheduleUnavailableError, VehicleNotFoundError
from fleet_booking.models.vehicle import Vehicle
from fleet_booking.services import common

logger = logging.getLogger(__name__)


class VehicleScheduleProvider(Protocol):
    def fetch(self, vehicle_id: str) -> Vehicle: ...


class StoreScheduleProvider:
    """
    Reads a vehicle and its active reservations and normalizes them into a Vehicle.
    Unknown id -> VehicleNotFoundError; unreadable or malformed data -> ScheduleUnavailableError.
    """

    def __init__(self, store=None, tz_name: Optional[str] = None):
        self.store = store
        self.tz_name = tz_name

    def _get_store(self):
        # tests can inject a store; otherwise go through common._store() (monkeypatchable)
        return self.store if self.store is not None else common._store()

    def fetch(self, vehicle_id: str) -> Vehicle:
        st = self._get_store()
        try:
            raw = st.get_vehicle(vehicle_id)
            reservations = st.reservations_for(vehicle_id) if raw else []
        except (OSError, AttributeError) as e:
            logger.error("Schedule read failed for vehicle %s: %s", vehicle_id, e)
            raise ScheduleUnavailableError() from e

        if not raw:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")

        try:
            vehicle = common.vehicle_from_dict(raw, reservations, self.tz_name)
        except (ValueError, TypeError) as e:
            logger.error("Malformed schedule for vehicle %s: %s", vehicle_id, e)
            raise ScheduleUnavailableError(f"Error: schedule for vehicle '{vehicle_id}' is malformed") from e

        logger.info("Fetched vehicle %s with %d schedule entries",
                    vehicle.vehicle_id, len(vehicle.schedule_entries))
        return vehicle
