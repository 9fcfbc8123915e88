import atexit
import logging
import os
import pickle
import threading
import uuid
from pathlib import Path

from ..exceptions import StoreUnavailableError
from ..utils.constants import ACTIVE_RESERVATION_STATES, ReservationStatus
from ..utils.filters import to_local_date

logger = logging.getLogger(__name__)

# claim owner for days listed in a vehicle record's own schedule
SCHEDULE_CLAIM = "schedule"

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"


class Store:
    """
    Pickle-backed system of record for vehicles and reservations.

    `claims` maps (vehicle_id, 'YYYY-MM-DD') -> reservation_id for every active
    reservation. It is the uniqueness constraint that makes check-and-reserve atomic:
    all reads and writes of it happen under `_rw`.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path or os.getenv("BOOKING_DATA_PATH") or DEFAULT_DATA_PATH)
        self.vehicles: dict[str, dict] = {}
        self.reservations: dict[str, dict] = {}
        self.claims: dict[tuple[str, str], str] = {}
        self._rw = threading.RLock()

        logger.info("[Store] Using file: %s", self.path)
        self._load()

        # Automatically save on exit (skipped in test environments)
        if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
        return cls._inst

    @classmethod
    def reset_instance(cls):
        """Drop the singleton (used by create_app when a new data path is configured)."""
        with cls._inst_lock:
            cls._inst = None

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.vehicles = data.get("vehicles", {}) or {}
            self.reservations = data.get("reservations", {}) or {}
            self._rebuild_claims()
            logger.info("[Store] Loaded: vehicles=%d, reservations=%d",
                        len(self.vehicles), len(self.reservations))
        else:
            # Handle incompatible data format: backup the old file and start empty
            try:
                bak = self.path + ".bak"
                os.replace(self.path, bak)
                logger.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.error("[Store] Backup failed: %s", e)

    def _rebuild_claims(self):
        self.claims = {}
        for vid, v in self.vehicles.items():
            self._claim_vehicle_schedule(vid, v)
        for rid, r in self.reservations.items():
            if (r.get("status") or "") not in ACTIVE_RESERVATION_STATES:
                continue
            for iso in r.get("dates") or []:
                self.claims[(str(r.get("vehicle_id")), iso)] = rid

    def _claim_vehicle_schedule(self, vid: str, v: dict):
        """Register days from the vehicle record's legacy `schedule` list as taken."""
        for item in v.get("schedule") or []:
            values = item.get("date") if isinstance(item, dict) else item
            for value in values or []:
                try:
                    iso = to_local_date(value).isoformat()
                except ValueError:
                    logger.warning("[Store] Skipping bad schedule date %r on vehicle %s", value, vid)
                    continue
                self.claims.setdefault((str(vid), iso), SCHEDULE_CLAIM)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "vehicles": self.vehicles,
            "reservations": self.reservations,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.info("[Store] Saving to %s ...", self.path)
            self._dump()

    # ---------- Vehicles ----------
    def create_vehicle(self, data: dict) -> str:
        """Create a new vehicle record and return its ID."""
        with self._rw:
            vid = str(data.get("vehicle_id") or uuid.uuid4())
            self.vehicles[vid] = {
                "vehicle_id": vid,
                "model": data.get("model", ""),
                "rate": str(data.get("rate") or 0),
                "schedule": list(data.get("schedule") or []),
            }
            self._claim_vehicle_schedule(vid, self.vehicles[vid])
            self._dump()
            return vid

    def get_vehicle(self, vehicle_id: str) -> dict | None:
        """Get vehicle information by ID."""
        return self.vehicles.get(str(vehicle_id))

    # ---------- Reservations ----------
    def reservations_for(self, vehicle_id: str, active_only: bool = True) -> list[dict]:
        """Reservation records of one vehicle, oldest first."""
        vid = str(vehicle_id)
        with self._rw:
            rows = [
                dict(r) for r in self.reservations.values()
                if str(r.get("vehicle_id")) == vid
                and (not active_only or (r.get("status") or "") in ACTIVE_RESERVATION_STATES)
            ]
        rows.sort(key=lambda r: r.get("created_at") or "")
        return rows

    def reserve_dates(self, vehicle_id: str, iso_dates: list[str], record: dict):
        """
        Atomically claim every date for the vehicle and write the reservation.

        Returns (reservation_id, []) on success, or (None, taken_dates) when any
        date is already claimed, in which case nothing is written.
        Raises StoreUnavailableError if the change cannot be persisted; the
        in-memory state is rolled back first.
        """
        vid = str(vehicle_id)
        with self._rw:
            taken = sorted(iso for iso in set(iso_dates) if (vid, iso) in self.claims)
            if taken:
                return None, taken

            rid = str(uuid.uuid4())
            r = dict(record)
            r.update({"reservation_id": rid, "vehicle_id": vid, "dates": sorted(set(iso_dates))})
            self.reservations[rid] = r
            for iso in r["dates"]:
                self.claims[(vid, iso)] = rid
            try:
                self._dump()
            except OSError as e:
                del self.reservations[rid]
                for iso in r["dates"]:
                    self.claims.pop((vid, iso), None)
                logger.error("[Store] Failed to persist reservation for %s: %s", vid, e)
                raise StoreUnavailableError() from e
            return rid, []

    def transition(self, rid: str, allowed_from, status: str):
        """
        Move a reservation to `status` if its current status is in `allowed_from`.
        Check and write happen under one lock; cancelling releases its claimed dates.

        Returns (True, previous_status) on success, (False, current_status) when the
        current status is not allowed, or (False, None) for an unknown id.
        Raises StoreUnavailableError if the change cannot be persisted; the
        in-memory state is rolled back first.
        """
        with self._rw:
            r = self.reservations.get(rid)
            if r is None:
                return False, None
            previous = r.get("status")
            if previous not in allowed_from:
                return False, previous

            r["status"] = status
            released = []
            if status == ReservationStatus.CANCELLED:
                vid = str(r.get("vehicle_id"))
                for iso in r.get("dates") or []:
                    if self.claims.get((vid, iso)) == rid:
                        del self.claims[(vid, iso)]
                        released.append((vid, iso))
            try:
                self._dump()
            except OSError as e:
                r["status"] = previous
                for key in released:
                    self.claims[key] = rid
                logger.error("[Store] Failed to persist status %s for reservation %s: %s", status, rid, e)
                raise StoreUnavailableError() from e
            return True, previous
