from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from .date_key import DateKey
from ..utils.constants import ReservationStatus


@dataclass(frozen=True)
class CustomerInfo:
    full_name: str
    email: str
    phone: str
    id_number: str

    @classmethod
    def from_mapping(cls, data) -> "CustomerInfo":
        """
        Accept snake_case or the camelCase keys posted by the booking form.
        Values are trimmed; missing keys become ''.
        """
        data = data or {}

        def pick(*keys):
            for k in keys:
                v = data.get(k)
                if v is not None:
                    return str(v).strip()
            return ""

        return cls(
            full_name=pick("full_name", "fullName"),
            email=pick("email"),
            phone=pick("phone"),
            id_number=pick("id_number", "idNumber"),
        )


@dataclass(frozen=True)
class ReservationRequest:
    """
    Immutable payload submitted exactly once per user confirmation.
    """
    vehicle_id: str
    selected_dates: tuple[DateKey, ...]
    total_amount: Decimal
    customer: CustomerInfo
    special_requests: str = ""
    status: str = ReservationStatus.PENDING

    def to_payload(self) -> dict:
        """Wire shape used by the booking API."""
        return {
            "carId": self.vehicle_id,
            "selectedDates": [d.isoformat() for d in self.selected_dates],
            "totalAmount": str(self.total_amount),
            "customerInfo": {
                "fullName": self.customer.full_name,
                "email": self.customer.email,
                "phone": self.customer.phone,
                "idNumber": self.customer.id_number,
            },
            "specialRequests": self.special_requests,
            "status": self.status,
        }


# ---------- Reservation outcomes (tagged variant) ----------
@dataclass(frozen=True)
class Accepted:
    reservation_id: str | None = None
    dates: tuple[DateKey, ...] = ()
    kind = "accepted"


@dataclass(frozen=True)
class ConflictingDates:
    dates: frozenset[DateKey] = field(default_factory=frozenset)
    kind = "conflict"


@dataclass(frozen=True)
class Invalid:
    reason: str
    kind = "invalid"


@dataclass(frozen=True)
class TransientFailure:
    detail: str = "temporary failure"
    kind = "transient"


ReservationOutcome = Union[Accepted, ConflictingDates, Invalid, TransientFailure]
