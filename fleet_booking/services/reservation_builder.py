"""Assembly and validation of reservation requests (no network knowledge)."""

from typing import Optional

from fleet_booking.exceptions import (
    EmptySelectionError,
    MissingCustomerFieldError,
    RequestTooLongError,
)
from fleet_booking.models.reservation import CustomerInfo, ReservationRequest
from fleet_booking.services.pricing import PricingCalculator
from fleet_booking.utils.constants import CUSTOMER_FIELDS, SPECIAL_REQUESTS_MAX, ReservationStatus


class ReservationRequestBuilder:

    @staticmethod
    def validate(selection, customer: CustomerInfo, special_requests: str) -> None:
        """
        Check in order, first failure wins:
          1) at least one date selected
          2) full name, email, phone, ID number all non-blank
          3) special requests within the length limit
        """
        if not selection:
            raise EmptySelectionError()
        for name in CUSTOMER_FIELDS:
            if not (getattr(customer, name) or "").strip():
                raise MissingCustomerFieldError(name)
        if len(special_requests) > SPECIAL_REQUESTS_MAX:
            raise RequestTooLongError(SPECIAL_REQUESTS_MAX)

    @staticmethod
    def build(vehicle_id: str, daily_rate, selection, customer,
              special_requests: Optional[str] = None) -> ReservationRequest:
        """
        Validate and package a reservation request priced at daily_rate x days.
        `customer` may be a CustomerInfo or a form mapping.
        Raises a BookingValidationError subclass (or InvalidRateError) on bad input.
        """
        if not isinstance(customer, CustomerInfo):
            customer = CustomerInfo.from_mapping(customer)
        special_requests = (special_requests or "").strip()

        ReservationRequestBuilder.validate(selection, customer, special_requests)

        return ReservationRequest(
            vehicle_id=str(vehicle_id),
            selected_dates=tuple(sorted(selection)),
            total_amount=PricingCalculator.total(daily_rate, selection),
            customer=CustomerInfo(
                full_name=customer.full_name.strip(),
                email=customer.email.strip(),
                phone=customer.phone.strip(),
                id_number=customer.id_number.strip(),
            ),
            special_requests=special_requests,
            status=ReservationStatus.PENDING,
        )
