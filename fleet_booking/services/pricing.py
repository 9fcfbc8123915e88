from decimal import Decimal

from fleet_booking.exceptions import InvalidRateError


class PricingCalculator:
    """Flat per-day pricing: no discounts, no surcharges."""

    @staticmethod
    def total(daily_rate, selection) -> Decimal:
        rate = Decimal(str(daily_rate))
        if rate < 0:
            raise InvalidRateError()
        return rate * len(selection)
