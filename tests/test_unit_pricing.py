from decimal import Decimal

import pytest

from fleet_booking.exceptions import InvalidRateError
from fleet_booking.models.date_key import DateKey
from fleet_booking.services.pricing import PricingCalculator
from fleet_booking.services.selection import SelectionSet


@pytest.mark.parametrize("rate", [0, 1, Decimal("4500"), Decimal("99.99")])
@pytest.mark.parametrize("n", [0, 1, 3, 31])
def test_total_is_rate_times_days(rate, n):
    selection = SelectionSet(DateKey(2030, 1, 1).add_days(i) for i in range(n))
    assert PricingCalculator.total(rate, selection) == Decimal(str(rate)) * n


def test_negative_rate_rejected():
    with pytest.raises(InvalidRateError):
        PricingCalculator.total(Decimal("-1"), SelectionSet())
