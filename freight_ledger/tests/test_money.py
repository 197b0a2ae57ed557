"""
Currency conversion tests.
"""

from decimal import Decimal

import pytest

from freight_ledger.app.core.exceptions import InvalidRateError
from freight_ledger.app.domain.ledger.money import (
    average_rate, from_cents, quantize, to_cents, to_origin_currency, to_ves,
)


def test_bolivares_to_divisa():
    assert to_origin_currency(6000, 30) == Decimal("200.00")
    assert to_origin_currency(15000, Decimal("30.0")) == Decimal("500.00")


def test_conversion_rounds_half_up_to_cents():
    assert to_origin_currency(100, 3) == Decimal("33.33")
    assert to_origin_currency(Decimal("0.05"), 10) == Decimal("0.01")
    assert to_ves(Decimal("1.5"), Decimal("36.55")) == Decimal("54.83")


def test_divisa_to_bolivares():
    assert to_ves(100, Decimal("36.5")) == Decimal("3650.00")


def test_floats_are_read_through_their_decimal_text():
    assert to_ves(0.1, 3) == Decimal("0.30")


@pytest.mark.parametrize("rate", [0, -1, Decimal("-0.01"), None, "nan", float("inf"), "abc"])
def test_unusable_rate_raises(rate):
    with pytest.raises(InvalidRateError):
        to_origin_currency(100, rate)
    with pytest.raises(InvalidRateError):
        to_ves(100, rate)


def test_invalid_rate_error_carries_code():
    with pytest.raises(InvalidRateError) as exc_info:
        to_ves(10, 0)
    assert exc_info.value.error_code == "ERR_RATE_001"
    assert exc_info.value.status_code == 422


def test_average_rate():
    assert average_rate(Decimal("36.5"), Decimal("40.0")) == Decimal("38.25")
    assert average_rate(36.51, 40.0) == Decimal("38.26")


def test_average_rate_rejects_non_positive_source():
    with pytest.raises(InvalidRateError):
        average_rate(0, 40)


def test_cents_helpers():
    assert to_cents(Decimal("12.345")) == 1235
    assert to_cents(300) == 30000
    assert from_cents(1235) == Decimal("12.35")
    assert from_cents(0) == Decimal("0.00")
    assert quantize("2.675") == Decimal("2.68")


@pytest.mark.parametrize("amount,rate", [
    (Decimal("100.00"), Decimal("36.5")),
    (Decimal("0.07"), Decimal("41.13")),
    (Decimal("1234.56"), Decimal("3.1")),
    (Decimal("19.99"), Decimal("0.7")),
])
def test_divisa_round_trip_stays_within_two_cents(amount, rate):
    back = to_origin_currency(to_ves(amount, rate), rate)
    assert abs(back - amount) <= Decimal("0.02")


@pytest.mark.parametrize("amount,rate", [
    (Decimal("1000.00"), Decimal("30")),
    (Decimal("6543.21"), Decimal("36.5")),
    (Decimal("0.99"), Decimal("1.3")),
])
def test_bolivares_round_trip_error_bounded_by_rounding(amount, rate):
    # Half a cent lost converting to divisa, scaled back by the rate, plus
    # half a cent on the way back.
    back = to_ves(to_origin_currency(amount, rate), rate)
    assert abs(back - amount) <= Decimal("0.005") * rate + Decimal("0.005")
