"""
Debt ledger aggregator tests.
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from freight_ledger.app.core.exceptions import InvalidRateError
from freight_ledger.app.domain.ledger import aggregator
from freight_ledger.app.models.enums import DebtPaymentStatus


def make_debt(debt_id=1, total="500.00"):
    return SimpleNamespace(id=debt_id, total_divisa=Decimal(total))


def make_payment(deuda_id=1, divisa=None, bolivares=None, rate=None, day=1):
    return SimpleNamespace(
        deuda_id=deuda_id,
        pago_divisa=None if divisa is None else Decimal(divisa),
        pago_bolivares=None if bolivares is None else Decimal(bolivares),
        tasa_cambio=None if rate is None else Decimal(rate),
        payment_date=datetime(2025, 3, day),
    )


@pytest.fixture
def debt():
    return make_debt()


def test_single_divisa_payment(debt):
    payments = [make_payment(divisa="200.00")]

    assert aggregator.remaining_balance(debt, payments) == Decimal("300.00")
    assert aggregator.payment_status(debt, Decimal("300.00")) == DebtPaymentStatus.PARCIAL


def test_bolivares_payment_converted_with_its_rate(debt):
    payments = [
        make_payment(divisa="200.00", day=1),
        make_payment(bolivares="6000", rate="30.0", day=2),
    ]

    assert aggregator.total_paid(debt, payments) == Decimal("400.00")
    assert aggregator.remaining_balance(debt, payments) == Decimal("100.00")


def test_overpayment_is_absorbed(debt):
    payments = [
        make_payment(divisa="200.00", day=1),
        make_payment(bolivares="6000", rate="30.0", day=2),
        make_payment(bolivares="15000", rate="30.0", day=3),
    ]

    balance = aggregator.remaining_balance(debt, payments)
    assert balance == Decimal("0.00")
    assert aggregator.is_fully_paid(debt, payments)
    assert aggregator.payment_status(debt, balance) == DebtPaymentStatus.PAGADO
    assert aggregator.overpayment(debt, payments) == Decimal("400.00")


def test_payments_of_other_debts_are_ignored(debt):
    payments = [make_payment(deuda_id=2, divisa="450.00"), make_payment(divisa="50.00")]
    assert aggregator.remaining_balance(debt, payments) == Decimal("450.00")


def test_no_payments_is_pending(debt):
    balance = aggregator.remaining_balance(debt, [])
    assert balance == Decimal("500.00")
    assert aggregator.payment_status(debt, balance) == DebtPaymentStatus.PENDIENTE
    assert aggregator.overpayment(debt, []) == Decimal("0.00")


def test_each_conversion_rounded_before_summing():
    # 100/3 = 33.33 per payment; three of them settle 99.99, not 100.00
    debt = make_debt(total="100.00")
    payments = [make_payment(bolivares="100", rate="3", day=d) for d in (1, 2, 3)]

    assert aggregator.remaining_balance(debt, payments) == Decimal("0.01")
    assert not aggregator.is_fully_paid(debt, payments)


def test_fully_paid_compares_cents_not_floats():
    debt = make_debt(total="0.30")
    payments = [make_payment(day=1), make_payment(day=2)]
    payments[0].pago_divisa = 0.1
    payments[1].pago_divisa = 0.2

    assert aggregator.is_fully_paid(debt, payments)


def test_bolivares_payment_without_rate_raises(debt):
    with pytest.raises(InvalidRateError):
        aggregator.remaining_balance(debt, [make_payment(bolivares="1000")])


def test_aggregation_is_idempotent(debt):
    payments = [make_payment(divisa="120.50"), make_payment(bolivares="730", rate="36.5", day=2)]

    first = aggregator.remaining_balance(debt, payments)
    second = aggregator.remaining_balance(debt, payments)
    assert first == second == Decimal("359.50")


@pytest.mark.parametrize("amounts", [[], ["1"], ["499.99"], ["500"], ["250", "250", "250"], ["10000"]])
def test_balance_never_negative(debt, amounts):
    payments = [make_payment(divisa=a, day=i + 1) for i, a in enumerate(amounts)]
    assert aggregator.remaining_balance(debt, payments) >= 0


def test_payments_for_debt_newest_first(debt):
    payments = [
        make_payment(divisa="1", day=5),
        make_payment(deuda_id=9, divisa="1", day=9),
        make_payment(divisa="1", day=20),
        make_payment(divisa="1", day=2),
    ]

    ordered = aggregator.payments_for_debt(debt, payments)
    assert [p.payment_date.day for p in ordered] == [20, 5, 2]


def test_summarize_and_unpaid_filter():
    debts = [make_debt(1, "500.00"), make_debt(2, "100.00"), make_debt(3, "50.00")]
    payments = [
        make_payment(1, divisa="200.00"),
        make_payment(2, divisa="150.00"),  # overpaid by 50
    ]

    totals = aggregator.summarize_debts(debts, payments)
    assert totals.total_debt == Decimal("650.00")
    assert totals.total_remaining == Decimal("350.00")
    assert totals.total_paid == Decimal("300.00")

    assert [d.id for d in aggregator.unpaid_debts(debts, payments)] == [1, 3]
