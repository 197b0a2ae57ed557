"""
Debt Ledger Aggregator.

Derives totals and balances for debts from their payment ledger. Nothing
here is stored: balances are recomputed from the full payment list on every
read, so a freshly inserted payment is always reflected.

Money is compared in integer cents to avoid float equality on "fully paid".
"""

from decimal import Decimal
from typing import Any, Iterable, List

from pydantic import BaseModel

from freight_ledger.app.domain.ledger.money import from_cents, to_cents, to_origin_currency
from freight_ledger.app.models.enums import DebtPaymentStatus


class DebtTotals(BaseModel):
    """Dashboard totals across all debts, in divisa."""
    total_debt: Decimal
    total_remaining: Decimal
    total_paid: Decimal


def payments_for_debt(debt: Any, payments: Iterable[Any]) -> List[Any]:
    """Payments belonging to debt, newest payment_date first."""
    matching = [p for p in payments if p.deuda_id == debt.id]
    return sorted(matching, key=lambda p: p.payment_date, reverse=True)


def payment_contribution_cents(payment: Any) -> int:
    """
    Amount a single payment settles, in cents of the debt's currency.

    Bolívares are converted with the payment's own rate and rounded per
    payment. A bolívares payment without a usable rate raises InvalidRateError.
    """
    if payment.pago_divisa is not None:
        return to_cents(payment.pago_divisa)
    if payment.pago_bolivares is not None:
        return to_cents(to_origin_currency(payment.pago_bolivares, payment.tasa_cambio))
    return 0


def total_paid_cents(debt: Any, payments: Iterable[Any]) -> int:
    return sum(
        payment_contribution_cents(p) for p in payments if p.deuda_id == debt.id
    )


def total_paid(debt: Any, payments: Iterable[Any]) -> Decimal:
    return from_cents(total_paid_cents(debt, payments))


def remaining_balance_cents(debt: Any, payments: Iterable[Any]) -> int:
    return max(0, to_cents(debt.total_divisa) - total_paid_cents(debt, payments))


def remaining_balance(debt: Any, payments: Iterable[Any]) -> Decimal:
    """
    Remaining balance in the debt's origin currency, floored at zero.

    Overpayment is absorbed here; use overpayment() to see the surplus.
    """
    return from_cents(remaining_balance_cents(debt, payments))


def overpayment(debt: Any, payments: Iterable[Any]) -> Decimal:
    """Amount paid beyond the debt total (0 when not overpaid)."""
    return from_cents(max(0, total_paid_cents(debt, payments) - to_cents(debt.total_divisa)))


def payment_status(debt: Any, balance: Decimal) -> DebtPaymentStatus:
    """Pagado when nothing is left, Parcial when something was paid, else Pendiente."""
    balance_cents = to_cents(balance)
    if balance_cents <= 0:
        return DebtPaymentStatus.PAGADO
    if balance_cents < to_cents(debt.total_divisa):
        return DebtPaymentStatus.PARCIAL
    return DebtPaymentStatus.PENDIENTE


def is_fully_paid(debt: Any, payments: Iterable[Any]) -> bool:
    return remaining_balance_cents(debt, payments) == 0


def unpaid_debts(debts: Iterable[Any], payments: Iterable[Any]) -> List[Any]:
    """Debts that can still receive payments."""
    payments = list(payments)
    return [d for d in debts if remaining_balance_cents(d, payments) > 0]


def summarize_debts(debts: Iterable[Any], payments: Iterable[Any]) -> DebtTotals:
    """
    Totals for the debt dashboard.

    total_paid is total_debt minus total_remaining, so overpayments do not
    inflate it.
    """
    payments = list(payments)
    debt_cents = 0
    remaining = 0
    for debt in debts:
        debt_cents += to_cents(debt.total_divisa)
        remaining += remaining_balance_cents(debt, payments)
    return DebtTotals(
        total_debt=from_cents(debt_cents),
        total_remaining=from_cents(remaining),
        total_paid=from_cents(debt_cents - remaining),
    )
