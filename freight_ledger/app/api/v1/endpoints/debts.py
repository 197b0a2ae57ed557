"""
Debt API Endpoints.

Personal debts and the payments that settle them. Balances are never
stored; every response recomputes them from the payment ledger.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import LedgerValidationError
from freight_ledger.app.db.session import get_db
from freight_ledger.app.domain.ledger import aggregator
from freight_ledger.app.domain.ledger.validation import validate_debt, validate_debt_payment
from freight_ledger.app.models.debt import Debt, DebtPayment
from freight_ledger.app.models.enums import PaymentType, RateType
from freight_ledger.app.repositories import debts as debt_repo
from freight_ledger.app.schemas.debt import (
    DebtCreate, DebtResponse, DebtDetailResponse, DebtListResponse,
    DebtSummaryResponse, PaymentCreate, PaymentResponse,
)
from freight_ledger.app.services.analytics import AnalyticsService
from freight_ledger.app.services.audit import log_event, AuditAction
from freight_ledger.app.services.exchange_rates import ExchangeRateClient, get_exchange_rate_client

router = APIRouter(prefix="/debts", tags=["Debts"])


def _debt_view(debt: Debt, payments: List[DebtPayment]) -> Dict[str, Any]:
    balance = aggregator.remaining_balance(debt, payments)
    return {
        "id": debt.id,
        "persona_name": debt.persona_name,
        "description": debt.description,
        "original_currency": debt.original_currency,
        "total_divisa": debt.total_divisa,
        "tasa_cambio": debt.tasa_cambio,
        "due_date": debt.due_date,
        "remaining_balance": balance,
        "total_paid": aggregator.total_paid(debt, payments),
        "overpayment": aggregator.overpayment(debt, payments),
        "payment_status": aggregator.payment_status(debt, balance),
        "created_at": debt.created_at,
        "updated_at": debt.updated_at,
    }


@router.get("", response_model=DebtListResponse)
async def list_debts(
    unpaid: bool = Query(False, description="Only debts with a remaining balance"),
    db: AsyncSession = Depends(get_db)
):
    """List debts with their balances, newest first."""
    debts = await debt_repo.list_debts(db)
    payments = await debt_repo.list_payments(db)

    if unpaid:
        debts = aggregator.unpaid_debts(debts, payments)

    items = [DebtResponse(**_debt_view(d, aggregator.payments_for_debt(d, payments))) for d in debts]
    return DebtListResponse(debts=items, total=len(items))


@router.post("", response_model=DebtResponse, status_code=status.HTTP_201_CREATED)
async def create_debt(
    debt_data: DebtCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a debt.

    Only USD debts are accepted; violations come back field by field.
    """
    result = validate_debt(debt_data.model_dump())
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    debt = await debt_repo.insert_debt(db, result.record)

    await log_event(
        db=db,
        action=AuditAction.DEBT_CREATED,
        entity_type="debt",
        entity_id=debt.id,
        metadata={
            "persona_name": debt.persona_name,
            "total_divisa": str(debt.total_divisa),
        }
    )

    return DebtResponse(**_debt_view(debt, []))


@router.get("/summary", response_model=DebtSummaryResponse)
async def get_debt_summary(db: AsyncSession = Depends(get_db)):
    """Total owed, remaining and paid across all debts."""
    return await AnalyticsService.get_debt_summary(db)


@router.get("/{debt_id}", response_model=DebtDetailResponse)
async def get_debt(
    debt_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Debt detail with its payments, newest first."""
    debt = await debt_repo.get_debt(db, debt_id)
    payments = await debt_repo.list_payments_for_debt(db, debt_id)

    return DebtDetailResponse(
        **_debt_view(debt, payments),
        payments=[PaymentResponse.model_validate(p) for p in payments],
    )


@router.get("/{debt_id}/payments", response_model=List[PaymentResponse])
async def list_debt_payments(
    debt_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Payments of one debt, newest first."""
    await debt_repo.get_debt(db, debt_id)
    payments = await debt_repo.list_payments_for_debt(db, debt_id)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post("/{debt_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    debt_id: int,
    payment_data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    rates: ExchangeRateClient = Depends(get_exchange_rate_client),
):
    """
    Record a payment against a debt.

    For a bolívares payment without tasa_cambio, the current published rate
    for tipo_tasa is used. If none is available the payment is rejected
    and a custom rate must be supplied.
    """
    debt = await debt_repo.get_debt(db, debt_id)

    record = payment_data.model_dump()
    record["deuda_id"] = debt.id

    if (
        payment_data.payment_type == PaymentType.BOLIVARES
        and payment_data.tasa_cambio is None
        and payment_data.tipo_tasa not in (None, RateType.CUSTOM)
    ):
        record["tasa_cambio"] = await rates.resolve_rate(payment_data.tipo_tasa)

    result = validate_debt_payment(record)
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    payment = await debt_repo.insert_payment(db, debt, result.record)

    await log_event(
        db=db,
        action=AuditAction.PAYMENT_RECORDED,
        entity_type="debt_payment",
        entity_id=payment.id,
        metadata={
            "deuda_id": debt.id,
            "payment_type": payment_data.payment_type.value,
            "pago_divisa": None if payment.pago_divisa is None else str(payment.pago_divisa),
            "pago_bolivares": None if payment.pago_bolivares is None else str(payment.pago_bolivares),
            "tasa_cambio": None if payment.tasa_cambio is None else str(payment.tasa_cambio),
        }
    )

    return PaymentResponse.model_validate(payment)
