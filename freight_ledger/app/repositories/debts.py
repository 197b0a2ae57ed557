"""
Debt persistence.

Every function receives the caller's AsyncSession; nothing here opens
its own connection.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import ResourceNotFoundError
from freight_ledger.app.models.debt import Debt, DebtPayment

logger = logging.getLogger(__name__)


async def get_debt(db: AsyncSession, debt_id: int) -> Debt:
    """
    Fetch one debt.

    Raises:
        ResourceNotFoundError: If no debt has this id
    """
    result = await db.execute(select(Debt).where(Debt.id == debt_id))
    debt = result.scalar_one_or_none()
    if debt is None:
        raise ResourceNotFoundError("Debt", debt_id)
    return debt


async def list_debts(db: AsyncSession) -> List[Debt]:
    """All debts, newest first."""
    result = await db.execute(select(Debt).order_by(desc(Debt.created_at), desc(Debt.id)))
    return list(result.scalars().all())


async def list_payments_for_debt(db: AsyncSession, debt_id: int) -> List[DebtPayment]:
    """Payments of one debt, newest payment_date first."""
    result = await db.execute(
        select(DebtPayment)
        .where(DebtPayment.deuda_id == debt_id)
        .order_by(desc(DebtPayment.payment_date), desc(DebtPayment.id))
    )
    return list(result.scalars().all())


async def list_payments(db: AsyncSession) -> List[DebtPayment]:
    """Every payment of every debt."""
    result = await db.execute(select(DebtPayment))
    return list(result.scalars().all())


async def insert_debt(db: AsyncSession, values: Dict[str, Any]) -> Debt:
    """Persist a validated debt."""
    debt = Debt(
        persona_name=values["persona_name"].strip(),
        description=values["description"].strip(),
        original_currency=values["original_currency"],
        total_divisa=values["total_divisa"],
        tasa_cambio=values.get("tasa_cambio"),
        due_date=values.get("due_date"),
    )
    db.add(debt)
    await db.commit()
    await db.refresh(debt)
    logger.info("Debt %s created for %s", debt.id, debt.persona_name)
    return debt


async def insert_payment(db: AsyncSession, debt: Debt, values: Dict[str, Any]) -> DebtPayment:
    """
    Persist a validated payment against debt.

    The payment inherits the debt's original currency.
    """
    payment = DebtPayment(
        deuda_id=debt.id,
        description=values.get("description"),
        payment_date=values["payment_date"],
        original_currency=debt.original_currency,
        pago_divisa=values.get("pago_divisa"),
        pago_bolivares=values.get("pago_bolivares"),
        tasa_cambio=values.get("tasa_cambio"),
        tipo_tasa=values.get("tipo_tasa"),
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    logger.info("Payment %s recorded against debt %s", payment.id, debt.id)
    return payment
