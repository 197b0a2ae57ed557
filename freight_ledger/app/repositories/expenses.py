"""
Expense persistence.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import ResourceNotFoundError
from freight_ledger.app.models.enums import Currency, RateType
from freight_ledger.app.models.expense import Expense

logger = logging.getLogger(__name__)

EXPENSE_FIELDS = (
    "flete_id", "category", "description", "expense_date", "original_currency",
    "pago_divisa", "pago_bolivares", "tasa_cambio", "tipo_tasa",
)


def _filters(
    categories: Optional[Sequence[str]] = None,
    currencies: Optional[Sequence[Currency]] = None,
    rate_types: Optional[Sequence[RateType]] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    flete_id: Optional[int] = None,
) -> list:
    conditions = []
    if categories:
        conditions.append(Expense.category.in_(list(categories)))
    if currencies:
        conditions.append(Expense.original_currency.in_(list(currencies)))
    if rate_types:
        conditions.append(Expense.tipo_tasa.in_(list(rate_types)))
    if date_from:
        conditions.append(Expense.expense_date >= date_from)
    if date_to:
        conditions.append(Expense.expense_date <= date_to)
    if flete_id is not None:
        conditions.append(Expense.flete_id == flete_id)
    return conditions


async def get_expense(db: AsyncSession, expense_id: int) -> Expense:
    """
    Fetch one expense.

    Raises:
        ResourceNotFoundError: If no expense has this id
    """
    result = await db.execute(select(Expense).where(Expense.id == expense_id))
    expense = result.scalar_one_or_none()
    if expense is None:
        raise ResourceNotFoundError("Expense", expense_id)
    return expense


async def list_expenses(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10,
    **filters,
) -> Tuple[List[Expense], int]:
    """
    Filtered, paginated expenses, most recent expense_date first.

    Accepts the keyword filters categories, currencies, rate_types,
    date_from, date_to and flete_id.

    Returns:
        (expenses on the page, total matching)
    """
    conditions = _filters(**filters)
    query = select(Expense)
    count_query = select(func.count(Expense.id))
    for condition in conditions:
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(desc(Expense.expense_date), desc(Expense.id)).offset(offset).limit(page_size)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def list_all_expenses(db: AsyncSession, **filters) -> List[Expense]:
    """Every expense matching filters, oldest first."""
    query = select(Expense)
    for condition in _filters(**filters):
        query = query.where(condition)
    result = await db.execute(query.order_by(Expense.expense_date, Expense.id))
    return list(result.scalars().all())


async def create_expense(db: AsyncSession, values: Dict[str, Any]) -> Expense:
    """Persist a validated expense."""
    expense = Expense(**{k: values.get(k) for k in EXPENSE_FIELDS})
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    logger.info("Expense %s created (%s, %s)", expense.id, expense.category, expense.original_currency.value)
    return expense


async def update_expense(db: AsyncSession, expense: Expense, values: Dict[str, Any]) -> Expense:
    """Overwrite expense with a validated, merged record."""
    for field in EXPENSE_FIELDS:
        if field in values:
            setattr(expense, field, values[field])
    await db.commit()
    await db.refresh(expense)
    return expense


async def delete_expense(db: AsyncSession, expense: Expense) -> None:
    expense_id = expense.id
    await db.delete(expense)
    await db.commit()
    logger.info("Expense %s deleted", expense_id)
