"""
Expense (gasto) API Endpoints.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.exceptions import LedgerValidationError
from freight_ledger.app.db.session import get_db
from freight_ledger.app.domain.ledger.validation import validate_expense
from freight_ledger.app.models.enums import Currency, RateType
from freight_ledger.app.repositories import expenses as expense_repo
from freight_ledger.app.repositories import shipments as shipment_repo
from freight_ledger.app.repositories.expenses import EXPENSE_FIELDS
from freight_ledger.app.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse,
    ExpenseListResponse, ExpenseSummaryResponse,
)
from freight_ledger.app.services.analytics import AnalyticsService
from freight_ledger.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/expenses", tags=["Expenses"])
shipment_router = APIRouter(prefix="/shipments", tags=["Expenses"])


def _audit_amounts(expense) -> dict:
    return {
        "category": expense.category,
        "currency": expense.original_currency.value,
        "pago_divisa": None if expense.pago_divisa is None else str(expense.pago_divisa),
        "pago_bolivares": None if expense.pago_bolivares is None else str(expense.pago_bolivares),
    }


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    category: Optional[List[str]] = Query(None),
    currency: Optional[List[Currency]] = Query(None),
    tipo_tasa: Optional[List[RateType]] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    """List expenses, most recent first. category, currency and tipo_tasa may be repeated."""
    expenses, total = await expense_repo.list_expenses(
        db,
        page=page,
        page_size=page_size,
        categories=category,
        currencies=currency,
        rate_types=tipo_tasa,
        date_from=date_from,
        date_to=date_to,
    )
    return ExpenseListResponse(
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
        total=total,
        page=page,
        page_size=page_size
    )


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Record an expense.

    The amount in the other currency is derived from tasa_cambio when one
    is given.
    """
    if expense_data.flete_id is not None:
        await shipment_repo.get_shipment(db, expense_data.flete_id)

    result = validate_expense(expense_data.model_dump())
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    expense = await expense_repo.create_expense(db, result.record)

    await log_event(
        db=db,
        action=AuditAction.EXPENSE_CREATED,
        entity_type="expense",
        entity_id=expense.id,
        metadata=_audit_amounts(expense)
    )

    return ExpenseResponse.model_validate(expense)


@router.get("/summary", response_model=ExpenseSummaryResponse)
async def get_expense_summary(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Expense totals by category and by month."""
    return await AnalyticsService.get_expense_summary(db, date_from=date_from, date_to=date_to)


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db)
):
    expense = await expense_repo.get_expense(db, expense_id)
    return ExpenseResponse.model_validate(expense)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update an expense.

    Provided fields are merged into the stored record and the result is
    validated again, so derived amounts stay consistent.
    """
    expense = await expense_repo.get_expense(db, expense_id)

    changes = expense_data.model_dump(exclude_unset=True)
    if changes.get("flete_id") is not None:
        await shipment_repo.get_shipment(db, changes["flete_id"])

    merged = {field: getattr(expense, field) for field in EXPENSE_FIELDS}
    merged.update(changes)

    # On a USD expense bolívares are derived from the rate and go with it
    if (
        merged.get("original_currency") == Currency.USD
        and merged.get("tasa_cambio") is None
        and "pago_bolivares" not in changes
    ):
        merged["pago_bolivares"] = None

    result = validate_expense(merged)
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    expense = await expense_repo.update_expense(db, expense, result.record)

    await log_event(
        db=db,
        action=AuditAction.EXPENSE_UPDATED,
        entity_type="expense",
        entity_id=expense.id,
        metadata={**_audit_amounts(expense), "fields": sorted(changes.keys())}
    )

    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db)
):
    expense = await expense_repo.get_expense(db, expense_id)
    metadata = _audit_amounts(expense)

    await expense_repo.delete_expense(db, expense)

    await log_event(
        db=db,
        action=AuditAction.EXPENSE_DELETED,
        entity_type="expense",
        entity_id=expense_id,
        metadata=metadata
    )


@shipment_router.get("/{shipment_id}/expenses", response_model=List[ExpenseResponse])
async def list_shipment_expenses(
    shipment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Every expense attached to one shipment, oldest first."""
    await shipment_repo.get_shipment(db, shipment_id)
    expenses = await expense_repo.list_all_expenses(db, flete_id=shipment_id)
    return [ExpenseResponse.model_validate(e) for e in expenses]
