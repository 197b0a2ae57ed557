"""
Expense (gasto) Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from freight_ledger.app.models.enums import Currency, RateType
from freight_ledger.app.schemas.shipment import reject_null


EXPENSE_CATEGORIES = (
    "Combustible",
    "Peajes",
    "Viáticos",
    "Mantenimiento",
    "Reparaciones",
    "Hospedaje",
    "Alimentación",
    "Otros",
)


class ExpenseCreate(BaseModel):
    """Schema for recording an expense."""
    flete_id: Optional[int] = None
    category: str = Field(..., min_length=1, max_length=100, description="Categoría requerida")
    description: Optional[str] = None
    expense_date: date
    original_currency: Currency
    pago_divisa: Optional[Decimal] = None
    pago_bolivares: Optional[Decimal] = None
    tasa_cambio: Optional[Decimal] = None
    tipo_tasa: Optional[RateType] = None


class ExpenseUpdate(BaseModel):
    """
    Schema for editing an expense.

    The merged record is validated again, so switching currency requires
    sending the matching amount.
    """
    flete_id: Optional[int] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    expense_date: Optional[date] = None
    original_currency: Optional[Currency] = None
    pago_divisa: Optional[Decimal] = None
    pago_bolivares: Optional[Decimal] = None
    tasa_cambio: Optional[Decimal] = None
    tipo_tasa: Optional[RateType] = None

    @field_validator("category", "expense_date", "original_currency")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    flete_id: Optional[int]
    category: str
    description: Optional[str]
    expense_date: date
    original_currency: Currency
    pago_divisa: Optional[float]
    pago_bolivares: Optional[float]
    tasa_cambio: Optional[float]
    tipo_tasa: Optional[RateType]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    """Schema for paginated expense list."""
    expenses: List[ExpenseResponse]
    total: int
    page: int
    page_size: int


class ExpenseBucket(BaseModel):
    """Expense totals for one category or month."""
    label: str
    divisa: float
    bolivares: float
    count: int


class ExpenseSummaryResponse(BaseModel):
    """Expense totals grouped by category and by month (YYYY-MM)."""
    by_category: List[ExpenseBucket]
    by_month: List[ExpenseBucket]
    total_divisa: float
    total_bolivares: float
