"""
Debt and debt payment Pydantic schemas.

Request models only check types; the money rules live in
freight_ledger.app.domain.ledger.validation so that every violation is
reported with its field.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from freight_ledger.app.models.enums import Currency, DebtPaymentStatus, PaymentType, RateType


class DebtCreate(BaseModel):
    """Schema for registering a debt."""
    persona_name: str = Field(..., max_length=150, description="Creditor name")
    description: str
    original_currency: Currency = Currency.USD
    total_divisa: Decimal = Field(..., description="Total owed, in original_currency")
    tasa_cambio: Optional[Decimal] = Field(None, description="Fixed exchange rate agreed for the debt")
    due_date: Optional[date] = None


class DebtResponse(BaseModel):
    """Debt with its derived balance fields."""
    id: int
    persona_name: str
    description: str
    original_currency: Currency
    total_divisa: float
    tasa_cambio: Optional[float]
    due_date: Optional[date]
    remaining_balance: float
    total_paid: float
    overpayment: float
    payment_status: DebtPaymentStatus
    created_at: datetime
    updated_at: datetime


class PaymentCreate(BaseModel):
    """
    Schema for recording a payment against a debt.

    payment_type selects which amount is authoritative. For bolívares a
    rate type is required; when tasa_cambio is omitted and the rate type is
    not custom, the current published rate is used.
    """
    description: Optional[str] = None
    payment_date: datetime = Field(default_factory=datetime.utcnow)
    payment_type: PaymentType
    pago_divisa: Optional[Decimal] = None
    pago_bolivares: Optional[Decimal] = None
    tasa_cambio: Optional[Decimal] = None
    tipo_tasa: Optional[RateType] = None


class PaymentResponse(BaseModel):
    """Schema for displaying a debt payment."""
    id: int
    deuda_id: int
    description: Optional[str]
    payment_date: datetime
    original_currency: Currency
    pago_divisa: Optional[float]
    pago_bolivares: Optional[float]
    tasa_cambio: Optional[float]
    tipo_tasa: Optional[RateType]
    created_at: datetime

    class Config:
        from_attributes = True


class DebtDetailResponse(DebtResponse):
    """Debt plus its payments, newest first."""
    payments: List[PaymentResponse]


class DebtListResponse(BaseModel):
    """Schema for the debt list."""
    debts: List[DebtResponse]
    total: int


class DebtSummaryResponse(BaseModel):
    """Dashboard totals across all debts."""
    total_debt: float
    total_remaining: float
    total_paid: float
    open_debts: int
