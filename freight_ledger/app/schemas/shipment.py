"""
Shipment (flete) and invoice Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from freight_ledger.app.models.enums import Currency, ShipmentStatus


MSG_NOT_NULL = "No puede ser nulo"


def reject_null(value):
    """Explicit null on a required column is refused; omit the field to keep it."""
    if value is None:
        raise ValueError(MSG_NOT_NULL)
    return value


class InvoiceCreate(BaseModel):
    """Schema for an invoice attached to a shipment."""
    invoice_number: str = Field(..., min_length=1, max_length=100)
    client_name: str = Field(..., min_length=1, max_length=255)
    load_date: date
    delivery_date: Optional[date] = None
    state_dest: Optional[str] = Field(None, max_length=100)
    city_dest: Optional[str] = Field(None, max_length=100)
    weight_kg: Optional[float] = Field(None, ge=0)
    observation: Optional[str] = None
    driver_id: Optional[int] = None


class InvoiceUpdate(BaseModel):
    """Schema for editing a single invoice."""
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=100)
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    load_date: Optional[date] = None
    delivery_date: Optional[date] = None
    state_dest: Optional[str] = Field(None, max_length=100)
    city_dest: Optional[str] = Field(None, max_length=100)
    weight_kg: Optional[float] = Field(None, ge=0)
    observation: Optional[str] = None
    driver_id: Optional[int] = None

    @field_validator("invoice_number", "client_name", "load_date")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class InvoiceResponse(BaseModel):
    """Schema for invoice response."""
    id: int
    flete_id: int
    invoice_number: str
    client_name: str
    load_date: date
    delivery_date: Optional[date]
    state_dest: Optional[str]
    city_dest: Optional[str]
    weight_kg: Optional[float]
    observation: Optional[str]
    driver_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class _ShipmentPayments(BaseModel):
    """Payment fields shared by create and update payloads."""
    costo_aproximado: Optional[Decimal] = None

    # Origin payment (required together when status is Pagado)
    pago_fecha: Optional[date] = None
    monto_pagado_origen: Optional[Decimal] = None
    tasa_cambio: Optional[Decimal] = None

    # Driver payment
    monto_pago_chofer: Optional[Decimal] = None
    fecha_pago_chofer: Optional[date] = None
    pago_tasa_cambio_chofer: Optional[Decimal] = None

    # Helper payment
    monto_pago_ayudante: Optional[Decimal] = None
    fecha_pago_ayudante: Optional[date] = None
    pago_tasa_cambio_ayudante: Optional[Decimal] = None


class ShipmentCreate(_ShipmentPayments):
    """Schema for creating a shipment, optionally with its invoices."""
    fo_number: str = Field(..., min_length=1, max_length=100)
    driver_id: Optional[int] = None
    cliente_id: Optional[int] = None
    status: ShipmentStatus = ShipmentStatus.EN_TRANSITO
    destination: str = Field(..., min_length=1, max_length=255)
    moneda_origen: Currency = Currency.USD
    pagado_chofer: bool = False
    pago_moneda_chofer: Currency = Currency.USD
    pagado_ayudante: bool = False
    pago_moneda_ayudante: Currency = Currency.USD
    facturas: Optional[List[InvoiceCreate]] = None


class ShipmentUpdate(_ShipmentPayments):
    """
    Schema for updating a shipment.

    Only provided fields change. When facturas is provided the shipment's
    invoices are replaced by it. Status changes go through the status endpoint.
    """
    fo_number: Optional[str] = Field(None, min_length=1, max_length=100)
    driver_id: Optional[int] = None
    cliente_id: Optional[int] = None
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    moneda_origen: Optional[Currency] = None
    pagado_chofer: Optional[bool] = None
    pago_moneda_chofer: Optional[Currency] = None
    pagado_ayudante: Optional[bool] = None
    pago_moneda_ayudante: Optional[Currency] = None
    facturas: Optional[List[InvoiceCreate]] = None

    @field_validator(
        "fo_number", "destination", "moneda_origen",
        "pagado_chofer", "pago_moneda_chofer",
        "pagado_ayudante", "pago_moneda_ayudante",
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ShipmentStatusUpdate(BaseModel):
    """Status change, with the origin payment fields required to reach Pagado."""
    status: ShipmentStatus
    pago_fecha: Optional[date] = None
    monto_pagado_origen: Optional[Decimal] = None
    moneda_origen: Optional[Currency] = None
    tasa_cambio: Optional[Decimal] = None

    @field_validator("moneda_origen")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ShipmentResponse(BaseModel):
    """Schema for shipment response."""
    id: int
    fo_number: str
    driver_id: Optional[int]
    cliente_id: Optional[int]
    status: ShipmentStatus
    destination: str
    costo_aproximado: Optional[float]
    pago_fecha: Optional[date]
    monto_pagado_origen: Optional[float]
    moneda_origen: Currency
    tasa_cambio: Optional[float]
    monto_pagado_usd: Optional[float]
    monto_pagado_ves: Optional[float]
    monto_pago_chofer: Optional[float]
    pagado_chofer: bool
    fecha_pago_chofer: Optional[date]
    pago_moneda_chofer: Currency
    pago_tasa_cambio_chofer: Optional[float]
    monto_pago_ayudante: Optional[float]
    pagado_ayudante: bool
    fecha_pago_ayudante: Optional[date]
    pago_moneda_ayudante: Currency
    pago_tasa_cambio_ayudante: Optional[float]
    created_at: datetime
    updated_at: datetime
    facturas: List[InvoiceResponse] = []

    class Config:
        from_attributes = True


class ShipmentListResponse(BaseModel):
    """Schema for paginated shipment list."""
    shipments: List[ShipmentResponse]
    total: int
    page: int
    page_size: int
