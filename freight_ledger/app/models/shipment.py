"""
Shipment (flete) and invoice (factura) database models.
"""

from sqlalchemy import Column, Integer, String, Text, Float, Numeric, Boolean, ForeignKey, DateTime, Date, Enum
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base
from freight_ledger.app.models.enums import Currency, ShipmentStatus


class Shipment(Base):
    """
    Shipment model.

    Besides the freight job itself it carries three payment groups:
    the origin payment (settled when status is Pagado) and two personnel
    sub-ledgers, one for the driver (chofer) and one for the helper (ayudante).
    """
    __tablename__ = "fletes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    fo_number = Column(String(100), nullable=False, index=True)

    # Relations
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)
    cliente_id = Column(Integer, ForeignKey('clientes.id'), nullable=True, index=True)

    # Status and destination
    status = Column(Enum(ShipmentStatus), default=ShipmentStatus.EN_TRANSITO, nullable=False, index=True)
    destination = Column(String(255), nullable=False)

    # Origin cost / payment
    costo_aproximado = Column(Numeric(14, 2), nullable=True)
    pago_fecha = Column(Date, nullable=True)
    monto_pagado_origen = Column(Numeric(14, 2), nullable=True)
    moneda_origen = Column(Enum(Currency), default=Currency.USD, nullable=False)
    tasa_cambio = Column(Numeric(18, 6), nullable=True)
    monto_pagado_usd = Column(Numeric(14, 2), nullable=True)  # Derived
    monto_pagado_ves = Column(Numeric(14, 2), nullable=True)  # Derived

    # Driver payment
    monto_pago_chofer = Column(Numeric(14, 2), nullable=True)
    pagado_chofer = Column(Boolean, default=False, nullable=False)
    fecha_pago_chofer = Column(Date, nullable=True)
    pago_moneda_chofer = Column(Enum(Currency), default=Currency.USD, nullable=False)
    pago_tasa_cambio_chofer = Column(Numeric(18, 6), nullable=True)

    # Helper payment
    monto_pago_ayudante = Column(Numeric(14, 2), nullable=True)
    pagado_ayudante = Column(Boolean, default=False, nullable=False)
    fecha_pago_ayudante = Column(Date, nullable=True)
    pago_moneda_ayudante = Column(Enum(Currency), default=Currency.USD, nullable=False)
    pago_tasa_cambio_ayudante = Column(Numeric(18, 6), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Shipment(id={self.id}, fo='{self.fo_number}', status='{self.status.value}')>"


class Invoice(Base):
    """Invoice attached to a shipment. Replaced wholesale when the shipment is edited."""
    __tablename__ = "facturas"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    flete_id = Column(Integer, ForeignKey('fletes.id', ondelete="CASCADE"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True)

    invoice_number = Column(String(100), nullable=False)
    client_name = Column(String(255), nullable=False)
    load_date = Column(Date, nullable=False)
    delivery_date = Column(Date, nullable=True)
    state_dest = Column(String(100), nullable=True)
    city_dest = Column(String(100), nullable=True)
    weight_kg = Column(Float, nullable=True)
    observation = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Invoice(id={self.id}, number='{self.invoice_number}', flete_id={self.flete_id})>"
