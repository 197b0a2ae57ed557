"""
Expense (gasto) database model.
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, Date, Enum
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base
from freight_ledger.app.models.enums import Currency, RateType


class Expense(Base):
    """
    Expense model.

    Cost line, optionally attached to a shipment. original_currency decides
    which amount is authoritative; the other one is derived from tasa_cambio.
    """
    __tablename__ = "gastos"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    flete_id = Column(Integer, ForeignKey('fletes.id', ondelete="SET NULL"), nullable=True, index=True)

    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    expense_date = Column(Date, nullable=False, index=True)

    original_currency = Column(Enum(Currency), nullable=False)
    pago_divisa = Column(Numeric(14, 2), nullable=True)
    pago_bolivares = Column(Numeric(14, 2), nullable=True)
    tasa_cambio = Column(Numeric(18, 6), nullable=True)
    tipo_tasa = Column(Enum(RateType), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Expense(id={self.id}, category='{self.category}', currency='{self.original_currency.value}')>"
