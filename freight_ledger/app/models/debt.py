"""
Personal debt database models.

A Debt is owed to a named creditor; DebtPayment rows settle it.
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, Date, Enum
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base
from freight_ledger.app.models.enums import Currency, RateType


class Debt(Base):
    """
    Debt model.

    There is no status column: a debt is closed when its remaining balance,
    recomputed from its payments on every read, reaches zero.
    """
    __tablename__ = "deudas_personales"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Creditor
    persona_name = Column(String(150), nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Financials (in origin currency)
    original_currency = Column(Enum(Currency), default=Currency.USD, nullable=False)
    total_divisa = Column(Numeric(14, 2), nullable=False)
    tasa_cambio = Column(Numeric(18, 6), nullable=True)  # Fixed rate agreed at creation, if any

    due_date = Column(Date, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Debt(id={self.id}, persona='{self.persona_name}', total={self.total_divisa})>"


class DebtPayment(Base):
    """
    Debt payment model.

    Immutable settlement event against exactly one debt. Exactly one of
    pago_divisa / pago_bolivares is set; a bolívares payment always carries
    the rate used to convert it back to the debt's currency.
    """
    __tablename__ = "pagos_deuda"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    deuda_id = Column(Integer, ForeignKey('deudas_personales.id'), nullable=False, index=True)
    description = Column(Text, nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=False)

    # Copied from the debt when the payment is recorded
    original_currency = Column(Enum(Currency), nullable=False)

    # Amounts
    pago_divisa = Column(Numeric(14, 2), nullable=True)
    pago_bolivares = Column(Numeric(14, 2), nullable=True)
    tasa_cambio = Column(Numeric(18, 6), nullable=True)
    tipo_tasa = Column(Enum(RateType), nullable=True)

    # Timestamps (no updates expected)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<DebtPayment(id={self.id}, deuda_id={self.deuda_id}, divisa={self.pago_divisa}, bs={self.pago_bolivares})>"
