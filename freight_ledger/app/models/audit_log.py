"""
Audit Log Database Model.

Tracks every mutation of ledger and fleet records.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking record changes.

    Events logged:
    - DEBT_CREATED / PAYMENT_RECORDED
    - SHIPMENT_CREATED / SHIPMENT_UPDATED / SHIPMENT_STATUS_CHANGED / SHIPMENT_DELETED
    - INVOICE_CREATED / INVOICE_UPDATED / INVOICE_DELETED
    - EXPENSE_CREATED / EXPENSE_UPDATED / EXPENSE_DELETED
    - VEHICLE_CREATED / VEHICLE_UPDATED / VEHICLE_DELETED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Which record it touched
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity={self.entity_type}:{self.entity_id})>"
