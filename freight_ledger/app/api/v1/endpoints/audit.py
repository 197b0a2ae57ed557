"""
Audit Trail API Endpoints.

Read-only view over the events written by every mutation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.db.session import get_db
from freight_ledger.app.schemas.audit import AuditLogResponse, AuditTrailResponse
from freight_ledger.app.services.audit import get_audit_trail

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=AuditTrailResponse)
async def get_audit_logs(
    entity_type: Optional[str] = Query(None, description="Filter by record type (debt, shipment, ...)"),
    entity_id: Optional[int] = Query(None, description="Filter by record ID"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail with optional filtering, most recent first.

    Combine entity_type and entity_id for the history of one record.
    """
    logs = await get_audit_trail(
        db=db,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
