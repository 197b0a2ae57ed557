"""
Shipment (flete) API Endpoints.

Freight jobs, their invoices, and the payment status engine that guards
status changes.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.exceptions import LedgerValidationError
from freight_ledger.app.db.session import get_db
from freight_ledger.app.domain.fleet.status_engine import apply_status_transition, validate_shipment
from freight_ledger.app.models.enums import ShipmentStatus
from freight_ledger.app.models.shipment import Shipment, Invoice
from freight_ledger.app.repositories import fleet as fleet_repo
from freight_ledger.app.repositories import shipments as shipment_repo
from freight_ledger.app.schemas.shipment import (
    InvoiceCreate, InvoiceUpdate, InvoiceResponse,
    ShipmentCreate, ShipmentUpdate, ShipmentStatusUpdate,
    ShipmentResponse, ShipmentListResponse,
)
from freight_ledger.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/shipments", tags=["Shipments"])
invoice_router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _to_response(shipment: Shipment, invoices: List[Invoice]) -> ShipmentResponse:
    response = ShipmentResponse.model_validate(shipment)
    response.facturas = [InvoiceResponse.model_validate(i) for i in invoices]
    return response


async def _check_references(db: AsyncSession, driver_id: Optional[int], cliente_id: Optional[int]) -> None:
    if driver_id is not None:
        await fleet_repo.get_driver(db, driver_id)
    if cliente_id is not None:
        await fleet_repo.get_client(db, cliente_id)


@router.get("", response_model=ShipmentListResponse)
async def list_shipments(
    fo_number: Optional[str] = Query(None, description="Substring of the FO number"),
    status_filter: Optional[List[ShipmentStatus]] = Query(None, alias="status"),
    destination: Optional[str] = Query(None),
    created_at_from: Optional[date] = Query(None),
    created_at_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    """List shipments, newest first. status may be repeated."""
    shipments, total = await shipment_repo.list_shipments(
        db,
        fo_number=fo_number,
        statuses=status_filter,
        destination=destination,
        created_at_from=created_at_from,
        created_at_to=created_at_to,
        page=page,
        page_size=page_size,
    )
    invoices = await shipment_repo.invoices_by_shipment(db, [s.id for s in shipments])

    return ShipmentListResponse(
        shipments=[_to_response(s, invoices[s.id]) for s in shipments],
        total=total,
        page=page,
        page_size=page_size
    )


@router.post("", response_model=ShipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_shipment(
    shipment_data: ShipmentCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a shipment with its invoices.

    Creating directly as Pagado requires the origin payment fields.
    """
    await _check_references(db, shipment_data.driver_id, shipment_data.cliente_id)

    result = validate_shipment(shipment_data.model_dump(exclude={"facturas"}))
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    invoices = [i.model_dump() for i in shipment_data.facturas or []]
    shipment = await shipment_repo.create_shipment(db, result.record, invoices)

    await log_event(
        db=db,
        action=AuditAction.SHIPMENT_CREATED,
        entity_type="shipment",
        entity_id=shipment.id,
        metadata={
            "fo_number": shipment.fo_number,
            "status": shipment.status.value,
            "invoices": len(invoices),
        }
    )

    return _to_response(shipment, await shipment_repo.list_invoices(db, shipment.id))


@router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(
    shipment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get one shipment with its invoices."""
    shipment = await shipment_repo.get_shipment(db, shipment_id)
    return _to_response(shipment, await shipment_repo.list_invoices(db, shipment_id))


@router.patch("/{shipment_id}", response_model=ShipmentResponse)
async def update_shipment(
    shipment_id: int,
    shipment_data: ShipmentUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a shipment.

    The merged record is validated as a whole. Sending facturas replaces
    every invoice of the shipment.
    """
    shipment = await shipment_repo.get_shipment(db, shipment_id)

    changes = shipment_data.model_dump(exclude_unset=True, exclude={"facturas"})
    await _check_references(db, changes.get("driver_id"), changes.get("cliente_id"))

    merged = {**shipment_repo.shipment_values(shipment), **changes}
    result = validate_shipment(merged)
    if not result.is_valid:
        raise LedgerValidationError(result.as_dicts())

    invoices = None
    if shipment_data.facturas is not None:
        invoices = [i.model_dump() for i in shipment_data.facturas]

    shipment = await shipment_repo.update_shipment(db, shipment, result.record, invoices)

    await log_event(
        db=db,
        action=AuditAction.SHIPMENT_UPDATED,
        entity_type="shipment",
        entity_id=shipment.id,
        metadata={
            "fields": sorted(changes.keys()),
            "invoices_replaced": invoices is not None,
        }
    )

    return _to_response(shipment, await shipment_repo.list_invoices(db, shipment.id))


@router.post("/{shipment_id}/status", response_model=ShipmentResponse)
async def change_shipment_status(
    shipment_id: int,
    status_data: ShipmentStatusUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Move a shipment to another status.

    Any status may follow any other. Pagado is refused unless the origin
    payment (date, amount, and rate for VES) is complete, either already
    stored or sent with this request. En Transito resets the driver and
    helper payments.
    """
    shipment = await shipment_repo.get_shipment(db, shipment_id)
    previous = shipment.status

    payment_fields = status_data.model_dump(exclude_unset=True, exclude={"status"})
    current = {**shipment_repo.shipment_values(shipment), **payment_fields}

    result = apply_status_transition(current, status_data.status)
    if not result.accepted:
        raise LedgerValidationError([e.model_dump() for e in result.errors])

    shipment = await shipment_repo.update_shipment(db, shipment, result.shipment)

    await log_event(
        db=db,
        action=AuditAction.SHIPMENT_STATUS_CHANGED,
        entity_type="shipment",
        entity_id=shipment.id,
        metadata={
            "from": previous.value,
            "to": shipment.status.value,
        }
    )

    return _to_response(shipment, await shipment_repo.list_invoices(db, shipment.id))


@router.delete("/{shipment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shipment(
    shipment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete a shipment and its invoices. Its expenses are kept, unlinked."""
    shipment = await shipment_repo.get_shipment(db, shipment_id)
    fo_number = shipment.fo_number

    await shipment_repo.delete_shipment(db, shipment)

    await log_event(
        db=db,
        action=AuditAction.SHIPMENT_DELETED,
        entity_type="shipment",
        entity_id=shipment_id,
        metadata={"fo_number": fo_number}
    )


@router.get("/{shipment_id}/invoices", response_model=List[InvoiceResponse])
async def list_shipment_invoices(
    shipment_id: int,
    db: AsyncSession = Depends(get_db)
):
    await shipment_repo.get_shipment(db, shipment_id)
    invoices = await shipment_repo.list_invoices(db, shipment_id)
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.post("/{shipment_id}/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def add_shipment_invoice(
    shipment_id: int,
    invoice_data: InvoiceCreate,
    db: AsyncSession = Depends(get_db)
):
    """Attach one more invoice to a shipment."""
    await shipment_repo.get_shipment(db, shipment_id)
    invoice = await shipment_repo.create_invoice(db, shipment_id, invoice_data.model_dump())

    await log_event(
        db=db,
        action=AuditAction.INVOICE_CREATED,
        entity_type="invoice",
        entity_id=invoice.id,
        metadata={"flete_id": shipment_id, "invoice_number": invoice.invoice_number}
    )

    return InvoiceResponse.model_validate(invoice)


@invoice_router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    invoice_data: InvoiceUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Edit a single invoice. Only provided fields change."""
    invoice = await shipment_repo.get_invoice(db, invoice_id)
    changes = invoice_data.model_dump(exclude_unset=True)
    invoice = await shipment_repo.update_invoice(db, invoice, changes)

    await log_event(
        db=db,
        action=AuditAction.INVOICE_UPDATED,
        entity_type="invoice",
        entity_id=invoice.id,
        metadata={"flete_id": invoice.flete_id, "fields": sorted(changes.keys())}
    )

    return InvoiceResponse.model_validate(invoice)


@invoice_router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db)
):
    invoice = await shipment_repo.get_invoice(db, invoice_id)
    flete_id = invoice.flete_id

    await shipment_repo.delete_invoice(db, invoice)

    await log_event(
        db=db,
        action=AuditAction.INVOICE_DELETED,
        entity_type="invoice",
        entity_id=invoice_id,
        metadata={"flete_id": flete_id}
    )
