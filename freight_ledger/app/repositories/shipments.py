"""
Shipment and invoice persistence.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select, func, desc, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from freight_ledger.app.core.exceptions import ResourceNotFoundError
from freight_ledger.app.models.enums import ShipmentStatus
from freight_ledger.app.models.expense import Expense
from freight_ledger.app.models.shipment import Shipment, Invoice

logger = logging.getLogger(__name__)

# Columns a caller may set directly on a shipment
SHIPMENT_FIELDS = tuple(
    column.name for column in Shipment.__table__.columns
    if column.name not in ("id", "created_at", "updated_at")
)


def shipment_values(shipment: Shipment) -> Dict[str, Any]:
    """Current column values of shipment, as a plain record."""
    return {field: getattr(shipment, field) for field in SHIPMENT_FIELDS}


async def get_shipment(db: AsyncSession, shipment_id: int) -> Shipment:
    """
    Fetch one shipment.

    Raises:
        ResourceNotFoundError: If no shipment has this id
    """
    result = await db.execute(select(Shipment).where(Shipment.id == shipment_id))
    shipment = result.scalar_one_or_none()
    if shipment is None:
        raise ResourceNotFoundError("Shipment", shipment_id)
    return shipment


async def list_shipments(
    db: AsyncSession,
    fo_number: Optional[str] = None,
    statuses: Optional[Sequence[ShipmentStatus]] = None,
    destination: Optional[str] = None,
    created_at_from: Optional[date] = None,
    created_at_to: Optional[date] = None,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Shipment], int]:
    """
    Filtered, paginated shipments, newest first.

    created_at_to is inclusive of the whole day.

    Returns:
        (shipments on the page, total matching)
    """
    query = select(Shipment)
    count_query = select(func.count(Shipment.id))

    conditions = []
    if fo_number:
        conditions.append(Shipment.fo_number.ilike(f"%{fo_number}%"))
    if statuses:
        conditions.append(Shipment.status.in_(list(statuses)))
    if destination:
        conditions.append(Shipment.destination.ilike(f"%{destination}%"))
    if created_at_from:
        conditions.append(Shipment.created_at >= datetime.combine(created_at_from, time.min))
    if created_at_to:
        conditions.append(Shipment.created_at < datetime.combine(created_at_to + timedelta(days=1), time.min))

    for condition in conditions:
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    query = query.order_by(desc(Shipment.created_at), desc(Shipment.id)).offset(offset).limit(page_size)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_shipment(
    db: AsyncSession,
    values: Dict[str, Any],
    invoices: Iterable[Dict[str, Any]] = (),
) -> Shipment:
    """Persist a validated shipment together with its invoices."""
    shipment = Shipment(**{k: v for k, v in values.items() if k in SHIPMENT_FIELDS})
    db.add(shipment)
    await db.flush()

    for invoice in invoices:
        db.add(Invoice(flete_id=shipment.id, **invoice))

    await db.commit()
    await db.refresh(shipment)
    logger.info("Shipment %s (%s) created", shipment.id, shipment.fo_number)
    return shipment


async def update_shipment(
    db: AsyncSession,
    shipment: Shipment,
    values: Dict[str, Any],
    invoices: Optional[Iterable[Dict[str, Any]]] = None,
) -> Shipment:
    """
    Apply validated values to shipment.

    When invoices is not None the shipment's invoices are replaced by it.
    """
    for field, value in values.items():
        if field in SHIPMENT_FIELDS:
            setattr(shipment, field, value)

    if invoices is not None:
        await db.execute(delete(Invoice).where(Invoice.flete_id == shipment.id))
        for invoice in invoices:
            db.add(Invoice(flete_id=shipment.id, **invoice))

    await db.commit()
    await db.refresh(shipment)
    return shipment


async def delete_shipment(db: AsyncSession, shipment: Shipment) -> None:
    """Delete shipment and its invoices; its expenses are kept, detached."""
    shipment_id = shipment.id
    await db.execute(delete(Invoice).where(Invoice.flete_id == shipment_id))
    await db.execute(update(Expense).where(Expense.flete_id == shipment_id).values(flete_id=None))
    await db.delete(shipment)
    await db.commit()
    logger.info("Shipment %s deleted", shipment_id)


async def list_invoices(db: AsyncSession, shipment_id: int) -> List[Invoice]:
    """Invoices of one shipment, in load order."""
    result = await db.execute(
        select(Invoice).where(Invoice.flete_id == shipment_id).order_by(Invoice.load_date, Invoice.id)
    )
    return list(result.scalars().all())


async def invoices_by_shipment(db: AsyncSession, shipment_ids: Sequence[int]) -> Dict[int, List[Invoice]]:
    """Invoices for several shipments, grouped by shipment id."""
    grouped: Dict[int, List[Invoice]] = {shipment_id: [] for shipment_id in shipment_ids}
    if not shipment_ids:
        return grouped
    result = await db.execute(
        select(Invoice).where(Invoice.flete_id.in_(list(shipment_ids))).order_by(Invoice.load_date, Invoice.id)
    )
    for invoice in result.scalars().all():
        grouped[invoice.flete_id].append(invoice)
    return grouped


async def get_invoice(db: AsyncSession, invoice_id: int) -> Invoice:
    """
    Fetch one invoice.

    Raises:
        ResourceNotFoundError: If no invoice has this id
    """
    result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
    invoice = result.scalar_one_or_none()
    if invoice is None:
        raise ResourceNotFoundError("Invoice", invoice_id)
    return invoice


async def update_invoice(db: AsyncSession, invoice: Invoice, values: Dict[str, Any]) -> Invoice:
    for field, value in values.items():
        setattr(invoice, field, value)
    await db.commit()
    await db.refresh(invoice)
    return invoice


async def delete_invoice(db: AsyncSession, invoice: Invoice) -> None:
    await db.delete(invoice)
    await db.commit()


async def create_invoice(db: AsyncSession, shipment_id: int, values: Dict[str, Any]) -> Invoice:
    invoice = Invoice(flete_id=shipment_id, **values)
    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)
    return invoice
