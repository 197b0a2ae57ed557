"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from freight_ledger.app.api.v1.endpoints import debts, shipments, expenses, fleet, exchange_rates, audit

router = APIRouter()

# Debt ledger
router.include_router(debts.router)

# Shipments and invoices
router.include_router(shipments.router)
router.include_router(shipments.invoice_router)

# Expenses
router.include_router(expenses.router)
router.include_router(expenses.shipment_router)

# Reference data
router.include_router(fleet.vehicle_router)
router.include_router(fleet.driver_router)
router.include_router(fleet.client_router)

# Exchange rates
router.include_router(exchange_rates.router)

# Audit trail
router.include_router(audit.router)
