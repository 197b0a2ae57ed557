"""
Ledger and shipment enumerations.

Shared by the database models, the Pydantic schemas and the pure
reconciliation code in freight_ledger.app.domain.
"""

import enum


class Currency(str, enum.Enum):
    """Currency codes accepted anywhere money is stored."""
    USD = "USD"  # Divisa
    VES = "VES"  # Bolívares


class RateType(str, enum.Enum):
    """
    Exchange rate source used for a conversion.

    CUSTOM marks a manually entered rate; it is never replaced by a fetched one.
    """
    BCV = "bcv"
    PARALELO = "paralelo"
    PROMEDIO = "promedio"
    CUSTOM = "custom"


class PaymentType(str, enum.Enum):
    """Which amount field a debt payment was recorded in."""
    DIVISA = "divisa"
    BOLIVARES = "bolivares"


class ShipmentStatus(str, enum.Enum):
    """Shipment (flete) status. Transitions between them are free-form."""
    EN_TRANSITO = "En Transito"
    DESPACHADO = "Despachado"
    RELACIONADO = "Relacionado"
    FACTURADO = "Facturado"
    PAGADO = "Pagado"


class DebtPaymentStatus(str, enum.Enum):
    """Computed settlement state of a debt. Never stored."""
    PAGADO = "Pagado"
    PARCIAL = "Parcial"
    PENDIENTE = "Pendiente"
