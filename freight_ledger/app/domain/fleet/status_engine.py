"""
Fleet Payment Status Engine.

Pure functions deciding what a shipment looks like after a status change
and which payment fields a shipment must carry to be valid.

Status changes are free-form (any status may follow any other). Two of
them have side effects:
- entering Pagado is refused unless the origin payment is complete;
- entering En Transito clears the driver and helper payment fields,
  since personnel cannot be marked paid while the shipment is in transit.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from freight_ledger.app.domain.ledger.money import quantize, to_decimal, to_origin_currency, to_ves
from freight_ledger.app.domain.ledger.validation import ValidationError, ValidationResult
from freight_ledger.app.models.enums import Currency, ShipmentStatus

PERSONNEL_ROLES = ("chofer", "ayudante")

MSG_PAID_REQUIRES_PAYMENT = 'Cuando el status es "Pagado", la fecha y el monto de pago son requeridos'
MSG_VES_REQUIRES_RATE = "Cuando la moneda es VES, la tasa de cambio es requerida"


class TransitionResult(BaseModel):
    """Shipment values after a transition, or the unchanged values plus errors."""
    shipment: Dict[str, Any]
    errors: List[ValidationError] = []

    @property
    def accepted(self) -> bool:
        return not self.errors


def _status(value: Any) -> Optional[ShipmentStatus]:
    return None if value is None else ShipmentStatus(value)


def _currency(value: Any) -> Currency:
    return Currency.USD if value is None else Currency(value)


def _positive(value: Any) -> bool:
    number = to_decimal(value)
    return number is not None and number > 0


def _paid_status_errors(shipment: Mapping[str, Any]) -> List[ValidationError]:
    errors = []
    if not shipment.get("pago_fecha"):
        errors.append(ValidationError(field="pago_fecha", message=MSG_PAID_REQUIRES_PAYMENT))
    if shipment.get("monto_pagado_origen") is None:
        errors.append(ValidationError(field="monto_pagado_origen", message=MSG_PAID_REQUIRES_PAYMENT))
    if _currency(shipment.get("moneda_origen")) == Currency.VES and not _positive(shipment.get("tasa_cambio")):
        errors.append(ValidationError(field="tasa_cambio", message=MSG_VES_REQUIRES_RATE))
    return errors


def clear_personnel_payments(shipment: Mapping[str, Any]) -> Dict[str, Any]:
    """Reset both personnel sub-ledgers to 'not paid'. Amounts owed are kept."""
    cleared = dict(shipment)
    for role in PERSONNEL_ROLES:
        cleared[f"pagado_{role}"] = False
        cleared[f"fecha_pago_{role}"] = None
        cleared[f"pago_moneda_{role}"] = Currency.USD
        cleared[f"pago_tasa_cambio_{role}"] = None
    return cleared


def derive_origin_amounts(shipment: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill monto_pagado_usd / monto_pagado_ves from the origin payment."""
    derived = dict(shipment)
    amount = to_decimal(shipment.get("monto_pagado_origen"))
    rate = to_decimal(shipment.get("tasa_cambio"))
    currency = _currency(shipment.get("moneda_origen"))

    usd = ves = None
    # Non-positive rates are left to validate_shipment to report
    has_rate = _positive(rate)
    if amount is not None:
        if currency == Currency.USD:
            usd = quantize(amount)
            ves = to_ves(amount, rate) if has_rate else None
        else:
            ves = quantize(amount)
            usd = to_origin_currency(amount, rate) if has_rate else None
    derived["monto_pagado_usd"] = usd
    derived["monto_pagado_ves"] = ves
    return derived


def apply_status_transition(shipment: Mapping[str, Any], new_status: Any) -> TransitionResult:
    """
    Move a shipment to new_status.

    The payment fields for Pagado must already be present in shipment;
    otherwise the transition is rejected and the shipment returned unchanged.
    """
    new_status = ShipmentStatus(new_status)
    candidate = dict(shipment)
    candidate["status"] = new_status

    if new_status == ShipmentStatus.PAGADO:
        errors = _paid_status_errors(candidate)
        if errors:
            return TransitionResult(shipment=dict(shipment), errors=errors)
        candidate = derive_origin_amounts(candidate)

    elif new_status == ShipmentStatus.EN_TRANSITO:
        candidate = clear_personnel_payments(candidate)

    return TransitionResult(shipment=candidate)


def _non_negative(record: Mapping[str, Any], field: str, errors: List[ValidationError]) -> None:
    value = to_decimal(record.get(field))
    if value is not None and value < 0:
        errors.append(ValidationError(field=field, message="Debe ser ≥ 0"))


def _personnel_errors(record: Mapping[str, Any], role: str, status: Optional[ShipmentStatus]) -> List[ValidationError]:
    errors: List[ValidationError] = []
    _non_negative(record, f"monto_pago_{role}", errors)

    rate_field = f"pago_tasa_cambio_{role}"
    rate = to_decimal(record.get(rate_field))
    if rate is not None and rate <= 0:
        errors.append(ValidationError(field=rate_field, message="Debe ser > 0"))

    if not record.get(f"pagado_{role}"):
        return errors

    if status == ShipmentStatus.EN_TRANSITO:
        errors.append(ValidationError(
            field=f"pagado_{role}",
            message="No se puede marcar como pagado mientras el flete está En Transito",
        ))
    if not record.get(f"fecha_pago_{role}"):
        errors.append(ValidationError(field=f"fecha_pago_{role}", message="La fecha de pago es requerida"))
    if _currency(record.get(f"pago_moneda_{role}")) == Currency.VES and rate is None:
        errors.append(ValidationError(field=rate_field, message=MSG_VES_REQUIRES_RATE))
    return errors


def validate_shipment(record: Mapping[str, Any]) -> ValidationResult:
    """
    Validate the payment-related fields of a shipment.

    Returns the record with monto_pagado_usd / monto_pagado_ves derived.
    """
    errors: List[ValidationError] = []
    status = _status(record.get("status"))

    _non_negative(record, "costo_aproximado", errors)
    _non_negative(record, "monto_pagado_origen", errors)
    rate = to_decimal(record.get("tasa_cambio"))
    if rate is not None and rate <= 0:
        errors.append(ValidationError(field="tasa_cambio", message="Debe ser > 0"))

    if status == ShipmentStatus.PAGADO:
        seen = {e.field for e in errors}
        errors.extend(e for e in _paid_status_errors(record) if e.field not in seen)

    for role in PERSONNEL_ROLES:
        errors.extend(_personnel_errors(record, role, status))

    normalized = derive_origin_amounts(record) if not errors else dict(record)
    return ValidationResult(record=normalized, errors=errors)
