"""
Payment Record Validator.

Single home for the conditional money rules shared by debt payments,
expenses and debts. Validators never raise for bad input: every rule is
evaluated, each violation is collected as a field-scoped ValidationError,
and the caller decides how to surface them.

Rules:
- A debt payment is either "divisa" (pago_divisa > 0, nothing else) or
  "bolivares" (pago_bolivares > 0 plus tasa_cambio > 0 and tipo_tasa).
- An expense is driven by original_currency: USD needs pago_divisa > 0,
  VES needs pago_bolivares > 0; any bolívares amount needs tasa_cambio
  and tipo_tasa.
- Whenever a rate is given its rate type is required, and the rate type
  must be allowed by the context's RatePolicy.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from freight_ledger.app.core.config import settings
from freight_ledger.app.domain.ledger.money import to_decimal, to_ves, to_origin_currency
from freight_ledger.app.models.enums import Currency, PaymentType, RateType


# Messages shown next to the offending field
MSG_DIVISA_REQUIRED = "El monto en divisa es requerido"
MSG_BOLIVARES_REQUIRED = "El monto en bolívares es requerido"
MSG_RATE_REQUIRED = "La tasa de cambio es requerida para pagos en bolívares"
MSG_RATE_TYPE_REQUIRED = "El tipo de tasa es requerido para pagos en bolívares"
MSG_RATE_TYPE_FOR_RATE = "El tipo de tasa es requerido cuando se indica una tasa de cambio"
MSG_AMOUNT_POSITIVE = "El monto debe ser mayor que 0"
MSG_AMOUNT_NON_NEGATIVE = "Debe ser ≥ 0"
MSG_RATE_POSITIVE = "La tasa debe ser mayor que 0"
MSG_INVALID_NUMBER = "Debe ser un número válido"
MSG_EXPENSE_USD = "Debe ingresar el pago en USD"
MSG_EXPENSE_VES = "Debe ingresar el pago en VES"
MSG_EXPENSE_BS_NEEDS_RATE = "Si hay pago en bolívares, la tasa de cambio y el tipo de tasa son obligatorios"
MSG_CURRENCY_REQUIRED = "Moneda original requerida"
MSG_DEBT_USD_ONLY = "Las deudas solo pueden registrarse en USD"


class ValidationError(BaseModel):
    """One rule violation, attached to the input that caused it."""
    field: str
    message: str


class ValidationResult(BaseModel):
    """
    Outcome of a validator.

    record holds the normalized values (derived amounts filled in,
    non-authoritative ones cleared). It is only meaningful when is_valid.
    """
    record: Dict[str, Any] = {}
    errors: List[ValidationError] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def fields(self) -> List[str]:
        return [error.field for error in self.errors]

    def as_dicts(self) -> List[Dict[str, str]]:
        return [error.model_dump() for error in self.errors]


class RatePolicy(BaseModel):
    """Allowed rate types for one validation context. CUSTOM is always allowed."""
    context: str
    allowed: FrozenSet[RateType]

    def allows(self, rate_type: RateType) -> bool:
        return rate_type == RateType.CUSTOM or rate_type in self.allowed

    @classmethod
    def from_names(cls, context: str, names: Iterable[str]) -> "RatePolicy":
        return cls(context=context, allowed=frozenset(RateType(name) for name in names))


def payment_rate_policy() -> RatePolicy:
    return RatePolicy.from_names("debt_payment", settings.payment_rate_types)


def expense_rate_policy() -> RatePolicy:
    return RatePolicy.from_names("expense", settings.expense_rate_types)


class _Collector:
    """Accumulates errors, keeping only the first one per field."""

    def __init__(self):
        self.errors: List[ValidationError] = []

    def add(self, field: str, message: str) -> None:
        if field not in {e.field for e in self.errors}:
            self.errors.append(ValidationError(field=field, message=message))

    def has(self, field: str) -> bool:
        return any(e.field == field for e in self.errors)


def _number(record: Mapping[str, Any], field: str, errors: _Collector) -> Optional[Decimal]:
    value = record.get(field)
    if value is None or value == "":
        return None
    try:
        number = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        errors.add(field, MSG_INVALID_NUMBER)
        return None
    if not number.is_finite():
        errors.add(field, MSG_INVALID_NUMBER)
        return None
    return number


def _enum(record: Mapping[str, Any], field: str, enum_cls, errors: _Collector, message: str):
    value = record.get(field)
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        errors.add(field, message)
        return None


def _check_rate_type(rate_type: Optional[RateType], policy: RatePolicy, errors: _Collector) -> None:
    if rate_type is not None and not policy.allows(rate_type):
        errors.add("tipo_tasa", f"Tipo de tasa no permitido: {rate_type.value}")


def validate_debt_payment(record: Mapping[str, Any], policy: Optional[RatePolicy] = None) -> ValidationResult:
    """
    Validate a debt payment keyed by payment_type.

    The normalized record keeps only the fields that are authoritative for
    the chosen payment type; the rest are set to None.
    """
    policy = policy or payment_rate_policy()
    errors = _Collector()

    payment_type = _enum(record, "payment_type", PaymentType, errors, "Tipo de pago inválido")
    if payment_type is None and not errors.has("payment_type"):
        errors.add("payment_type", "El tipo de pago es requerido")

    if not record.get("deuda_id"):
        errors.add("deuda_id", "Por favor seleccione una deuda")

    divisa = _number(record, "pago_divisa", errors)
    bolivares = _number(record, "pago_bolivares", errors)
    rate = _number(record, "tasa_cambio", errors)
    rate_type = _enum(record, "tipo_tasa", RateType, errors, "Tipo de tasa inválido")

    normalized = dict(record)

    if payment_type == PaymentType.DIVISA:
        if divisa is None:
            errors.add("pago_divisa", MSG_DIVISA_REQUIRED)
        elif divisa <= 0:
            errors.add("pago_divisa", MSG_AMOUNT_POSITIVE)
        normalized.update(pago_divisa=divisa, pago_bolivares=None, tasa_cambio=None, tipo_tasa=None)

    elif payment_type == PaymentType.BOLIVARES:
        if bolivares is None:
            errors.add("pago_bolivares", MSG_BOLIVARES_REQUIRED)
        elif bolivares <= 0:
            errors.add("pago_bolivares", MSG_AMOUNT_POSITIVE)
        if rate is None:
            errors.add("tasa_cambio", MSG_RATE_REQUIRED)
        elif rate <= 0:
            errors.add("tasa_cambio", MSG_RATE_POSITIVE)
        if rate_type is None:
            errors.add("tipo_tasa", MSG_RATE_TYPE_REQUIRED)
        _check_rate_type(rate_type, policy, errors)
        # A pre-filled divisa value is only a display aid here
        normalized.update(pago_divisa=None, pago_bolivares=bolivares, tasa_cambio=rate, tipo_tasa=rate_type)

    return ValidationResult(record=normalized, errors=errors.errors)


def validate_expense(record: Mapping[str, Any], policy: Optional[RatePolicy] = None) -> ValidationResult:
    """
    Validate an expense, driven by original_currency.

    When valid and a rate is present, the non-authoritative amount is
    derived from the authoritative one.
    """
    policy = policy or expense_rate_policy()
    errors = _Collector()

    currency = _enum(record, "original_currency", Currency, errors, MSG_CURRENCY_REQUIRED)
    if currency is None:
        errors.add("original_currency", MSG_CURRENCY_REQUIRED)

    divisa = _number(record, "pago_divisa", errors)
    bolivares = _number(record, "pago_bolivares", errors)
    rate = _number(record, "tasa_cambio", errors)
    rate_type = _enum(record, "tipo_tasa", RateType, errors, "Tipo de tasa inválido")

    if divisa is not None and divisa < 0:
        errors.add("pago_divisa", MSG_AMOUNT_NON_NEGATIVE)
    if bolivares is not None and bolivares < 0:
        errors.add("pago_bolivares", MSG_AMOUNT_NON_NEGATIVE)
    if rate is not None and rate <= 0:
        errors.add("tasa_cambio", "Tasa de cambio debe ser positiva")

    if currency == Currency.USD and (divisa is None or divisa <= 0):
        errors.add("pago_divisa", MSG_EXPENSE_USD)
    if currency == Currency.VES and (bolivares is None or bolivares <= 0):
        errors.add("pago_bolivares", MSG_EXPENSE_VES)

    if bolivares is not None:
        if rate is None:
            errors.add("tasa_cambio", MSG_EXPENSE_BS_NEEDS_RATE)
        if rate_type is None:
            errors.add("tipo_tasa", MSG_EXPENSE_BS_NEEDS_RATE)
    if rate is not None and rate_type is None:
        errors.add("tipo_tasa", MSG_RATE_TYPE_FOR_RATE)
    _check_rate_type(rate_type, policy, errors)

    normalized = dict(record)
    normalized.update(pago_divisa=divisa, pago_bolivares=bolivares, tasa_cambio=rate, tipo_tasa=rate_type)

    if not errors.errors and rate is not None:
        if currency == Currency.VES:
            normalized["pago_divisa"] = to_origin_currency(bolivares, rate)
        else:
            normalized["pago_bolivares"] = to_ves(divisa, rate)

    return ValidationResult(record=normalized, errors=errors.errors)


def validate_debt(record: Mapping[str, Any]) -> ValidationResult:
    """Validate a new debt. Only USD-denominated debts can be created."""
    errors = _Collector()

    if not (record.get("persona_name") or "").strip():
        errors.add("persona_name", "El nombre del acreedor es requerido")
    if not (record.get("description") or "").strip():
        errors.add("description", "La descripción es requerida")

    currency = _enum(record, "original_currency", Currency, errors, MSG_CURRENCY_REQUIRED)
    if currency is None:
        currency = Currency.USD if record.get("original_currency") is None else None
    if currency is not None and currency != Currency.USD:
        errors.add("original_currency", MSG_DEBT_USD_ONLY)

    total = _number(record, "total_divisa", errors)
    if total is None:
        errors.add("total_divisa", "El monto total es requerido")
    elif total <= 0:
        errors.add("total_divisa", MSG_AMOUNT_POSITIVE)

    rate = _number(record, "tasa_cambio", errors)
    if rate is not None and rate <= 0:
        errors.add("tasa_cambio", MSG_RATE_POSITIVE)

    normalized = dict(record)
    normalized.update(original_currency=currency, total_divisa=total, tasa_cambio=rate)
    return ValidationResult(record=normalized, errors=errors.errors)
