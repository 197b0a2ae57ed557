"""
Payment record validator tests.
"""

from decimal import Decimal

import pytest

from freight_ledger.app.domain.ledger.validation import (
    MSG_EXPENSE_BS_NEEDS_RATE,
    MSG_INVALID_NUMBER,
    MSG_RATE_REQUIRED,
    MSG_RATE_TYPE_FOR_RATE,
    MSG_RATE_TYPE_REQUIRED,
    RatePolicy,
    validate_debt,
    validate_debt_payment,
    validate_expense,
)
from freight_ledger.app.models.enums import Currency, RateType


def errors_by_field(result):
    return {e.field: e.message for e in result.errors}


# Debt payments

def test_divisa_payment_clears_bolivares_fields():
    result = validate_debt_payment({
        "deuda_id": 1,
        "payment_type": "divisa",
        "pago_divisa": "200",
        "pago_bolivares": 5000,
        "tasa_cambio": 30,
        "tipo_tasa": "bcv",
    })

    assert result.is_valid
    assert result.record["pago_divisa"] == Decimal("200")
    assert result.record["pago_bolivares"] is None
    assert result.record["tasa_cambio"] is None
    assert result.record["tipo_tasa"] is None


@pytest.mark.parametrize("amount", [None, 0, -10])
def test_divisa_payment_needs_positive_amount(amount):
    result = validate_debt_payment({"deuda_id": 1, "payment_type": "divisa", "pago_divisa": amount})
    assert result.fields() == ["pago_divisa"]


def test_bolivares_payment_without_rate():
    result = validate_debt_payment({
        "deuda_id": 1,
        "payment_type": "bolivares",
        "pago_bolivares": 1000,
        "tasa_cambio": None,
        "tipo_tasa": None,
    })

    errors = errors_by_field(result)
    assert not result.is_valid
    assert errors["tasa_cambio"] == MSG_RATE_REQUIRED
    assert errors["tipo_tasa"] == MSG_RATE_TYPE_REQUIRED


def test_bolivares_payment_reports_every_violation():
    result = validate_debt_payment({
        "deuda_id": None,
        "payment_type": "bolivares",
        "pago_bolivares": 0,
        "tasa_cambio": -3,
    })
    assert set(result.fields()) == {"deuda_id", "pago_bolivares", "tasa_cambio", "tipo_tasa"}


def test_bolivares_payment_drops_prefilled_divisa():
    result = validate_debt_payment({
        "deuda_id": 1,
        "payment_type": "bolivares",
        "pago_divisa": "200",
        "pago_bolivares": "6000",
        "tasa_cambio": "30",
        "tipo_tasa": "paralelo",
    })

    assert result.is_valid
    assert result.record["pago_divisa"] is None
    assert result.record["pago_bolivares"] == Decimal("6000")
    assert result.record["tipo_tasa"] == RateType.PARALELO


def test_unknown_payment_type():
    result = validate_debt_payment({"deuda_id": 1, "payment_type": "efectivo"})
    assert result.fields() == ["payment_type"]


def test_missing_payment_type():
    result = validate_debt_payment({"deuda_id": 1, "pago_divisa": 10})
    assert "payment_type" in result.fields()


def test_rate_policy_rejects_disallowed_type():
    policy = RatePolicy.from_names("debt_payment", ["bcv"])
    record = {"deuda_id": 1, "payment_type": "bolivares", "pago_bolivares": 100, "tasa_cambio": 40}

    rejected = validate_debt_payment({**record, "tipo_tasa": "paralelo"}, policy)
    assert rejected.fields() == ["tipo_tasa"]

    assert validate_debt_payment({**record, "tipo_tasa": "bcv"}, policy).is_valid


def test_custom_rate_always_allowed():
    policy = RatePolicy.from_names("expense", [])
    assert policy.allows(RateType.CUSTOM)
    assert not policy.allows(RateType.BCV)

    result = validate_debt_payment({
        "deuda_id": 1,
        "payment_type": "bolivares",
        "pago_bolivares": 100,
        "tasa_cambio": 45,
        "tipo_tasa": "custom",
    }, policy)
    assert result.is_valid


def test_non_numeric_amount():
    result = validate_debt_payment({"deuda_id": 1, "payment_type": "divisa", "pago_divisa": "abc"})
    assert errors_by_field(result) == {"pago_divisa": MSG_INVALID_NUMBER}


@pytest.mark.parametrize("record,field", [
    ({"payment_type": "divisa", "pago_bolivares": 100, "tasa_cambio": 30, "tipo_tasa": "bcv"}, "pago_divisa"),
    ({"payment_type": "bolivares", "pago_divisa": 100}, "pago_bolivares"),
])
def test_payment_type_mismatch_names_missing_amount(record, field):
    result = validate_debt_payment({"deuda_id": 1, **record})
    assert field in result.fields()


# Expenses

@pytest.mark.parametrize("record,field", [
    ({"original_currency": "USD", "pago_bolivares": 365, "tasa_cambio": 36.5, "tipo_tasa": "bcv"}, "pago_divisa"),
    ({"original_currency": "VES", "pago_divisa": 10}, "pago_bolivares"),
])
def test_expense_currency_mismatch_names_missing_amount(record, field):
    result = validate_expense(record)
    assert field in result.fields()


def test_ves_expense_derives_divisa():
    result = validate_expense({
        "category": "Combustible",
        "original_currency": "VES",
        "pago_bolivares": "3650",
        "tasa_cambio": "36.5",
        "tipo_tasa": "bcv",
    })

    assert result.is_valid
    assert result.record["pago_divisa"] == Decimal("100.00")
    assert result.record["pago_bolivares"] == Decimal("3650")


def test_usd_expense_derives_bolivares_when_rate_given():
    result = validate_expense({
        "original_currency": Currency.USD,
        "pago_divisa": 10,
        "tasa_cambio": "36.5",
        "tipo_tasa": RateType.PROMEDIO,
    })

    assert result.is_valid
    assert result.record["pago_bolivares"] == Decimal("365.00")


def test_usd_expense_without_rate_is_valid():
    result = validate_expense({"original_currency": "USD", "pago_divisa": 25})

    assert result.is_valid
    assert result.record["pago_bolivares"] is None


def test_bolivares_amount_needs_rate_and_type():
    result = validate_expense({"original_currency": "VES", "pago_bolivares": 500})

    assert errors_by_field(result) == {
        "tasa_cambio": MSG_EXPENSE_BS_NEEDS_RATE,
        "tipo_tasa": MSG_EXPENSE_BS_NEEDS_RATE,
    }


def test_rate_without_type():
    result = validate_expense({"original_currency": "USD", "pago_divisa": 10, "tasa_cambio": 36.5})
    assert errors_by_field(result) == {"tipo_tasa": MSG_RATE_TYPE_FOR_RATE}


def test_expense_rejects_negative_amount_and_rate():
    result = validate_expense({
        "original_currency": "USD",
        "pago_divisa": -5,
        "tasa_cambio": 0,
        "tipo_tasa": "bcv",
    })
    assert set(result.fields()) == {"pago_divisa", "tasa_cambio"}


def test_expense_needs_currency():
    result = validate_expense({"pago_divisa": 10})
    assert "original_currency" in result.fields()


def test_invalid_expense_is_not_derived():
    result = validate_expense({"original_currency": "VES", "pago_bolivares": 500, "tasa_cambio": 50})
    assert not result.is_valid
    assert result.record["pago_divisa"] is None


# Debts

def test_valid_debt():
    result = validate_debt({"persona_name": " Ana ", "description": "Préstamo", "total_divisa": "500"})

    assert result.is_valid
    assert result.record["original_currency"] == Currency.USD
    assert result.record["total_divisa"] == Decimal("500")


def test_debt_only_in_usd():
    result = validate_debt({
        "persona_name": "Ana",
        "description": "Préstamo",
        "original_currency": "VES",
        "total_divisa": 500,
    })
    assert result.fields() == ["original_currency"]


def test_debt_required_fields():
    result = validate_debt({"persona_name": "  ", "description": "", "total_divisa": 0, "tasa_cambio": -1})
    assert set(result.fields()) == {"persona_name", "description", "total_divisa", "tasa_cambio"}


def test_as_dicts_is_field_scoped():
    result = validate_debt({"persona_name": "Ana", "description": "x"})
    assert result.as_dicts() == [{"field": "total_divisa", "message": "El monto total es requerido"}]
