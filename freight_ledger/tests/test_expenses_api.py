"""
Expense API tests.
"""

import pytest


async def create_expense(client, **overrides):
    payload = {
        "category": "Combustible",
        "expense_date": "2025-03-01",
        "original_currency": "USD",
        "pago_divisa": 50,
    }
    payload.update(overrides)
    response = await client.post("/v1/expenses", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_ves_expense_derives_divisa(client):
    expense = await create_expense(
        client,
        original_currency="VES",
        pago_divisa=None,
        pago_bolivares=3650,
        tasa_cambio=36.5,
        tipo_tasa="bcv",
    )

    assert expense["pago_divisa"] == 100.0
    assert expense["pago_bolivares"] == 3650.0
    assert expense["tipo_tasa"] == "bcv"


@pytest.mark.asyncio
async def test_expense_errors_are_field_scoped(client):
    response = await client.post("/v1/expenses", json={
        "category": "Peajes",
        "expense_date": "2025-03-01",
        "original_currency": "VES",
        "pago_bolivares": 500,
    })

    assert response.status_code == 422
    fields = sorted(e["field"] for e in response.json()["details"]["errors"])
    assert fields == ["tasa_cambio", "tipo_tasa"]


@pytest.mark.asyncio
async def test_missing_category_rejected_by_schema(client):
    response = await client.post("/v1/expenses", json={
        "expense_date": "2025-03-01", "original_currency": "USD", "pago_divisa": 5,
    })

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_expense_for_unknown_shipment(client):
    response = await client.post("/v1/expenses", json={
        "flete_id": 99,
        "category": "Peajes",
        "expense_date": "2025-03-01",
        "original_currency": "USD",
        "pago_divisa": 5,
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_recomputes_derived_amount(client):
    expense = await create_expense(
        client, original_currency="VES", pago_divisa=None,
        pago_bolivares=3650, tasa_cambio=36.5, tipo_tasa="bcv",
    )

    response = await client.patch(f"/v1/expenses/{expense['id']}", json={"pago_bolivares": 7300})

    assert response.status_code == 200, response.text
    assert response.json()["pago_divisa"] == 200.0


@pytest.mark.asyncio
async def test_update_with_null_required_field_rejected(client):
    expense = await create_expense(client)

    response = await client.patch(f"/v1/expenses/{expense['id']}", json={"category": None, "expense_date": None})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION"
    fields = sorted(e["loc"][-1] for e in body["details"]["errors"])
    assert fields == ["category", "expense_date"]

    stored = (await client.get(f"/v1/expenses/{expense['id']}")).json()
    assert stored["category"] == "Combustible"


@pytest.mark.asyncio
async def test_removing_rate_clears_derived_bolivares(client):
    expense = await create_expense(client, tasa_cambio=36.5, tipo_tasa="bcv")
    assert expense["pago_bolivares"] == 1825.0

    response = await client.patch(
        f"/v1/expenses/{expense['id']}", json={"tasa_cambio": None, "tipo_tasa": None}
    )

    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["pago_divisa"] == 50.0
    assert updated["pago_bolivares"] is None
    assert updated["tasa_cambio"] is None


@pytest.mark.asyncio
async def test_list_filters(client):
    await create_expense(client, category="Combustible", expense_date="2025-01-10")
    await create_expense(client, category="Peajes", expense_date="2025-02-10")
    await create_expense(
        client, category="Peajes", expense_date="2025-03-10", original_currency="VES",
        pago_divisa=None, pago_bolivares=730, tasa_cambio=36.5, tipo_tasa="paralelo",
    )

    by_category = (await client.get("/v1/expenses", params={"category": "Peajes"})).json()
    assert by_category["total"] == 2
    assert [e["expense_date"] for e in by_category["expenses"]] == ["2025-03-10", "2025-02-10"]

    by_currency = (await client.get("/v1/expenses", params=[("currency", "VES")])).json()
    assert by_currency["total"] == 1

    by_rate = (await client.get("/v1/expenses", params={"tipo_tasa": "paralelo"})).json()
    assert by_rate["total"] == 1

    by_dates = (await client.get("/v1/expenses", params={"date_from": "2025-02-01", "date_to": "2025-02-28"})).json()
    assert by_dates["total"] == 1


@pytest.mark.asyncio
async def test_summary_groups_by_category_and_month(client):
    await create_expense(client, category="Combustible", expense_date="2025-01-10", pago_divisa=10,
                         tasa_cambio=36.5, tipo_tasa="bcv")
    await create_expense(client, category="Peajes", expense_date="2025-01-20", pago_divisa=5)
    await create_expense(client, category="Combustible", expense_date="2025-02-03", pago_divisa=20,
                         tasa_cambio=40, tipo_tasa="paralelo")

    summary = (await client.get("/v1/expenses/summary")).json()

    categories = {b["label"]: b for b in summary["by_category"]}
    assert categories["Combustible"]["divisa"] == 30.0
    assert categories["Combustible"]["bolivares"] == 1165.0
    assert categories["Combustible"]["count"] == 2
    assert categories["Peajes"]["bolivares"] == 0.0
    assert summary["by_category"][0]["label"] == "Combustible"

    assert [b["label"] for b in summary["by_month"]] == ["2025-01", "2025-02"]
    assert summary["total_divisa"] == 35.0
    assert summary["total_bolivares"] == 1165.0


@pytest.mark.asyncio
async def test_shipment_expenses_and_delete(client):
    shipment = (await client.post("/v1/shipments", json={"fo_number": "FO-9", "destination": "Barinas"})).json()
    expense = await create_expense(client, flete_id=shipment["id"])
    await create_expense(client)

    linked = (await client.get(f"/v1/shipments/{shipment['id']}/expenses")).json()
    assert [e["id"] for e in linked] == [expense["id"]]

    response = await client.delete(f"/v1/expenses/{expense['id']}")
    assert response.status_code == 204
    assert (await client.get(f"/v1/expenses/{expense['id']}")).status_code == 404
