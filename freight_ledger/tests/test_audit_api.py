"""
Audit trail API tests.
"""

import pytest


async def create_shipment(client):
    response = await client.post("/v1/shipments", json={"fo_number": "FO-7", "destination": "Valencia"})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_invoice_creation_is_audited(client):
    shipment = await create_shipment(client)

    added = await client.post(f"/v1/shipments/{shipment['id']}/invoices", json={
        "invoice_number": "F-0009", "client_name": "Polar", "load_date": "2025-03-01",
    })
    assert added.status_code == 201
    invoice_id = added.json()["id"]

    response = await client.get("/v1/audit-logs", params={"entity_type": "invoice", "entity_id": invoice_id})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    log = body["logs"][0]
    assert log["action"] == "INVOICE_CREATED"
    assert log["meta_data"] == {"flete_id": shipment["id"], "invoice_number": "F-0009"}


@pytest.mark.asyncio
async def test_record_history_newest_first(client):
    shipment = await create_shipment(client)
    await client.post(f"/v1/shipments/{shipment['id']}/status", json={"status": "Despachado"})

    response = await client.get("/v1/audit-logs", params={"entity_type": "shipment", "entity_id": shipment["id"]})

    actions = [log["action"] for log in response.json()["logs"]]
    assert actions == ["SHIPMENT_STATUS_CHANGED", "SHIPMENT_CREATED"]


@pytest.mark.asyncio
async def test_filter_by_action_and_limit(client):
    for n in range(3):
        response = await client.post("/v1/vehicles", json={
            "name": f"Camión {n}", "brand": "Mack", "model": "Granite", "color": "Blanco", "plate": f"AB{n}CD",
        })
        assert response.status_code == 201, response.text

    limited = (await client.get("/v1/audit-logs", params={"action": "VEHICLE_CREATED", "limit": 2})).json()
    assert limited["total"] == 2
    assert {log["entity_type"] for log in limited["logs"]} == {"vehicle"}

    none = (await client.get("/v1/audit-logs", params={"action": "DEBT_CREATED"})).json()
    assert none == {"logs": [], "total": 0}
