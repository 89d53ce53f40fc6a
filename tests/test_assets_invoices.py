import pytest
from fastapi import status

def _invoice(number="INV-001", **overrides):
    payload = {
        "invoice_number": number,
        "client_name": "Globex",
        "client_email": "billing@globex.test",
        "invoice_date": "2025-05-01",
        "due_date": "2025-05-31",
        "items": [
            {"description": "Payroll processing", "quantity": 2, "amount": 150.0},
            {"description": "Onboarding pack", "quantity": 1, "amount": 49.99},
        ],
    }
    payload.update(overrides)
    return payload

def test_create_and_list_assets(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    response = client.post("/api/assets", headers=headers, json={"name": "ThinkPad X1", "asset_code": "LAP-001", "category": "Laptop"})
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["status"] == "Available"

    listed = client.get("/api/assets", headers=headers).json()["data"]
    assert [a["asset_code"] for a in listed] == ["LAP-001"]

def test_duplicate_asset_code(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    body = {"name": "ThinkPad X1", "asset_code": "LAP-001", "category": "Laptop"}
    client.post("/api/assets", headers=headers, json=body)
    response = client.post("/api/assets", headers=headers, json=body)
    assert response.status_code == status.HTTP_409_CONFLICT

def test_invoice_totals(client, hr_user, auth_headers):
    response = client.post("/api/invoices", headers=auth_headers(hr_user), json=_invoice())
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["subtotal"] == 349.99
    assert data["total"] == 349.99
    assert data["status"] == "draft"
    assert data["created_by"] == str(hr_user.id)

def test_invoice_requires_items(client, hr_user, auth_headers):
    response = client.post("/api/invoices", headers=auth_headers(hr_user), json=_invoice(items=[]))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

def test_duplicate_invoice_number(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    client.post("/api/invoices", headers=headers, json=_invoice())
    response = client.post("/api/invoices", headers=headers, json=_invoice())
    assert response.status_code == status.HTTP_409_CONFLICT

def test_update_invoice_status_and_filter(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    first = client.post("/api/invoices", headers=headers, json=_invoice("INV-001")).json()["data"]
    client.post("/api/invoices", headers=headers, json=_invoice("INV-002"))

    updated = client.put(f"/api/invoices/{first['id']}", headers=headers, json={"status": "paid"})
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["data"]["status"] == "paid"

    paid = client.get("/api/invoices?status=paid", headers=headers).json()["data"]
    assert [i["invoice_number"] for i in paid] == ["INV-001"]

def test_delete_invoice(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    created = client.post("/api/invoices", headers=headers, json=_invoice()).json()["data"]
    assert client.delete(f"/api/invoices/{created['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/invoices/{created['id']}", headers=headers).status_code == 404

def test_update_due_date_before_invoice_date(client, hr_user, auth_headers):
    headers = auth_headers(hr_user)
    created = client.post("/api/invoices", headers=headers, json=_invoice()).json()["data"]

    response = client.put(f"/api/invoices/{created['id']}", headers=headers, json={"due_date": "2025-04-01"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert client.get(f"/api/invoices/{created['id']}", headers=headers).json()["data"]["due_date"] == "2025-05-31"

    moved = client.put(f"/api/invoices/{created['id']}", headers=headers, json={"due_date": "2025-06-15"})
    assert moved.status_code == status.HTTP_200_OK
    assert moved.json()["data"]["due_date"] == "2025-06-15"
