"""
HTTP API tests. Every test runs against a private copy of the bundled catalog.
"""
import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import prep_pricing
from prep_pricing.api import state
from prep_pricing.api.main import app

BUNDLED_DATA = Path(prep_pricing.__file__).resolve().parent / 'data'


@pytest.fixture
def client(tmp_path, monkeypatch):
    for csv_file in BUNDLED_DATA.glob('*.csv'):
        shutil.copy(csv_file, tmp_path / csv_file.name)
    monkeypatch.setattr(state.store, "data_dir", tmp_path)
    monkeypatch.setattr(state.engine, "catalog", state.store.load())
    return TestClient(app)


def shipment(**overrides):
    payload = {
        "owner_id": "demo",
        "kind": "product",
        "service": "FBA/WFS/TFS",
        "product_type": "Standard",
        "items": [{"description": "Widget", "quantity": 10, "pack_of": 3}],
    }
    payload.update(overrides)
    return payload


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_quote_is_draft(client):
    payload = shipment(
        selected_services=["bubble_wrap"],
        service_quantities={"bubble_wrap": 5, "sticker_removal": 0},
        discount={"type": "percent", "value": 10},
    )
    response = client.post("/quote", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Draft"
    assert data["lines"][0]["package"] == "Starter"
    assert data["lines"][0]["total_price"] == "3.00"
    assert [s["kind"] for s in data["additional_services"]] == ["bubble_wrap"]
    assert data["gross_total"] == "5.50"
    assert data["discount_amount"] == "0.55"
    assert data["grand_total"] == "4.95"
    assert data["tax_notice"].endswith("Excluded")


def test_invoice_is_finalized(client):
    response = client.post("/invoice", json=shipment(discount_amount="1.00"))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Finalized"
    assert data["grand_total"] == "2.00"


def test_custom_product_placeholder(client):
    response = client.post("/quote", json=shipment(product_type="Custom"))
    data = response.json()
    assert data["lines"][0]["unit_price"] == "1.00"
    assert data["lines"][0]["total_price"] == "1.00"
    assert data["needs_admin_pricing"] is True


def test_unpriced_owner_still_quotes(client):
    response = client.post("/quote", json=shipment(owner_id="newcomer"))
    assert response.status_code == 200
    data = response.json()
    assert data["grand_total"] == "0.00"
    assert data["warnings"]


def test_invalid_discount_reported(client):
    response = client.post("/quote", json=shipment(discount={"type": "coupon", "value": 5}))
    assert response.status_code == 200
    data = response.json()
    assert data["discount_amount"] == "0.00"
    assert any("Discount ignored" in w for w in data["warnings"])


@pytest.mark.parametrize("item", [
    {"quantity": 0},
    {"quantity": 5, "pack_of": 0},
    {"quantity": -2},
])
def test_bad_quantities_rejected(client, item):
    response = client.post("/quote", json=shipment(items=[item]))
    assert response.status_code == 422


def test_unknown_service_rejected(client):
    response = client.post("/quote", json=shipment(service="Drop Ship"))
    assert response.status_code == 400


def test_tier_endpoint(client):
    response = client.get("/tiers/FBM/50")
    assert response.status_code == 200
    assert response.json() == {
        "service": "FBM",
        "quantity": 50,
        "package": "Small Business",
        "quantity_range": "50+",
    }
    assert client.get("/tiers/FBA_WFS_TFS/1001").json()["package"] == "Premium"
    assert client.get("/tiers/FBM/0").status_code == 422


def test_rate_lookup(client):
    response = client.get("/api/rates/lookup", params={
        "owner_id": "demo", "service": "FBM", "product_type": "Large", "quantity": 30,
    })
    assert response.status_code == 200
    assert response.json()["rate"] == "3.25"

    missing = client.get("/api/rates/lookup", params={
        "owner_id": "newcomer", "service": "FBM", "product_type": "Large", "quantity": 30,
    })
    assert missing.status_code == 404


def test_save_rule_becomes_current(client):
    response = client.post("/api/rates", json={
        "owner_id": "demo",
        "service": "FBA/WFS/TFS",
        "package": "Starter",
        "product_type": "Standard",
        "rate": 0.12,
        "pack_surcharge": 1.00,
    })
    assert response.status_code == 200
    assert response.json()["quantity_range"] == "<50"
    assert response.json()["rate"] == "0.12"

    quote = client.post("/quote", json=shipment()).json()
    assert quote["lines"][0]["total_price"] == "3.20"


def test_flat_rate_endpoints(client):
    assert client.get("/api/rates/flat/box_forwarding", params={"owner_id": "demo"}).json()["price"] == "3.50"
    assert client.get("/api/rates/flat/box_forwarding", params={"owner_id": "newcomer"}).status_code == 404

    saved = client.post("/api/rates/flat", json={"owner_id": "newcomer", "kind": "box_forwarding", "price": 4})
    assert saved.status_code == 200
    assert saved.json()["price"] == "4.00"

    quote = client.post("/quote", json={
        "owner_id": "newcomer",
        "kind": "box",
        "items": [{"description": "Boxes", "quantity": 3}],
    }).json()
    assert quote["grand_total"] == "12.00"


def test_service_pricing_endpoints(client):
    assert client.get("/api/rates/services", params={"owner_id": "newcomer"}).status_code == 404
    saved = client.put("/api/rates/services", json={
        "owner_id": "newcomer", "price_per_foot": 0.4, "price_per_item": 0.2, "price_per_label": 0.1,
    })
    assert saved.status_code == 200
    assert saved.json()["price_per_label"] == "0.10"


def test_reload_and_status(client):
    response = client.post("/api/rates/reload", params={"owner_id": "demo"})
    assert response.json()["success"] is True
    assert response.json()["stats"]["owner_rules"] == 16

    status = client.get("/system/status").json()
    assert status["engine_active"] is True
    assert status["catalog"]["flat_rates"] == 5


def test_negative_service_quantity_rejected(client):
    response = client.post("/quote", json=shipment(service_quantities={"bubble_wrap": -3}))
    assert response.status_code == 422
