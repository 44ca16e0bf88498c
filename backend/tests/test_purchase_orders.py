from decimal import Decimal

import pytest

from crud.purchase_orders import check_status_transition
from exceptions import InvalidStatusTransitionError
from models.purchase_orders import PurchaseOrderStatus
from utils import local_now


ORDER = {
    "project_name": "Office Fit-out",
    "manager": "Kim",
    "contact_number": "010-0000-0000",
    "vendor_name": "Seoul Cable",
    "vendor_email": "sales@seoulcable.co.kr",
}


def _create_order(client, items, **order_fields):
    resp = client.post("/api/purchase-orders", json={"order": {**ORDER, **order_fields}, "items": items})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_line_amounts_and_total(client):
    body = _create_order(client, [
        {"item_name": "UTP Cable", "quantity": 3, "unit_price": 1000},
        {"item_name": "Connector", "quantity": 2, "unit_price": 500},
    ])

    assert [Decimal(line["amount"]) for line in body["items"]] == [Decimal("3000"), Decimal("1000")]
    assert Decimal(body["order"]["total_amount"]) == Decimal("4000")
    assert body["order"]["status"] == "draft"
    assert body["order"]["email_sent"] is False


def test_deleting_line_updates_total(client):
    body = _create_order(client, [
        {"item_name": "UTP Cable", "quantity": 3, "unit_price": 1000},
        {"item_name": "Connector", "quantity": 2, "unit_price": 500},
    ])
    po_id = body["order"]["id"]
    first_line = body["items"][0]["id"]

    resp = client.delete(f"/api/purchase-orders/{po_id}/items/{first_line}")

    assert resp.status_code == 200
    assert len(resp.json()["items"]) == 1
    assert Decimal(resp.json()["order"]["total_amount"]) == Decimal("1000")
    assert Decimal(client.get(f"/api/purchase-orders/{po_id}").json()["order"]["total_amount"]) == Decimal("1000")


def test_adding_and_updating_lines_recompute_total(client):
    body = _create_order(client, [{"item_name": "UTP Cable", "quantity": 3, "unit_price": 1000}])
    po_id = body["order"]["id"]

    added = client.post(f"/api/purchase-orders/{po_id}/items", json={"item_name": "Tray", "quantity": 4, "unit_price": 250})
    assert added.status_code == 201
    assert Decimal(added.json()["order"]["total_amount"]) == Decimal("4000")

    line_id = body["items"][0]["id"]
    updated = client.put(f"/api/purchase-orders/{po_id}/items/{line_id}", json={"quantity": 5})
    assert updated.status_code == 200
    line = next(line for line in updated.json()["items"] if line["id"] == line_id)
    assert Decimal(line["amount"]) == Decimal("5000")
    assert Decimal(updated.json()["order"]["total_amount"]) == Decimal("6000")


def test_line_without_price_has_zero_amount(client):
    body = _create_order(client, [{"item_name": "Sample", "quantity": 2}])
    assert Decimal(body["items"][0]["amount"]) == 0
    assert Decimal(body["order"]["total_amount"]) == 0


def test_line_price_falls_back_to_inventory_item(client, make_item):
    item = make_item(name="LED Panel", unit_price=12000)

    body = _create_order(client, [{"item_id": item["id"], "item_name": "LED Panel", "quantity": 2}])

    assert Decimal(body["items"][0]["unit_price"]) == Decimal("12000")
    assert Decimal(body["order"]["total_amount"]) == Decimal("24000")


def test_line_with_unknown_inventory_item(client):
    resp = client.post("/api/purchase-orders", json={
        "order": ORDER,
        "items": [{"item_id": 777, "item_name": "Ghost", "quantity": 1}],
    })
    assert resp.status_code == 404


def test_order_number_format_and_sequence(client):
    prefix = f"PO-{local_now():%Y%m}-"
    first = _create_order(client, [])
    second = _create_order(client, [])

    assert first["order"]["order_number"] == f"{prefix}0001"
    assert second["order"]["order_number"] == f"{prefix}0002"


def test_put_replaces_lines(client):
    body = _create_order(client, [
        {"item_name": "Keep", "quantity": 1, "unit_price": 100},
        {"item_name": "Drop", "quantity": 1, "unit_price": 900},
    ])
    po_id = body["order"]["id"]
    keep_id = body["items"][0]["id"]

    resp = client.put(f"/api/purchase-orders/{po_id}", json={
        "order": {"notes": "revised"},
        "items": [
            {"id": keep_id, "item_name": "Keep", "quantity": 2, "unit_price": 100},
            {"item_name": "New", "quantity": 3, "unit_price": 50},
        ],
    })

    assert resp.status_code == 200
    result = resp.json()
    assert result["order"]["notes"] == "revised"
    assert sorted(line["item_name"] for line in result["items"]) == ["Keep", "New"]
    assert Decimal(result["order"]["total_amount"]) == Decimal("350")


def test_status_follows_workflow(client):
    po_id = _create_order(client, [])["order"]["id"]

    for target in ["pending", "approved", "ordered", "received"]:
        resp = client.put(f"/api/purchase-orders/{po_id}", json={"order": {"status": target}})
        assert resp.status_code == 200, resp.text
        assert resp.json()["order"]["status"] == target


def test_invalid_status_transition_is_conflict(client):
    po_id = _create_order(client, [])["order"]["id"]

    resp = client.put(f"/api/purchase-orders/{po_id}", json={"order": {"status": "received"}})

    assert resp.status_code == 409
    assert client.get(f"/api/purchase-orders/{po_id}").json()["order"]["status"] == "draft"


def test_canceled_order_lines_are_frozen(client):
    body = _create_order(client, [{"item_name": "Cable", "quantity": 1, "unit_price": 10}])
    po_id = body["order"]["id"]
    assert client.put(f"/api/purchase-orders/{po_id}", json={"order": {"status": "canceled"}}).status_code == 200

    resp = client.post(f"/api/purchase-orders/{po_id}/items", json={"item_name": "More", "quantity": 1})

    assert resp.status_code == 409


@pytest.mark.parametrize("current,target,changes", [
    (PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.PENDING, True),
    (PurchaseOrderStatus.PENDING, PurchaseOrderStatus.DRAFT, True),
    (PurchaseOrderStatus.ORDERED, PurchaseOrderStatus.CANCELED, True),
    (PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.APPROVED, False),
])
def test_allowed_transitions(current, target, changes):
    assert check_status_transition(current, target) is changes


@pytest.mark.parametrize("current,target", [
    (PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELED),
    (PurchaseOrderStatus.CANCELED, PurchaseOrderStatus.DRAFT),
    (PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.PENDING),
])
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidStatusTransitionError):
        check_status_transition(current, target)


def test_vendor_fields_copied_from_vendor(client):
    vendor = client.post("/api/vendors", json={
        "name": "Busan Lighting", "phone": "051-111-2222", "email": "orders@busanlight.co.kr",
    }).json()

    order = {key: value for key, value in ORDER.items() if not key.startswith("vendor_")}
    resp = client.post("/api/purchase-orders", json={"order": {**order, "vendor_id": vendor["id"]}, "items": []})

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["order"]["vendor_id"] == vendor["id"]
    assert body["order"]["vendor_name"] == "Busan Lighting"
    assert body["order"]["vendor_contact"] == "051-111-2222"
    assert body["order"]["vendor_email"] == "orders@busanlight.co.kr"


def test_vendor_name_required_without_vendor(client):
    order = {key: value for key, value in ORDER.items() if key != "vendor_name"}
    resp = client.post("/api/purchase-orders", json={"order": order, "items": []})
    assert resp.status_code == 400


def test_list_and_filter_by_status(client):
    first = _create_order(client, [])["order"]["id"]
    _create_order(client, [])
    client.put(f"/api/purchase-orders/{first}", json={"order": {"status": "pending"}})

    pending = client.get("/api/purchase-orders", params={"status": "pending"}).json()

    assert [order["id"] for order in pending] == [first]
    assert len(client.get("/api/purchase-orders").json()) == 2


def test_delete_order_removes_lines(client):
    po_id = _create_order(client, [{"item_name": "Cable", "quantity": 1, "unit_price": 10}])["order"]["id"]

    assert client.delete(f"/api/purchase-orders/{po_id}").status_code == 204
    assert client.get(f"/api/purchase-orders/{po_id}").status_code == 404
    assert client.delete(f"/api/purchase-orders/{po_id}").status_code == 404


def test_deleting_inventory_item_unlinks_order_lines(client, make_item):
    item = make_item(name="Switch", unit_price=3000)
    body = _create_order(client, [{"item_id": item["id"], "item_name": "Switch", "quantity": 1}])

    assert client.delete(f"/api/items/{item['id']}").status_code == 204

    line = client.get(f"/api/purchase-orders/{body['order']['id']}").json()["items"][0]
    assert line["item_id"] is None
    assert line["item_name"] == "Switch"
