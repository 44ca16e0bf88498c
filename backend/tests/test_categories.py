def test_create_and_list_categories(client):
    resp = client.post("/api/categories", json={"name": "통신자재 종류", "color": "#8A3FFC"})
    assert resp.status_code == 201
    created = resp.json()
    assert created["color"] == "#8A3FFC"

    listed = client.get("/api/categories").json()
    assert [category["name"] for category in listed] == ["통신자재 종류"]


def test_default_color(client):
    resp = client.post("/api/categories", json={"name": "Misc"})
    assert resp.json()["color"] == "#0062FF"


def test_duplicate_category_name_is_rejected(client, category):
    resp = client.post("/api/categories", json={"name": category["name"]})
    assert resp.status_code == 400


def test_category_name_is_required(client):
    resp = client.post("/api/categories", json={"description": "no name"})
    assert resp.status_code == 400
    assert "name" in resp.json()["detail"]


def test_update_category(client, category):
    resp = client.put(f"/api/categories/{category['id']}", json={"description": "updated"})
    assert resp.status_code == 200
    assert resp.json()["description"] == "updated"
    assert resp.json()["name"] == category["name"]


def test_rename_to_existing_name_is_rejected(client, category):
    other = client.post("/api/categories", json={"name": "Other"}).json()
    resp = client.put(f"/api/categories/{other['id']}", json={"name": category["name"]})
    assert resp.status_code == 400


def test_delete_category_in_use_is_refused(client, category, make_item):
    make_item()

    resp = client.delete(f"/api/categories/{category['id']}")

    assert resp.status_code == 400
    assert "in use" in resp.json()["detail"]
    assert client.get(f"/api/categories/{category['id']}").status_code == 200


def test_delete_unused_category(client, category):
    resp = client.delete(f"/api/categories/{category['id']}")

    assert resp.status_code == 204
    assert client.get(f"/api/categories/{category['id']}").status_code == 404


def test_delete_missing_category(client):
    assert client.delete("/api/categories/123").status_code == 404


def test_initialize_default_categories_is_idempotent(client, category):
    first = client.post("/api/categories/initialize-defaults")
    assert first.status_code == 201
    # "케이블 종류" already exists from the fixture
    assert len(first.json()) == 3

    second = client.post("/api/categories/initialize-defaults")
    assert second.json() == []
    assert len(client.get("/api/categories").json()) == 4


def test_items_by_category(client, category, make_item):
    item = make_item()
    other = client.post("/api/categories", json={"name": "Lamps"}).json()
    make_item(name="Lamp", category_id=other["id"])

    resp = client.get(f"/api/items/category/{category['id']}")

    assert resp.status_code == 200
    assert [row["id"] for row in resp.json()] == [item["id"]]
    assert resp.json()[0]["category_name"] == category["name"]
    assert client.get("/api/items/category/999").status_code == 404
