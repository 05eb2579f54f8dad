from __future__ import annotations
from datetime import date


def _categories(client, headers):
    return {c["name"]: c for c in client.get("/api/categories", headers=headers).get_json()["categories"]}


def test_create_category_defaults(client, headers):
    rv = client.post("/api/categories", headers=headers, json={"name": "Pets"})
    assert rv.status_code == 200
    category = rv.get_json()["category"]
    assert category["color"] == "#6B7280"
    assert category["icon"] == "folder"


def test_create_category_rejects_bad_color(client, headers):
    rv = client.post("/api/categories", headers=headers, json={"name": "Pets", "color": "red"})
    assert rv.status_code == 400
    assert rv.get_json()["details"][0].startswith("color")


def test_update_category_requires_name(client, headers):
    cat = _categories(client, headers)["Housing"]
    assert client.put(f"/api/categories/{cat['id']}", headers=headers, json={"color": "#000000"}).status_code == 400
    rv = client.put(f"/api/categories/{cat['id']}", headers=headers, json={"name": "Home", "color": "#000000"})
    assert rv.status_code == 200
    updated = rv.get_json()["category"]
    assert (updated["name"], updated["color"], updated["icon"]) == ("Home", "#000000", "home")


def test_delete_reassigns_bills_to_other(client, headers):
    cats = _categories(client, headers)
    bill = client.post("/api/bills", headers=headers, json={
        "name": "Rent", "amount": 900, "due_date": "2030-01-01", "category_id": cats["Housing"]["id"],
    }).get_json()["bill"]

    rv = client.delete(f"/api/categories/{cats['Housing']['id']}", headers=headers)
    assert rv.status_code == 200
    assert rv.get_json()["reassigned"] == 1
    moved = client.get(f"/api/bills/{bill['id']}", headers=headers).get_json()["bill"]
    assert moved["category_id"] == cats["Other"]["id"]

    # deleting "Other" itself leaves its bills uncategorised
    client.delete(f"/api/categories/{cats['Other']['id']}", headers=headers)
    moved = client.get(f"/api/bills/{bill['id']}", headers=headers).get_json()["bill"]
    assert moved["category_id"] is None


def test_delete_unknown_category(client, headers):
    rv = client.delete("/api/categories/does-not-exist", headers=headers)
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Category not found"


def test_category_statistics_percentages(client, headers):
    cats = _categories(client, headers)
    today = date.today().isoformat()
    for name, amount in [("Utilities", 1), ("Utilities", 1), ("Housing", 1)]:
        client.post("/api/bills", headers=headers, json={
            "name": name, "amount": amount, "due_date": today, "category_id": cats[name]["id"],
        })

    body = client.get("/api/categories/statistics?timeRange=30d", headers=headers).get_json()
    assert body["totalAmount"] == 3
    rows = {r["name"]: r for r in body["categories"]}
    assert body["categories"][0]["name"] == "Utilities"
    assert rows["Utilities"]["percentage"] == 67
    assert rows["Utilities"]["bill_count"] == 2
    assert rows["Housing"]["percentage"] == 33
    assert rows["Insurance"]["percentage"] == 0
    assert len(rows) == 5


def test_category_statistics_empty(client, headers):
    body = client.get("/api/categories/statistics", headers=headers).get_json()
    assert body["totalAmount"] == 0
    assert all(r["percentage"] == 0 for r in body["categories"])
