from __future__ import annotations
from datetime import date, timedelta
from conftest import auth_headers, register


def _create(client, headers, **overrides):
    payload = {"name": "Electric", "amount": 80.5, "due_date": "2030-01-15", "status": "unpaid"}
    payload.update(overrides)
    rv = client.post("/api/bills", headers=headers, json=payload)
    assert rv.status_code == 200, rv.get_json()
    return rv.get_json()["bill"]


def _category_id(client, headers, name):
    cats = client.get("/api/categories", headers=headers).get_json()["categories"]
    return next(c["id"] for c in cats if c["name"] == name)


def test_create_bill_enriched_with_category(client, headers):
    cat_id = _category_id(client, headers, "Utilities")
    bill = _create(client, headers, category_id=cat_id, notes="<b>meter</b>")
    assert bill["category_name"] == "Utilities"
    assert bill["category_color"] == "#3B82F6"
    assert bill["notes"] == "&lt;b&gt;meter&lt;&#x2F;b&gt;"
    assert bill["paid_at"] is None


def test_create_bill_validation(client, headers):
    rv = client.post("/api/bills", headers=headers, json={"name": "X", "amount": -5, "due_date": "soon", "status": "late"})
    assert rv.status_code == 400
    fields = {d.split(":")[0] for d in rv.get_json()["details"]}
    assert {"amount", "due_date", "status"} <= fields


def test_create_bill_rejects_foreign_category(client, headers):
    other = auth_headers(register(client, email="eve@example.com"))
    foreign = _category_id(client, other, "Housing")
    rv = client.post("/api/bills", headers=headers,
                     json={"name": "Rent", "amount": 900, "due_date": "2030-02-01", "category_id": foreign})
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Category not found"


def test_bills_are_scoped_to_owner(client, headers):
    bill = _create(client, headers)
    other = auth_headers(register(client, email="eve@example.com"))
    assert client.get(f"/api/bills/{bill['id']}", headers=other).status_code == 404
    assert client.get("/api/bills", headers=other).get_json()["bills"] == []
    rv = client.delete(f"/api/bills/{bill['id']}", headers=other)
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Bill not found"


def test_list_filters_and_sorting(client, headers):
    _create(client, headers, name="B", amount=20, due_date="2030-01-10")
    _create(client, headers, name="A", amount=50, due_date="2030-03-10", status="paid")
    _create(client, headers, name="C", amount=10, due_date="2030-02-10")

    names = [b["name"] for b in client.get("/api/bills", headers=headers).get_json()["bills"]]
    assert names == ["B", "C", "A"]

    rv = client.get("/api/bills?sort_by=amount&sort_order=desc", headers=headers)
    assert [b["name"] for b in rv.get_json()["bills"]] == ["A", "B", "C"]

    # unknown sort column falls back to due date
    rv = client.get("/api/bills?sort_by=amount%3Bdrop%20table%20bills&sort_order=sideways", headers=headers)
    assert [b["name"] for b in rv.get_json()["bills"]] == ["B", "C", "A"]

    rv = client.get("/api/bills?status=paid", headers=headers)
    assert [b["name"] for b in rv.get_json()["bills"]] == ["A"]

    rv = client.get("/api/bills?from=2030-02-01&to=2030-02-28", headers=headers)
    assert [b["name"] for b in rv.get_json()["bills"]] == ["C"]


def test_csv_export(client, headers):
    _create(client, headers, name="Water", amount=12)
    rv = client.get("/api/bills?format=csv", headers=headers)
    assert rv.status_code == 200
    assert rv.mimetype == "text/csv"
    lines = rv.get_data(as_text=True).strip().splitlines()
    assert lines[0].startswith("name,amount,due_date,status")
    assert lines[1].startswith("Water,12.00,2030-01-15,unpaid")


def test_get_bill_with_documents(client, headers):
    bill = _create(client, headers)
    client.post("/api/documents", headers=headers, json={
        "file_name": "scan.pdf", "file_type": "application/pdf", "file_size": 100,
        "file_path": "/tmp/scan.pdf", "bill_id": bill["id"],
    })
    body = client.get(f"/api/bills/{bill['id']}", headers=headers).get_json()
    assert body["bill"]["id"] == bill["id"]
    assert [d["file_name"] for d in body["documents"]] == ["scan.pdf"]


def test_update_is_partial(client, headers):
    bill = _create(client, headers, notes="keep me")
    rv = client.put(f"/api/bills/{bill['id']}", headers=headers, json={"amount": 99.99})
    assert rv.status_code == 200
    updated = rv.get_json()["bill"]
    assert updated["amount"] == 99.99
    assert updated["name"] == "Electric"
    assert updated["notes"] == "keep me"

    rv = client.put(f"/api/bills/{bill['id']}", headers=headers, json={"status": "paid"})
    assert rv.get_json()["bill"]["paid_at"] is not None
    rv = client.put(f"/api/bills/{bill['id']}", headers=headers, json={"status": "unpaid"})
    assert rv.get_json()["bill"]["paid_at"] is None


def test_delete_detaches_documents(client, headers):
    bill = _create(client, headers)
    doc = client.post("/api/documents", headers=headers, json={
        "file_name": "scan.pdf", "file_type": "application/pdf", "file_size": 100,
        "file_path": "/tmp/scan.pdf", "bill_id": bill["id"],
    }).get_json()["document"]
    assert client.delete(f"/api/bills/{bill['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/bills/{bill['id']}", headers=headers).status_code == 404
    assert client.get(f"/api/documents/{doc['id']}", headers=headers).get_json()["document"]["bill_id"] is None


def test_pay_recurring_bill_creates_next_occurrence(client, headers):
    bill = _create(client, headers, due_date="2030-01-31", recurrence="monthly")
    rv = client.post(f"/api/bills/{bill['id']}/pay", headers=headers, json={})
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["bill"]["status"] == "paid"
    assert body["bill"]["paid_at"]
    assert body["next_bill"]["due_date"] == "2030-02-28"
    assert body["next_bill"]["status"] == "unpaid"
    assert body["next_bill"]["recurrence"] == "monthly"

    # paying again does not spawn a second occurrence
    again = client.post(f"/api/bills/{bill['id']}/pay", headers=headers, json={}).get_json()
    assert again["next_bill"] is None
    assert len(client.get("/api/bills", headers=headers).get_json()["bills"]) == 2


def test_pay_one_time_bill_with_payment_method(client, headers):
    method = client.post("/api/payment-methods", headers=headers, json={
        "name": "Visa", "type": "credit", "details": {"card_number": "4111 1111 1111 1234"},
    }).get_json()["paymentMethod"]
    bill = _create(client, headers)
    body = client.post(f"/api/bills/{bill['id']}/pay", headers=headers,
                       json={"payment_method_id": method["id"]}).get_json()
    assert body["next_bill"] is None
    assert body["bill"]["payment_method_name"] == "Visa"


def test_upcoming_includes_overdue(client, headers):
    today = date.today()
    _create(client, headers, name="Soon", due_date=(today + timedelta(days=3)).isoformat())
    _create(client, headers, name="Later", due_date=(today + timedelta(days=30)).isoformat())
    _create(client, headers, name="Late", due_date=(today - timedelta(days=3)).isoformat(), status="overdue")
    _create(client, headers, name="Done", due_date=(today + timedelta(days=1)).isoformat(), status="paid")

    names = [b["name"] for b in client.get("/api/bills/upcoming", headers=headers).get_json()["bills"]]
    assert names == ["Late", "Soon"]
    names = [b["name"] for b in client.get("/api/bills/upcoming?days=60", headers=headers).get_json()["bills"]]
    assert names == ["Late", "Soon", "Later"]


def test_statistics(client, headers):
    today = date.today()
    utilities = _category_id(client, headers, "Utilities")
    _create(client, headers, name="Power", amount=100, due_date=today.isoformat(), category_id=utilities, status="paid")
    _create(client, headers, name="Gas", amount=50, due_date=today.isoformat(), category_id=utilities)
    _create(client, headers, name="Old", amount=999, due_date=(today - timedelta(days=200)).isoformat())

    stats = client.get("/api/bills/statistics?timeRange=7d", headers=headers).get_json()
    assert stats["total"] == 150
    assert stats["paid"] == 100
    assert stats["unpaid"] == 50
    assert stats["categories"][0]["name"] == "Utilities"
    assert stats["categories"][0]["total"] == 150
    assert stats["monthly"] == [{"month": today.strftime("%Y-%m"), "total": 150.0, "paid": 100.0, "unpaid": 50.0}]

    yearly = client.get("/api/bills/statistics?timeRange=1y", headers=headers).get_json()
    assert yearly["total"] == 1149
    # unknown ranges use the 30 day default
    assert client.get("/api/bills/statistics?timeRange=forever", headers=headers).get_json()["total"] == 150


def test_mark_overdue_sweep(client, app, headers):
    from billtracker.tasks.jobs import mark_overdue_bills
    past = (date.today() - timedelta(days=1)).isoformat()
    bill = _create(client, headers, due_date=past)
    paid = _create(client, headers, due_date=past, status="paid")
    with app.app_context():
        assert mark_overdue_bills() == 1
    assert client.get(f"/api/bills/{bill['id']}", headers=headers).get_json()["bill"]["status"] == "overdue"
    assert client.get(f"/api/bills/{paid['id']}", headers=headers).get_json()["bill"]["status"] == "paid"
