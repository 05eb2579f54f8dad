from __future__ import annotations
from datetime import date


def _create(client, headers, name, is_default=False, type_="credit"):
    rv = client.post("/api/payment-methods", headers=headers, json={
        "name": name, "type": type_, "details": {"card_number": "4111111111114321"}, "is_default": is_default,
    })
    assert rv.status_code == 200, rv.get_json()
    return rv.get_json()["paymentMethod"]


def test_create_keeps_only_last_four(client, headers):
    method = _create(client, headers, "Visa")
    assert method["details"] == {"last_four": "4321"}


def test_both_card_number_keys_are_dropped(client, headers):
    rv = client.post("/api/payment-methods", headers=headers, json={
        "name": "Amex", "type": "credit",
        "details": {"card_number": "378282246310005", "number": "4111111111111111", "bank": "Acme"},
    })
    assert rv.status_code == 200
    assert rv.get_json()["paymentMethod"]["details"] == {"last_four": "0005", "bank": "Acme"}


def test_create_validation(client, headers):
    rv = client.post("/api/payment-methods", headers=headers, json={"name": "X", "type": "barter", "details": {}})
    assert rv.status_code == 400
    fields = {d.split(":")[0] for d in rv.get_json()["details"]}
    assert fields == {"type", "details"}


def test_single_default_and_ordering(client, headers):
    _create(client, headers, "Zeta", is_default=True)
    _create(client, headers, "Alpha")
    _create(client, headers, "Beta", is_default=True)
    methods = client.get("/api/payment-methods", headers=headers).get_json()["paymentMethods"]
    assert [m["name"] for m in methods] == ["Beta", "Alpha", "Zeta"]
    assert [m["is_default"] for m in methods] == [True, False, False]


def test_update_switches_default(client, headers):
    first = _create(client, headers, "First", is_default=True)
    second = _create(client, headers, "Second")
    rv = client.put(f"/api/payment-methods/{second['id']}", headers=headers, json={
        "name": "Second", "type": "debit", "details": {"bank": "ACME"}, "is_default": True,
    })
    assert rv.status_code == 200
    methods = {m["id"]: m for m in client.get("/api/payment-methods", headers=headers).get_json()["paymentMethods"]}
    assert methods[second["id"]]["is_default"] is True
    assert methods[second["id"]]["type"] == "debit"
    assert methods[first["id"]]["is_default"] is False


def test_delete_detaches_bills_and_promotes_default(client, headers):
    default = _create(client, headers, "Default", is_default=True)
    other = _create(client, headers, "Other card")
    bill = client.post("/api/bills", headers=headers, json={
        "name": "Gym", "amount": 30, "due_date": "2030-01-01", "payment_method_id": default["id"],
    }).get_json()["bill"]

    rv = client.delete(f"/api/payment-methods/{default['id']}", headers=headers)
    assert rv.status_code == 200
    assert rv.get_json()["newDefaultId"] == other["id"]
    methods = client.get("/api/payment-methods", headers=headers).get_json()["paymentMethods"]
    assert [(m["id"], m["is_default"]) for m in methods] == [(other["id"], True)]
    assert client.get(f"/api/bills/{bill['id']}", headers=headers).get_json()["bill"]["payment_method_id"] is None


def test_statistics(client, headers):
    card = _create(client, headers, "Card")
    _create(client, headers, "Cash", type_="cash")
    today = date.today().isoformat()
    client.post("/api/bills", headers=headers, json={
        "name": "Phone", "amount": 40, "due_date": today, "payment_method_id": card["id"], "status": "paid",
    })
    body = client.get("/api/payment-methods/statistics", headers=headers).get_json()
    assert body["totalAmount"] == 40
    first = body["paymentMethods"][0]
    assert (first["name"], first["paid"], first["percentage"]) == ("Card", 40, 100)
    assert body["paymentMethods"][1]["percentage"] == 0
