from __future__ import annotations
import io
import os


def _metadata(**overrides):
    payload = {
        "file_name": "invoice.pdf",
        "file_type": "application/pdf",
        "file_size": 2048,
        "file_path": "/storage/invoice.pdf",
    }
    payload.update(overrides)
    return payload


def test_create_from_metadata_and_list(client, headers):
    rv = client.post("/api/documents", headers=headers, json=_metadata())
    assert rv.status_code == 200
    doc = rv.get_json()["document"]
    assert doc["ocr_processed"] is False
    assert doc["bill_name"] is None

    docs = client.get("/api/documents", headers=headers).get_json()["documents"]
    assert [d["id"] for d in docs] == [doc["id"]]


def test_create_requires_fields(client, headers):
    rv = client.post("/api/documents", headers=headers, json={"file_name": "x.pdf"})
    assert rv.status_code == 400
    fields = {d.split(":")[0] for d in rv.get_json()["details"]}
    assert fields == {"file_type", "file_size", "file_path"}


def test_create_with_unknown_bill(client, headers):
    rv = client.post("/api/documents", headers=headers, json=_metadata(bill_id="missing"))
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "Bill not found"


def test_list_filtered_by_bill(client, headers):
    bill = client.post("/api/bills", headers=headers, json={
        "name": "Water", "amount": 20, "due_date": "2030-01-01",
    }).get_json()["bill"]
    client.post("/api/documents", headers=headers, json=_metadata(bill_id=bill["id"]))
    client.post("/api/documents", headers=headers, json=_metadata(file_name="other.pdf"))
    docs = client.get(f"/api/documents?bill_id={bill['id']}", headers=headers).get_json()["documents"]
    assert [(d["file_name"], d["bill_name"]) for d in docs] == [("invoice.pdf", "Water")]


def _upload(client, headers, name="my bill.pdf", content=b"%PDF-1.4 fake"):
    data = {"file": (io.BytesIO(content), name)}
    rv = client.post("/api/documents", headers=headers, data=data, content_type="multipart/form-data")
    assert rv.status_code == 200, rv.get_json()
    return rv.get_json()["document"]


def test_upload_and_delete_removes_file(client, app, headers):
    doc = _upload(client, headers)
    assert doc["file_name"] == "my bill.pdf"
    assert doc["file_size"] == len(b"%PDF-1.4 fake")
    assert not os.path.isabs(doc["file_path"])
    stored = os.path.join(app.config["UPLOAD_FOLDER"], doc["file_path"])
    assert os.path.isfile(stored)

    assert client.delete(f"/api/documents/{doc['id']}", headers=headers).status_code == 200
    assert not os.path.exists(stored)
    assert client.get(f"/api/documents/{doc['id']}", headers=headers).status_code == 404


def test_delete_leaves_other_users_upload(client, app, headers):
    from conftest import auth_headers, register
    doc = _upload(client, headers)
    stored = os.path.join(app.config["UPLOAD_FOLDER"], doc["file_path"])
    eve = auth_headers(register(client, email="eve@example.com"))

    for path in (doc["file_path"], os.path.realpath(stored)):
        copy = client.post("/api/documents", headers=eve, json=_metadata(file_path=path)).get_json()["document"]
        assert client.delete(f"/api/documents/{copy['id']}", headers=eve).status_code == 200
        assert os.path.isfile(stored)


def test_delete_keeps_file_still_referenced(client, app, headers):
    doc = _upload(client, headers)
    stored = os.path.join(app.config["UPLOAD_FOLDER"], doc["file_path"])
    twin = client.post("/api/documents", headers=headers,
                       json=_metadata(file_path=doc["file_path"])).get_json()["document"]

    assert client.delete(f"/api/documents/{doc['id']}", headers=headers).status_code == 200
    assert os.path.isfile(stored)

    assert client.delete(f"/api/documents/{twin['id']}", headers=headers).status_code == 200
    assert not os.path.exists(stored)


def test_upload_rejects_extension(client, headers):
    data = {"file": (io.BytesIO(b"#!/bin/sh"), "run.sh")}
    rv = client.post("/api/documents", headers=headers, data=data, content_type="multipart/form-data")
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "Validation failed"


def test_update_keeps_omitted_fields(client, headers):
    doc = client.post("/api/documents", headers=headers, json=_metadata()).get_json()["document"]
    rv = client.put(f"/api/documents/{doc['id']}", headers=headers, json={"file_name": "renamed.pdf"})
    assert rv.status_code == 200
    updated = rv.get_json()["document"]
    assert updated["file_name"] == "renamed.pdf"
    assert updated["file_type"] == "application/pdf"
    assert updated["ocr_processed"] is False


def test_ocr_then_create_bill(client, headers):
    doc = client.post("/api/documents", headers=headers, json=_metadata()).get_json()["document"]

    rv = client.post(f"/api/documents/{doc['id']}/create-bill", headers=headers)
    assert rv.status_code == 400

    rv = client.post(f"/api/documents/{doc['id']}/ocr", headers=headers)
    assert rv.status_code == 200
    ocr = rv.get_json()["ocr_data"]
    assert ocr["extracted"]["vendor"] == "ACME Utilities"
    assert ocr["extracted"]["amount"] == 85.5
    assert ocr["confidence"] == 0.92

    stored = client.get(f"/api/documents/{doc['id']}", headers=headers).get_json()["document"]
    assert stored["ocr_processed"] is True

    rv = client.post(f"/api/documents/{doc['id']}/create-bill", headers=headers)
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["bill"]["name"] == "ACME Utilities"
    assert body["bill"]["due_date"] == "2025-04-15"
    assert body["bill"]["status"] == "unpaid"
    assert body["bill"]["notes"] == "Invoice #12345"
    assert body["document"]["bill_id"] == body["bill"]["id"]


def test_documents_scoped_to_owner(client, headers):
    from conftest import auth_headers, register
    doc = client.post("/api/documents", headers=headers, json=_metadata()).get_json()["document"]
    other = auth_headers(register(client, email="eve@example.com"))
    assert client.get(f"/api/documents/{doc['id']}", headers=other).status_code == 404
    assert client.post(f"/api/documents/{doc['id']}/ocr", headers=other).status_code == 404


def test_create_bill_links_document_in_one_commit(client, headers):
    from sqlalchemy import event
    from sqlalchemy.orm import Session

    doc = client.post("/api/documents", headers=headers, json=_metadata()).get_json()["document"]
    client.post(f"/api/documents/{doc['id']}/ocr", headers=headers)

    commits = []

    def on_commit(session):
        commits.append(session)

    event.listen(Session, "after_commit", on_commit)
    try:
        rv = client.post(f"/api/documents/{doc['id']}/create-bill", headers=headers)
    finally:
        event.remove(Session, "after_commit", on_commit)
    assert rv.status_code == 200
    assert len(commits) == 1

    bill_id = rv.get_json()["bill"]["id"]
    stored = client.get(f"/api/documents/{doc['id']}", headers=headers).get_json()["document"]
    assert stored["bill_id"] == bill_id
    assert stored["bill_name"] == "ACME Utilities"
