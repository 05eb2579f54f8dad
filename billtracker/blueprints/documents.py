"""Documents API (scanned bills and attachments):
- GET    /api/documents?bill_id=
- GET    /api/documents/<id>
- POST   /api/documents                     JSON metadata or multipart upload
- PUT    /api/documents/<id>
- DELETE /api/documents/<id>
- POST   /api/documents/<id>/ocr             run text extraction
- POST   /api/documents/<id>/create-bill     new bill from the extracted fields
"""
from __future__ import annotations
import os
import uuid
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.utils import secure_filename

from ..errors import BillTrackerError, NotFoundError, ValidationFailed
from ..repositories import BillRepository, DocumentRepository
from ..schemas import DocumentCreateSchema, DocumentUpdateSchema
from ..services import BillService, OcrService
from ..utils.helpers import allowed_file, api_error
from ..utils.logging_utils import get_logger
from ..utils.security import current_user_id, sanitize_input

bp = Blueprint("documents", __name__)
logger = get_logger("documents")


def _get_owned(repo: DocumentRepository, document_id: str):
    document = repo.get_by_id(document_id)
    if document is None:
        raise NotFoundError("Document")
    return document


def _check_bill(user_id: str, bill_id):
    if bill_id and BillRepository(user_id).get_by_id(bill_id) is None:
        raise NotFoundError("Bill")


def _save_upload(user_id: str):
    """Store the multipart ``file`` under UPLOAD_FOLDER/<user_id>/ and describe it.

    ``file_path`` is relative to UPLOAD_FOLDER.
    """
    f = request.files["file"]
    if not f.filename:
        raise ValidationFailed(["file: empty file name"])
    if not allowed_file(f.filename):
        raise ValidationFailed(["file: file type not allowed"])
    target_dir = os.path.join(current_app.config["UPLOAD_FOLDER"], user_id)
    os.makedirs(target_dir, exist_ok=True)
    filename = secure_filename(f.filename) or "upload"
    relative_path = f"{user_id}/{uuid.uuid4().hex[:12]}_{filename}"
    save_path = os.path.join(current_app.config["UPLOAD_FOLDER"], relative_path)
    f.save(save_path)
    return {
        "file_name": sanitize_input(f.filename),
        "file_type": f.mimetype or "application/octet-stream",
        "file_size": os.path.getsize(save_path),
        "file_path": relative_path,
        "bill_id": request.form.get("bill_id") or None,
    }


def _remove_stored_file(repo: DocumentRepository, path: str) -> None:
    """Unlink a deleted document's file if it sits in its owner's upload dir and nothing else uses it."""
    upload_root = os.path.realpath(current_app.config["UPLOAD_FOLDER"])
    owner_root = os.path.join(upload_root, repo.user_id)
    real = os.path.realpath(os.path.join(upload_root, path))
    if os.path.commonpath([owner_root, real]) != owner_root or not os.path.isfile(real):
        return
    if repo.path_in_use({path, real, os.path.relpath(real, upload_root)}):
        return
    try:
        os.remove(real)
    except OSError as e:
        logger.warning("Could not remove %s: %s", real, e)


@bp.route("/api/documents")
@jwt_required()
@api_error("fetching documents")
def list_documents():
    repo = DocumentRepository(current_user_id())
    documents = repo.list_recent(bill_id=request.args.get("bill_id") or None)
    return jsonify({"documents": [d.to_dict() for d in documents]})


@bp.route("/api/documents/<document_id>")
@jwt_required()
@api_error("fetching the document")
def get_document(document_id: str):
    repo = DocumentRepository(current_user_id())
    return jsonify({"document": _get_owned(repo, document_id).to_dict()})


@bp.route("/api/documents", methods=["POST"])
@jwt_required()
@api_error("creating the document")
def create_document():
    user_id = current_user_id()
    if "file" in request.files:
        data = _save_upload(user_id)
    else:
        data = DocumentCreateSchema.from_request().model_dump()
    _check_bill(user_id, data.get("bill_id"))
    repo = DocumentRepository(user_id)
    document = repo.create(**data)
    repo.commit()
    logger.info("Document %s stored for user %s", document.id, user_id)
    return jsonify({"message": "Document created successfully", "document": document.to_dict()})


@bp.route("/api/documents/<document_id>", methods=["PUT"])
@jwt_required()
@api_error("updating the document")
def update_document(document_id: str):
    data = DocumentUpdateSchema.from_request()
    user_id = current_user_id()
    repo = DocumentRepository(user_id)
    document = _get_owned(repo, document_id)
    changes = data.model_dump(exclude_unset=True)
    _check_bill(user_id, changes.get("bill_id"))
    # omitted or null fields keep their stored values
    repo.update(document, **{k: v for k, v in changes.items() if v is not None or k == "bill_id"})
    repo.commit()
    return jsonify({"message": "Document updated successfully", "document": document.to_dict()})


@bp.route("/api/documents/<document_id>", methods=["DELETE"])
@jwt_required()
@api_error("deleting the document")
def delete_document(document_id: str):
    repo = DocumentRepository(current_user_id())
    document = _get_owned(repo, document_id)
    path = document.file_path
    repo.delete(document)
    repo.commit()
    _remove_stored_file(repo, path)
    return jsonify({"message": "Document deleted successfully"})


@bp.route("/api/documents/<document_id>/ocr", methods=["POST"])
@jwt_required()
@api_error("processing the document")
def process_document(document_id: str):
    repo = DocumentRepository(current_user_id())
    document = _get_owned(repo, document_id)
    ocr_data = OcrService.process(document)
    repo.commit()
    return jsonify({"message": "Document processed successfully", "ocr_data": ocr_data})


@bp.route("/api/documents/<document_id>/create-bill", methods=["POST"])
@jwt_required()
@api_error("creating a bill from the document")
def create_bill_from_document(document_id: str):
    user_id = current_user_id()
    repo = DocumentRepository(user_id)
    document = _get_owned(repo, document_id)
    if not document.ocr_processed:
        raise BillTrackerError("Document has not been processed with OCR")
    fields = OcrService.bill_fields(document.ocr_data)
    if fields is None:
        raise BillTrackerError("OCR data does not contain a vendor, amount and due date")

    bill = BillService(user_id).create_from_document(document, fields)
    return jsonify({"message": "Bill created from document", "bill": bill.to_dict(), "document": document.to_dict()})
