"""Verification document upload and retrieval."""

from __future__ import annotations

from pathlib import Path

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_login import login_required

from services.uploads import DocumentUploadService
from web.routes.common import get_admin_db

uploads_bp = Blueprint("uploads", __name__)


def _upload_dir() -> Path:
    return Path(current_app.config["UPLOAD_FOLDER"]).resolve()


@uploads_bp.route("/api/upload", methods=["POST"])
@login_required
def upload_document():
    service = DocumentUploadService(
        db=get_admin_db(),
        upload_dir=_upload_dir(),
        max_size=current_app.config["MAX_UPLOAD_SIZE"],
    )
    stored = service.store(
        request.files.get("file"),
        request.form.get("type"),
        user_id=request.form.get("userId") or None,
    )
    return jsonify(stored.to_dict())


@uploads_bp.route("/uploads/<path:filename>")
@login_required
def uploaded_file(filename: str):
    return send_from_directory(_upload_dir(), filename)
