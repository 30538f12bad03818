"""Validation of uploaded verification documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage

from core.constants import DocumentType, FileUploadLimits
from core.exceptions import FileValidationError, ValidationError

logger = logging.getLogger(__name__)


def format_file_size(size_bytes: int) -> str:
    """Human readable file size."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def validate_document_type(doc_type: Optional[str]) -> DocumentType:
    try:
        return DocumentType(doc_type or "")
    except ValueError as exc:
        raise ValidationError(f"Invalid document type: {doc_type!r}") from exc


def validate_file_size(file_size: int, max_size: int = FileUploadLimits.MAX_DOCUMENT_SIZE) -> None:
    """
    Raises:
        FileValidationError: If the file is larger than ``max_size``
    """
    if file_size > max_size:
        raise FileValidationError(
            f"File is too large ({format_file_size(file_size)}); "
            f"maximum is {format_file_size(max_size)}"
        )


def file_extension(filename: Optional[str]) -> str:
    """Lower-case extension including the dot, empty when there is none."""
    return Path(filename or "").suffix.lower()


def validate_image_upload(upload: Optional[FileStorage]) -> str:
    """Check that ``upload`` is a non-empty image file.

    Returns:
        The file extension to store the image under

    Raises:
        FileValidationError: If the file is missing or not an image
    """
    if upload is None or not upload.filename:
        raise FileValidationError("No file uploaded")

    mimetype = upload.mimetype or ""
    if not mimetype.startswith("image/"):
        raise FileValidationError("Only image files are accepted")

    extension = file_extension(upload.filename)
    if extension not in FileUploadLimits.ALLOWED_IMAGE_EXTENSIONS:
        logger.warning("Rejected upload with extension %r (%s)", extension, mimetype)
        raise FileValidationError(f"Unsupported image extension: {extension or 'none'}")
    return extension
