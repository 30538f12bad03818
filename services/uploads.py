"""Storage of identity document images uploaded for verification."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from werkzeug.datastructures import FileStorage

from core import get_logger
from core.constants import FileUploadLimits
from database.admin_queries import AdminDatabase
from utils.file_validators import validate_document_type, validate_file_size, validate_image_upload

logger = get_logger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class StoredDocument:
    document_id: str
    doc_type: str
    url: str
    path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": "File uploaded successfully",
            "url": self.url,
            "type": self.doc_type,
            "documentId": self.document_id,
        }


def generate_filename(extension: str) -> str:
    """``<epoch-ms>_<random>.<ext>`` so concurrent uploads never collide."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(FileUploadLimits.RANDOM_SUFFIX_LENGTH))
    return f"{int(time.time() * 1000)}_{suffix}{extension}"


class DocumentUploadService:
    def __init__(
        self,
        db: AdminDatabase,
        upload_dir: Path,
        url_prefix: str = "/uploads",
        max_size: int = FileUploadLimits.MAX_DOCUMENT_SIZE,
    ) -> None:
        self.db = db
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size

    def store(self, upload: Optional[FileStorage], doc_type: Optional[str], user_id: Optional[str] = None) -> StoredDocument:
        """Validate, write to disk and record an uploaded document.

        Raises:
            ValidationError: Unknown document type
            FileValidationError: Missing, non-image or oversized file
        """
        validated_type = validate_document_type(doc_type)
        extension = validate_image_upload(upload)

        content = upload.read()
        validate_file_size(len(content), self.max_size)

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = generate_filename(extension)
        destination = self.upload_dir / filename
        destination.write_bytes(content)

        url = f"{self.url_prefix}/{filename}"
        try:
            document_id = self.db.insert_user_document(validated_type.value, url, user_id=user_id)
        except Exception:
            destination.unlink(missing_ok=True)
            raise
        logger.info("Stored %s document %s (%d bytes) as %s", validated_type.value, document_id, len(content), destination)
        return StoredDocument(document_id=document_id, doc_type=validated_type.value, url=url, path=destination)
