"""
Object storage for invoice PDFs.

Key layout:
    invoices/<field>_<timestamp_ms>_<filename>            new submissions
    invoices/reupload/<field>_<timestamp_ms>_<filename>   corrections

Public URL for S3: https://<bucket>.s3.<region>.amazonaws.com/<key>
The API server holds the credentials; browsers and SDK clients go through
POST/DELETE /uploads.
"""
import logging
import os
import re
import time
from functools import lru_cache
from pathlib import Path
from typing import Optional

from vendor_portal.core.config import settings

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PDF_FIELDS = ("po_pdf", "invoice_pdf")


class StorageError(Exception):
    """Raised when the storage backend fails to store or delete an object."""


def safe_filename(filename: str) -> str:
    """Keep only the base name and characters that are safe in a URL path."""
    name = os.path.basename((filename or "").replace("\\", "/"))
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "document.pdf"


def build_key(field: str, filename: str, reupload: bool = False, now_ms: Optional[int] = None) -> str:
    if field not in PDF_FIELDS:
        raise ValueError(f"Unknown document field: {field}")
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    prefix = "invoices/reupload/" if reupload else "invoices/"
    return f"{prefix}{field}_{stamp}_{safe_filename(filename)}"


class StorageBackend:
    """Common URL handling. Subclasses implement _put and _delete."""

    base_url: str = ""

    def public_url(self, key: str) -> str:
        return f"{self.base_url}{key}"

    def key_from_url(self, url: str) -> str:
        """Strip the public prefix. URLs from another bucket are refused."""
        if not url.startswith(self.base_url):
            raise ValueError("URL does not belong to this storage bucket")
        key = url[len(self.base_url):]
        if not key.startswith("invoices/") or ".." in key.split("/"):
            raise ValueError("URL does not point at an invoice document")
        return key

    def put(self, key: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        try:
            self._put(key, data, content_type)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to store {key}") from e
        logger.info(f"Stored {key} ({len(data)} bytes)")
        return self.public_url(key)

    def delete(self, key: str) -> None:
        try:
            self._delete(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {key}") from e
        logger.info(f"Deleted {key}")

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Filesystem backend for development and tests; served under /files."""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = public_base_url.rstrip("/") + "/"

    def path_for(self, key: str) -> Path:
        return self.root / key

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _delete(self, key: str) -> None:
        # S3 DeleteObject is idempotent; mirror that
        self.path_for(key).unlink(missing_ok=True)


class S3Storage(StorageBackend):
    """Amazon S3 via boto3. Credentials come from the standard AWS chain."""

    def __init__(self, bucket: str, region: str, client=None):
        if not bucket:
            raise ValueError("S3_BUCKET_NAME must be set for the s3 storage backend")
        if client is None:
            import boto3
            client = boto3.client("s3", region_name=region)
        self.client = client
        self.bucket = bucket
        self.region = region
        self.base_url = f"https://{bucket}.s3.{region}.amazonaws.com/"

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    def _delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)


@lru_cache
def get_storage() -> StorageBackend:
    """FastAPI dependency; tests override it with a LocalStorage on tmp_path."""
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage(settings.S3_BUCKET_NAME, settings.AWS_REGION)
    return LocalStorage(settings.UPLOAD_DIR, settings.PUBLIC_FILES_URL)
