"""
Upload proxy: the only path from a client to object storage.

Clients never hold bucket credentials. A file is validated (MIME type, size,
field name) and stored; the response carries the key and public URL the
client then puts into the invoice's `pdfs` lists.

Each stored file is recorded against its uploader. Only that vendor may
delete it, and only until an invoice references it.
"""
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from vendor_portal.api.deps import get_db, require_roles
from vendor_portal.core.config import settings
from vendor_portal.core.exceptions import BusinessError
from vendor_portal.core.permissions import VENDOR
from vendor_portal.models.upload import Upload
from vendor_portal.models.user import User
from vendor_portal.services.storage_service import (
    PDF_CONTENT_TYPE,
    PDF_FIELDS,
    StorageBackend,
    StorageError,
    build_key,
    get_storage,
)

logger = logging.getLogger(__name__)
router = APIRouter()


class StoredFile(BaseModel):
    key: str
    url: str


class DeleteRequest(BaseModel):
    url: str


@router.post("/uploads", response_model=StoredFile, status_code=status.HTTP_201_CREATED)
def upload_pdf(
    file: UploadFile = File(...),
    field: str = Form(...),
    reupload: bool = Form(False),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: User = Depends(require_roles(VENDOR)),
):
    """Store one PDF under invoices/ (or invoices/reupload/)."""
    if field not in PDF_FIELDS:
        raise BusinessError.bad_request(f"Unknown document field: {field}")
    if file.content_type != PDF_CONTENT_TYPE:
        raise BusinessError.bad_request(f"{file.filename} is not a PDF file.")

    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise BusinessError.bad_request(f"{file.filename} is larger than {settings.MAX_UPLOAD_BYTES} bytes")

    key = build_key(field, file.filename, reupload=reupload)
    try:
        url = storage.put(key, data, PDF_CONTENT_TYPE)
    except StorageError as e:
        raise BusinessError.server_error(e)

    db.add(Upload(key=key, url=url, user_id=current_user.id))
    db.commit()
    logger.info(f"User {current_user.id} uploaded {key}")
    return StoredFile(key=key, url=url)


@router.delete("/uploads")
def delete_pdf(
    data: DeleteRequest,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: User = Depends(require_roles(VENDOR)),
):
    """Remove an uploaded-but-unsubmitted file (form clear / remove button)."""
    try:
        key = storage.key_from_url(data.url)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))

    upload = db.query(Upload).filter(Upload.key == key).first()
    if not upload or upload.user_id != current_user.id:
        raise BusinessError.forbidden(f"user {current_user.id} may not delete {key}")
    if upload.attached:
        raise BusinessError.conflict("File is attached to a submitted invoice and cannot be removed.")

    try:
        storage.delete(key)
    except StorageError as e:
        raise BusinessError.server_error(e)
    db.delete(upload)
    db.commit()
    logger.info(f"User {current_user.id} deleted {key}")
    return {"message": "File removed", "key": key}
