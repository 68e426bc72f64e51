"""Vendor master: admin CRUD, spreadsheet bulk insert, GSTIN autofill lookup."""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vendor_portal.api.deps import get_db, get_current_user, require_roles
from vendor_portal.core.exceptions import BusinessError
from vendor_portal.core.permissions import ADMIN
from vendor_portal.models.user import User
from vendor_portal.schemas.vendor import (
    BulkCreateRequest,
    BulkCreateResult,
    VendorCreate,
    VendorResponse,
    VendorUpdate,
)
from vendor_portal.services import vendor_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _load(db: Session, vendor_id: str):
    vendor = vendor_service.get_vendor(db, vendor_id)
    if not vendor:
        raise BusinessError.not_found("Vendor", reason=f"id={vendor_id}")
    return vendor


@router.get("/vendor")
def list_vendors(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """All vendors, by vendor code."""
    vendors = vendor_service.list_vendors(db)
    return {"vendors": [VendorResponse.model_validate(v) for v in vendors]}


@router.get("/vendor/gst/{gst_number}")
def vendor_by_gst(gst_number: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Autofill lookup for the submission form."""
    vendor = vendor_service.find_by_gst(db, gst_number)
    if not vendor:
        raise BusinessError.not_found("Vendor", reason=f"gst={gst_number}")
    return {"vendor": VendorResponse.model_validate(vendor)}


@router.post("/vendor", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
def create_vendor(
    data: VendorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    try:
        return vendor_service.create_vendor(db, data, current_user)
    except vendor_service.VendorExists as e:
        db.rollback()
        raise BusinessError.conflict(str(e))
    except ValueError as e:
        raise BusinessError.bad_request(str(e))


@router.post("/vendor/bulk-create", response_model=BulkCreateResult)
def bulk_create_vendors(
    data: BulkCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    """Insert spreadsheet rows; invalid or duplicate rows are skipped and listed."""
    if not data.vendors:
        raise BusinessError.bad_request("No vendors to import")
    created, skipped = vendor_service.bulk_create(db, data.vendors, current_user)
    return BulkCreateResult(
        message=f"{created} vendor(s) created, {len(skipped)} skipped",
        created=created,
        skipped=skipped,
    )


# The admin page historically PUTs to /<id>; /vendor/<id> is the tidy alias
@router.put("/vendor/{vendor_id}", response_model=VendorResponse)
@router.put("/{vendor_id}", response_model=VendorResponse)
def update_vendor(
    vendor_id: str,
    data: VendorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    vendor = _load(db, vendor_id)
    return vendor_service.update_vendor(db, vendor, data, current_user)


@router.delete("/vendor/{vendor_id}")
def delete_vendor(
    vendor_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    vendor = _load(db, vendor_id)
    vendor_service.delete_vendor(db, vendor, current_user)
    return {"message": f"Deleted vendor {vendor_id}", "id": vendor_id}
