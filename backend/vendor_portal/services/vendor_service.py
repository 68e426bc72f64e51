"""Vendor master: CRUD, GSTIN lookup and spreadsheet bulk insert."""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from vendor_portal.core.audit import AuditLog
from vendor_portal.models.user import User
from vendor_portal.models.vendor import Vendor
from vendor_portal.schemas.vendor import BulkVendorRow, SkippedRow, VendorCreate, VendorUpdate

logger = logging.getLogger(__name__)

VENDOR_FIELDS = ("name", "address", "state", "gst_number", "pan")


class VendorExists(Exception):
    pass


def normalize_gst(gst_number: Optional[str]) -> Optional[str]:
    """GSTINs are compared upper-cased with surrounding whitespace removed."""
    if gst_number is None:
        return None
    return gst_number.strip().upper() or None


def list_vendors(db: Session) -> List[Vendor]:
    return db.query(Vendor).order_by(Vendor.id).all()


def get_vendor(db: Session, vendor_id: str) -> Optional[Vendor]:
    return db.query(Vendor).filter(Vendor.id == vendor_id).first()


def find_by_gst(db: Session, gst_number: str) -> Optional[Vendor]:
    gst = normalize_gst(gst_number)
    if not gst:
        return None
    return db.query(Vendor).filter(func.upper(Vendor.gst_number) == gst).order_by(Vendor.id).first()


def create_vendor(db: Session, data: VendorCreate, user: User) -> Vendor:
    vendor_id = data.id.strip()
    if not vendor_id:
        raise ValueError("Vendor ID cannot be empty")
    if get_vendor(db, vendor_id):
        raise VendorExists(f"Vendor {vendor_id} already exists")

    vendor = Vendor(id=vendor_id, **{f: getattr(data, f) for f in VENDOR_FIELDS})
    vendor.gst_number = normalize_gst(vendor.gst_number)
    db.add(vendor)
    AuditLog.log_vendor_event(db, "vendor_created", user, vendor_id=vendor.id, gst_number=vendor.gst_number)
    db.commit()
    db.refresh(vendor)
    return vendor


def update_vendor(db: Session, vendor: Vendor, data: VendorUpdate, user: User) -> Vendor:
    changes = {}
    for field in VENDOR_FIELDS:
        value = getattr(data, field)
        if value is None:
            continue
        if field == "gst_number":
            value = normalize_gst(value)
        if value != getattr(vendor, field):
            changes[field] = value
            setattr(vendor, field, value)

    AuditLog.log_vendor_event(
        db, "vendor_updated", user, vendor_id=vendor.id, gst_number=vendor.gst_number, changes=changes
    )
    db.commit()
    db.refresh(vendor)
    return vendor


def delete_vendor(db: Session, vendor: Vendor, user: User) -> None:
    """Hard delete. Invoices keep their own copy of the vendor fields."""
    AuditLog.log_vendor_event(db, "vendor_deleted", user, vendor_id=vendor.id, gst_number=vendor.gst_number)
    db.delete(vendor)
    db.commit()


def bulk_create(db: Session, rows: List[BulkVendorRow], user: User) -> tuple[int, List[SkippedRow]]:
    """
    Insert spreadsheet rows. Bad rows are skipped and reported, the rest commit.

    Row numbers are 1-based data rows (header excluded).
    """
    existing = {vid for (vid,) in db.query(Vendor.id).all()}
    seen = set()
    skipped: List[SkippedRow] = []
    created = 0

    for index, row in enumerate(rows, start=1):
        vendor_id = (row.id or "").strip()
        if not vendor_id:
            skipped.append(SkippedRow(row=index, id=None, reason="Missing ID"))
            continue
        if not row.name:
            skipped.append(SkippedRow(row=index, id=vendor_id, reason="Missing name"))
            continue
        if vendor_id in existing or vendor_id in seen:
            skipped.append(SkippedRow(row=index, id=vendor_id, reason="Duplicate ID"))
            continue

        vendor = Vendor(id=vendor_id, **{f: getattr(row, f) for f in VENDOR_FIELDS})
        vendor.gst_number = normalize_gst(vendor.gst_number)
        db.add(vendor)
        seen.add(vendor_id)
        created += 1

    if created:
        AuditLog.log_vendor_event(
            db, "vendor_bulk_created", user, changes={"created": created, "skipped": len(skipped)}
        )
    db.commit()
    logger.info(f"Bulk vendor import: {created} created, {len(skipped)} skipped")
    return created, skipped
