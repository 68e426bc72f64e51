"""
Invoice lifecycle: the only module that assigns `Invoice.status`.

STATE MACHINE:
    (new)              --submit-->            pending
    pending            --send_remark-->       changes_requested
    pending            --send_for_payment-->  sent_for_payment   (terminal)
    changes_requested  --reupload-->          pending

Anything else raises InvalidTransition. Every transition is committed together
with its audit entry.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from vendor_portal.core.audit import AuditLog
from vendor_portal.models.invoice import Invoice
from vendor_portal.models.upload import Upload
from vendor_portal.models.user import User
from vendor_portal.schemas.invoice import InvoiceCreate, PdfLists, ReuploadRequest

logger = logging.getLogger(__name__)

PDF_FIELDS = ("po_pdf", "invoice_pdf")

# Fields copied from the submission body onto the invoice row
SUBMITTED_FIELDS = (
    "name", "address", "state", "gst_number", "pan",
    "billing_location_til", "til_billing_address", "til_state",
    "po_number", "po_date", "cost_center", "sac_code", "service_desc",
    "taxable_amt", "gst_rate", "cgst", "sgst", "igst",
    "supply_place", "business_name",
)

# Subset a vendor may correct after a remark; identity stays as submitted
CORRECTABLE_FIELDS = SUBMITTED_FIELDS[5:]


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    CHANGES_REQUESTED = "changes_requested"
    SENT_FOR_PAYMENT = "sent_for_payment"


class Trigger(str, Enum):
    SUBMIT = "submit"
    SEND_REMARK = "send_remark"
    SEND_FOR_PAYMENT = "send_for_payment"
    REUPLOAD = "reupload"


TRANSITIONS: Dict[tuple, InvoiceStatus] = {
    (None, Trigger.SUBMIT): InvoiceStatus.PENDING,
    (InvoiceStatus.PENDING, Trigger.SEND_REMARK): InvoiceStatus.CHANGES_REQUESTED,
    (InvoiceStatus.PENDING, Trigger.SEND_FOR_PAYMENT): InvoiceStatus.SENT_FOR_PAYMENT,
    (InvoiceStatus.CHANGES_REQUESTED, Trigger.REUPLOAD): InvoiceStatus.PENDING,
}


class InvalidTransition(Exception):
    """Raised when a trigger is not allowed from the invoice's current status."""

    def __init__(self, current: Optional[str], trigger: Trigger):
        self.current = current
        self.trigger = trigger
        label = current.replace("_", " ") if current else "new"
        super().__init__(f"Cannot {trigger.value.replace('_', ' ')} an invoice that is {label}")


def next_status(current: Optional[str], trigger: Trigger) -> InvoiceStatus:
    """Look up the target status; raises InvalidTransition for unknown edges."""
    try:
        key = (InvoiceStatus(current) if current is not None else None, trigger)
    except ValueError:
        raise InvalidTransition(current, trigger)
    if key not in TRANSITIONS:
        raise InvalidTransition(current, trigger)
    return TRANSITIONS[key]


def _transition(invoice: Invoice, trigger: Trigger) -> None:
    target = next_status(invoice.status, trigger)
    logger.info(f"Invoice {invoice.invoice_id}: {invoice.status} --{trigger.value}--> {target.value}")
    invoice.status = target.value


def merge_pdfs(existing: Optional[dict], uploaded: PdfLists) -> dict:
    """Append newly uploaded URLs per slot, keeping order and prior entries."""
    existing = existing or {}
    merged = {}
    for field in PDF_FIELDS:
        current = list(existing.get(field, []))
        for url in getattr(uploaded, field):
            if url not in current:
                current.append(url)
        merged[field] = current
    return merged


def _attach_uploads(db: Session, pdfs: dict) -> None:
    """Mark the uploads an invoice now references so the proxy keeps them."""
    urls = [url for field in PDF_FIELDS for url in pdfs.get(field, [])]
    if urls:
        db.query(Upload).filter(Upload.url.in_(urls)).update({"attached": True}, synchronize_session=False)


# ==============================================================================
# QUERIES
# ==============================================================================

def get_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
    return db.query(Invoice).filter(Invoice.invoice_id == invoice_id).first()


def list_invoices(db: Session, status: Optional[str] = None) -> List[Invoice]:
    """All invoices, optionally in one status. Oldest first so PO-date groups stay stable."""
    q = db.query(Invoice)
    if status:
        q = q.filter(Invoice.status == status)
    return q.order_by(Invoice.created_at.asc(), Invoice.invoice_id.asc()).all()


def vendor_inbox(db: Session, email: str) -> List[Invoice]:
    """Invoices a vendor must act on: finance asked for changes."""
    return (
        db.query(Invoice)
        .filter(Invoice.email == email)
        .filter(Invoice.status == InvoiceStatus.CHANGES_REQUESTED.value)
        .order_by(Invoice.updated_at.desc(), Invoice.invoice_id.desc())
        .all()
    )


# ==============================================================================
# TRANSITIONS
# ==============================================================================

def submit_invoice(db: Session, data: InvoiceCreate, user: User) -> Invoice:
    """
    Create a new invoice in `pending`.

    The owner email comes from the authenticated user, not the request body.
    PDFs must already be uploaded; only their URLs arrive here.
    """
    invoice = Invoice(email=user.email, vendor_code=data.id, reupload=False)
    for field in SUBMITTED_FIELDS:
        setattr(invoice, field, getattr(data, field))
    invoice.pdfs = merge_pdfs(None, data.pdfs)
    invoice.status = None
    _transition(invoice, Trigger.SUBMIT)

    db.add(invoice)
    db.flush()  # need invoice_id for the audit entry
    _attach_uploads(db, invoice.pdfs)
    files = sum(len(invoice.pdfs[f]) for f in PDF_FIELDS)
    AuditLog.log_invoice_event(db, "submitted", invoice, user, details=f"{files} file(s) attached")
    db.commit()
    db.refresh(invoice)
    return invoice


def send_remark(db: Session, invoice: Invoice, remark: str, pdfs: Optional[PdfLists], user: User) -> Invoice:
    """Finance asks the vendor for corrections."""
    remark = (remark or "").strip()
    if not remark:
        raise ValueError("Remark cannot be empty")

    _transition(invoice, Trigger.SEND_REMARK)
    invoice.remark = remark
    if pdfs is not None:
        # Finance posts back the file lists it reviewed
        invoice.pdfs = {field: list(getattr(pdfs, field)) for field in PDF_FIELDS}

    AuditLog.log_invoice_event(db, "remark_sent", invoice, user, details=remark)
    db.commit()
    db.refresh(invoice)
    return invoice


def send_for_payment(db: Session, invoice: Invoice, message: Optional[str], user: User) -> Invoice:
    """Finance approves the invoice. Terminal."""
    _transition(invoice, Trigger.SEND_FOR_PAYMENT)
    invoice.payment_message = (message or "").strip() or None

    AuditLog.log_invoice_event(db, "sent_for_payment", invoice, user, details=invoice.payment_message or "")
    db.commit()
    db.refresh(invoice)
    return invoice


def reupload_invoice(db: Session, invoice: Invoice, data: ReuploadRequest, user: User) -> Invoice:
    """
    Vendor answers a remark with corrected fields and/or extra files.

    Zero new files is allowed. Previously uploaded URLs are kept; the stale
    remark is cleared so the next review cycle starts blank.
    """
    _transition(invoice, Trigger.REUPLOAD)

    changed = {}
    for field in CORRECTABLE_FIELDS:
        value = getattr(data, field)
        if value is not None and value != getattr(invoice, field):
            changed[field] = value
            setattr(invoice, field, value)

    before = sum(len((invoice.pdfs or {}).get(f, [])) for f in PDF_FIELDS)
    invoice.pdfs = merge_pdfs(invoice.pdfs, data.pdfs)
    _attach_uploads(db, invoice.pdfs)
    added = sum(len(invoice.pdfs[f]) for f in PDF_FIELDS) - before

    previous_remark = invoice.remark
    invoice.remark = None
    invoice.reupload = True

    details = f"{added} new file(s); fields: {', '.join(sorted(changed)) or 'none'}"
    if previous_remark:
        details += f"; answering remark: {previous_remark}"
    AuditLog.log_invoice_event(db, "reuploaded", invoice, user, details=details)
    db.commit()
    db.refresh(invoice)
    return invoice
