"""
Invoices: vendor submission, finance review, vendor reupload.

Trust: the server decides every status change (services/invoice_workflow.py).
Clients send intent and re-fetch; they never write `status` themselves.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from vendor_portal.api.deps import get_db, require_roles
from vendor_portal.core.audit import AuditLog
from vendor_portal.core.exceptions import BusinessError
from vendor_portal.core.permissions import FINANCE, VENDOR, user_owns_inbox
from vendor_portal.models.invoice import Invoice
from vendor_portal.models.user import User
from vendor_portal.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    PaymentRequest,
    RemarkRequest,
    ReuploadRequest,
)
from vendor_portal.services import invoice_workflow as workflow
from vendor_portal.services.export_service import (
    EmptyExport,
    XLSX_MEDIA_TYPE,
    invoice_export_filename,
    invoices_to_xlsx,
)

logger = logging.getLogger(__name__)
router = APIRouter()

StatusParam = Optional[workflow.InvoiceStatus]


def _load(db: Session, invoice_id: int) -> Invoice:
    invoice = workflow.get_invoice(db, invoice_id)
    if not invoice:
        raise BusinessError.not_found("Invoice", reason=f"id={invoice_id}")
    return invoice


def _out(invoices: List[Invoice]) -> List[InvoiceResponse]:
    return [InvoiceResponse.from_invoice(inv) for inv in invoices]


# ==============================================================================
# FINANCE
# ==============================================================================

@router.get("/invoices", response_model=List[InvoiceResponse])
def list_invoices(
    status: StatusParam = Query(None, description="pending | changes_requested | sent_for_payment"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(FINANCE)),
):
    """Finance inbox tab. All invoices when no status is given."""
    return _out(workflow.list_invoices(db, status.value if status else None))


@router.get("/invoices/export")
def export_invoices(
    status: StatusParam = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(FINANCE)),
):
    """Download the tab as an .xlsx workbook."""
    rows = [inv.model_dump() for inv in _out(workflow.list_invoices(db, status.value if status else None))]
    try:
        content = invoices_to_xlsx(rows)
    except EmptyExport as e:
        raise BusinessError.not_found("Invoice", reason=str(e))

    filename = invoice_export_filename(status.value if status else "all")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/remark/{invoice_id}", response_model=InvoiceResponse)
def send_remark(
    invoice_id: int,
    data: RemarkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(FINANCE)),
):
    """Ask the vendor for corrections: pending -> changes_requested."""
    if not data.remark.strip():
        raise BusinessError.bad_request("Remark cannot be empty")
    invoice = _load(db, invoice_id)
    try:
        invoice = workflow.send_remark(db, invoice, data.remark, data.pdfs, current_user)
    except workflow.InvalidTransition as e:
        db.rollback()
        raise BusinessError.conflict(str(e))
    return InvoiceResponse.from_invoice(invoice)


@router.post("/send-for-payment/{invoice_id}", response_model=InvoiceResponse)
def send_for_payment(
    invoice_id: int,
    data: PaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(FINANCE)),
):
    """Approve for payment: pending -> sent_for_payment."""
    invoice = _load(db, invoice_id)
    try:
        invoice = workflow.send_for_payment(db, invoice, data.message, current_user)
    except workflow.InvalidTransition as e:
        db.rollback()
        raise BusinessError.conflict(str(e))
    return InvoiceResponse.from_invoice(invoice)


# ==============================================================================
# VENDOR
# ==============================================================================

@router.post("/vendor/upload", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def submit_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(VENDOR)),
):
    """New submission. PDFs are uploaded first via POST /uploads; only URLs arrive here."""
    if data.email and not user_owns_inbox(current_user, data.email):
        logger.warning(
            f"Submission body email {data.email} differs from login {current_user.email}; using login"
        )
    invoice = workflow.submit_invoice(db, data, current_user)
    return InvoiceResponse.from_invoice(invoice)


@router.get("/inbox/{email}", response_model=List[InvoiceResponse])
def vendor_inbox(
    email: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(VENDOR)),
):
    """Invoices finance sent back to this vendor."""
    if not user_owns_inbox(current_user, email):
        AuditLog.log_access_denied("read", "inbox", email, current_user, "Different vendor")
        raise BusinessError.forbidden(f"user {current_user.id} read inbox {email}")
    return _out(workflow.vendor_inbox(db, current_user.email))


@router.post("/reupload/{invoice_id}", response_model=InvoiceResponse)
def reupload_invoice(
    invoice_id: int,
    data: ReuploadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(VENDOR)),
):
    """Corrected fields and/or new files: changes_requested -> pending."""
    invoice = _load(db, invoice_id)
    if not user_owns_inbox(current_user, invoice.email):
        AuditLog.log_access_denied("reupload", "invoice", invoice_id, current_user, "Different vendor")
        # Same response as a missing invoice
        raise BusinessError.not_found("Invoice", reason=f"id={invoice_id} owned by another vendor")
    try:
        invoice = workflow.reupload_invoice(db, invoice, data, current_user)
    except workflow.InvalidTransition as e:
        db.rollback()
        raise BusinessError.conflict(str(e))
    return InvoiceResponse.from_invoice(invoice)
