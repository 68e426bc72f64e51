"""Audit trail: read-only for admins. Rows are written by core/audit.py."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vendor_portal.api.deps import get_db, require_roles
from vendor_portal.core.permissions import ADMIN
from vendor_portal.models.audit_log import AuditLogEntry
from vendor_portal.models.user import User
from vendor_portal.schemas.audit_log import AuditLogResponse

router = APIRouter()


@router.get("/audit-logs", response_model=List[AuditLogResponse])
def list_audit_logs(
    invoice_id: Optional[int] = Query(None, description="Only entries for one invoice"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    """Newest first. Filtering by role/action and paging happen client-side."""
    q = db.query(AuditLogEntry)
    if invoice_id is not None:
        q = q.filter(AuditLogEntry.invoice_id == invoice_id)
    return q.order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc()).all()
