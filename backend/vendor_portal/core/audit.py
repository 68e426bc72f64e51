"""
Audit trail for invoice transitions, vendor master changes and logins.

Every event goes two places:
- an `AuditLogEntry` row (what admins see under GET /audit-logs)
- one JSON line on the `audit` logger (can be shipped to centralized logging)

LOGGING SENSITIVE DATA: auth events never include passwords or tokens.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from sqlalchemy.orm import Session

from vendor_portal.models.audit_log import AuditLogEntry
from vendor_portal.models.invoice import Invoice
from vendor_portal.models.user import User

audit_logger = logging.getLogger("audit")


def _actor(user: Optional[User]) -> tuple[str, str]:
    if user is None:
        return "system", "system"
    return (user.name or user.email), user.role


class AuditLog:
    """Central audit logging for portal events."""

    @staticmethod
    def log_invoice_event(
        db: Session,
        action: str,  # "submitted", "remark_sent", "sent_for_payment", "reuploaded"
        invoice: Invoice,
        user: Optional[User],
        details: str = "",
    ) -> AuditLogEntry:
        """
        Record an invoice lifecycle event.

        The entry is added to the caller's session; the caller commits it
        together with the transition so the trail never disagrees with
        the invoice row.

        Usage:
            AuditLog.log_invoice_event(db, "remark_sent", invoice, current_user, details=remark)
        """
        performed_by, role = _actor(user)
        entry = AuditLogEntry(
            timestamp=datetime.now(timezone.utc),
            gst_number=invoice.gst_number,
            po_number=invoice.po_number,
            invoice_id=invoice.invoice_id,
            action=action,
            details=details or None,
            performed_by=performed_by,
            role=role,
        )
        db.add(entry)

        audit_logger.info(json.dumps({
            "timestamp": entry.timestamp.isoformat(),
            "event_type": f"invoice.{action}",
            "invoice_id": invoice.invoice_id,
            "status": invoice.status,
            "user": performed_by,
            "role": role,
        }))
        return entry

    @staticmethod
    def log_vendor_event(
        db: Session,
        action: str,  # "vendor_created", "vendor_updated", "vendor_deleted", "vendor_bulk_created"
        user: Optional[User],
        vendor_id: Optional[str] = None,
        gst_number: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """
        Record a vendor master change. Same commit rule as invoice events.

        Usage:
            AuditLog.log_vendor_event(db, "vendor_deleted", current_user, vendor_id="V001")
        """
        performed_by, role = _actor(user)
        details = f"vendor {vendor_id}" if vendor_id else ""
        if changes:
            details = f"{details} {json.dumps(changes, sort_keys=True, default=str)}".strip()
        entry = AuditLogEntry(
            timestamp=datetime.now(timezone.utc),
            gst_number=gst_number,
            action=action,
            details=details or None,
            performed_by=performed_by,
            role=role,
        )
        db.add(entry)

        audit_logger.info(json.dumps({
            "timestamp": entry.timestamp.isoformat(),
            "event_type": f"vendor.{action}",
            "vendor_id": vendor_id,
            "user": performed_by,
            "changes": changes,
        }, default=str))
        return entry

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "signup", "failed_login"
        email: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events (logger only, not the audit table).

        Usage:
            AuditLog.log_authentication("login", "user@example.com", "192.168.1.1", True)
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": f"auth.{action}",
            "email": email,
            "ip_address": ip_address,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_access_denied(
        action: str,
        resource_type: str,
        resource_id: Any,
        user: User,
        reason: str,
    ):
        """
        Log denied access attempts (potential attacks).

        Usage:
            AuditLog.log_access_denied("read", "inbox", "other@vendor.com", current_user, "Different vendor")
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "user_id": user.id,
            "role": user.role,
            "reason": reason,
        }
        audit_logger.warning(json.dumps(log_entry, default=str))
