from vendor_portal.models.user import User
from vendor_portal.models.vendor import Vendor
from vendor_portal.models.invoice import Invoice
from vendor_portal.models.audit_log import AuditLogEntry
from vendor_portal.models.upload import Upload

__all__ = ["User", "Vendor", "Invoice", "AuditLogEntry", "Upload"]
