"""Audit trail row. Written by core/audit.py, never updated or deleted."""
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from vendor_portal.db.base import Base


class AuditLogEntry(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    gst_number = Column(String(32), nullable=True)
    po_number = Column(String(64), nullable=True)
    invoice_id = Column(Integer, nullable=True, index=True)
    action = Column(String(64), nullable=False)
    details = Column(Text, nullable=True)
    performed_by = Column(String(255), nullable=True)
    role = Column(String(32), nullable=True)
