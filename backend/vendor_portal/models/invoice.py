"""
Invoice: vendor submission reviewed by finance.
Status flow: pending -> changes_requested -> pending (reupload) -> sent_for_payment.
Only services/invoice_workflow.py assigns `status`.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from vendor_portal.db.base import Base


class Invoice(Base):
    __tablename__ = "invoices"

    invoice_id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)  # submitting vendor login

    # Vendor identity (denormalized copy)
    vendor_code = Column(String(64), nullable=True)
    name = Column(String(255), nullable=True)
    address = Column(String(512), nullable=True)
    state = Column(String(128), nullable=True)
    gst_number = Column(String(32), nullable=True, index=True)
    pan = Column(String(32), nullable=True)

    # TIL billing details
    billing_location_til = Column(String(255), nullable=True)
    til_billing_address = Column(String(512), nullable=True)
    til_state = Column(String(128), nullable=True)

    # Purchase order details; amounts are kept exactly as typed
    po_number = Column(String(64), nullable=True)
    po_date = Column(String(32), nullable=True)
    cost_center = Column(String(64), nullable=True)
    sac_code = Column(String(32), nullable=True)
    service_desc = Column(Text, nullable=True)
    taxable_amt = Column(String(32), nullable=True)
    gst_rate = Column(String(16), nullable=True)
    cgst = Column(String(32), nullable=True)
    sgst = Column(String(32), nullable=True)
    igst = Column(String(32), nullable=True)
    supply_place = Column(String(128), nullable=True)
    business_name = Column(String(255), nullable=True)

    pdfs = Column(JSON, nullable=False, default=lambda: {"po_pdf": [], "invoice_pdf": []})
    status = Column(String(32), nullable=False, index=True)
    remark = Column(Text, nullable=True)
    reupload = Column(Boolean, nullable=False, default=False)
    payment_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Invoice {self.invoice_id} po={self.po_number} status={self.status}>"
