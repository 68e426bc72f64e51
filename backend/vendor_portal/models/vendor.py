from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from vendor_portal.db.base import Base


class Vendor(Base):
    """
    Vendor master record, owned by admins.

    Invoices copy these fields at submission time; there is no foreign key
    from Invoice back to Vendor.
    """
    __tablename__ = "vendors"

    id = Column(String(64), primary_key=True)  # vendor code
    name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=True)
    state = Column(String(128), nullable=True)
    gst_number = Column(String(32), nullable=True, index=True)
    pan = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
