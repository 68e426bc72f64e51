"""Stored PDF owned by the vendor who uploaded it.

`attached` flips once a submission or reupload references the URL; after
that the proxy refuses to delete the object.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from vendor_portal.db.base import Base


class Upload(Base):
    __tablename__ = "uploads"

    key = Column(String(512), primary_key=True)
    url = Column(String(1024), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    attached = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Upload {self.key} user={self.user_id} attached={self.attached}>"
