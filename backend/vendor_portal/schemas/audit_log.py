from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AuditLogResponse(BaseModel):
    id: int
    timestamp: Optional[datetime] = None
    gst_number: Optional[str] = None
    po_number: Optional[str] = None
    invoice_id: Optional[int] = None
    action: str
    details: Optional[str] = None
    performed_by: Optional[str] = None
    role: Optional[str] = None

    class Config:
        from_attributes = True
