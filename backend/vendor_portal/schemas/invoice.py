from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime


def _to_text(v):
    # Amount fields are opaque: keep what the vendor typed, numbers become text
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class PdfLists(BaseModel):
    """Uploaded file URLs per document slot. Unknown slots are rejected."""
    model_config = ConfigDict(extra="forbid")

    po_pdf: List[str] = []
    invoice_pdf: List[str] = []


class CorrectableFields(BaseModel):
    """Fields a vendor may change when answering a finance remark."""
    billing_location_til: Optional[str] = None
    til_billing_address: Optional[str] = None
    til_state: Optional[str] = None
    po_number: Optional[str] = None
    po_date: Optional[str] = None
    cost_center: Optional[str] = None
    sac_code: Optional[str] = None
    service_desc: Optional[str] = None
    taxable_amt: Optional[str] = None
    gst_rate: Optional[str] = None
    cgst: Optional[str] = None
    sgst: Optional[str] = None
    igst: Optional[str] = None
    supply_place: Optional[str] = None
    business_name: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def numbers_as_text(cls, v):
        return _to_text(v)


class InvoiceCreate(CorrectableFields):
    """Body of POST /vendor/upload."""
    id: Optional[str] = None  # vendor code
    name: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: str
    pan: Optional[str] = None
    pdfs: PdfLists = PdfLists()
    email: Optional[str] = None

    @field_validator("gst_number")
    @classmethod
    def gst_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("GST number is required")
        return v.strip()


class ReuploadRequest(CorrectableFields):
    """
    Body of POST /reupload/{id}.

    The portal posts the whole inbox item back; identity and bookkeeping keys
    (id, gst_number, status, remark...) are simply ignored.
    """
    pdfs: PdfLists = PdfLists()
    reupload: bool = True


class RemarkRequest(BaseModel):
    remark: str
    pdfs: Optional[PdfLists] = None


class PaymentRequest(BaseModel):
    message: Optional[str] = ""


class InvoiceResponse(BaseModel):
    invoice_id: int
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan: Optional[str] = None
    billing_location_til: Optional[str] = None
    til_billing_address: Optional[str] = None
    til_state: Optional[str] = None
    po_number: Optional[str] = None
    po_date: Optional[str] = None
    cost_center: Optional[str] = None
    sac_code: Optional[str] = None
    service_desc: Optional[str] = None
    taxable_amt: Optional[str] = None
    gst_rate: Optional[str] = None
    cgst: Optional[str] = None
    sgst: Optional[str] = None
    igst: Optional[str] = None
    supply_place: Optional[str] = None
    business_name: Optional[str] = None
    pdfs: PdfLists
    status: str
    remark: Optional[str] = None
    reupload: bool = False
    payment_message: Optional[str] = None
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_invoice(cls, invoice) -> "InvoiceResponse":
        data = {name: getattr(invoice, name) for name in cls.model_fields if name not in ("id", "pdfs")}
        pdfs = invoice.pdfs or {}
        return cls(
            **data,
            id=invoice.vendor_code,
            pdfs=PdfLists(po_pdf=pdfs.get("po_pdf", []), invoice_pdf=pdfs.get("invoice_pdf", [])),
        )
