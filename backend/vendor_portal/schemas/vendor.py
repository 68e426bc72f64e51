from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime


def _to_text(v):
    # Spreadsheet cells arrive as numbers (e.g. vendor codes)
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(int(v)) if float(v).is_integer() else str(v)
    if isinstance(v, str):
        return v.strip()
    return v


class VendorBase(BaseModel):
    name: str
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_cells(cls, v):
        return _to_text(v)


class VendorCreate(VendorBase):
    id: str


class VendorUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_cells(cls, v):
        return _to_text(v)


class VendorResponse(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkVendorRow(BaseModel):
    """One spreadsheet row. Missing ID/name rows are skipped, not rejected."""
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_cells(cls, v):
        return _to_text(v)


class BulkCreateRequest(BaseModel):
    vendors: List[BulkVendorRow]


class SkippedRow(BaseModel):
    row: int
    id: Optional[str] = None
    reason: str


class BulkCreateResult(BaseModel):
    message: str
    created: int
    skipped: List[SkippedRow] = []
