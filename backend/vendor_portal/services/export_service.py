"""
Spreadsheet and CSV exports.

Both exports are projections of whatever list they are given (the current
filtered view) onto a fixed column schema. An empty list is refused.
"""
import csv
import io
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class EmptyExport(ValueError):
    """Raised instead of producing a file with no data rows."""


# (header, invoice key) in sheet order
INVOICE_COLUMNS = [
    ("Vendor Code", "id"),
    ("Vendor Name", "name"),
    ("Vendor Address", "address"),
    ("Vendor State", "state"),
    ("GST Number", "gst_number"),
    ("PAN Number", "pan"),
    ("TIL Billing Location", "billing_location_til"),
    ("TIL Billing Address", "til_billing_address"),
    ("TIL State", "til_state"),
    ("PO Number", "po_number"),
    ("PO Date", "po_date"),
    ("Cost Center", "cost_center"),
    ("HSN/SAC Code", "sac_code"),
    ("Service/Goods Description", "service_desc"),
    ("Taxable Amount", "taxable_amt"),
    ("GST Rate", "gst_rate"),
    ("CGST", "cgst"),
    ("SGST", "sgst"),
    ("IGST", "igst"),
    ("Place of Supply", "supply_place"),
    ("Business Name", "business_name"),
    ("PO PDFs", "po_pdf"),
    ("Invoice PDFs", "invoice_pdf"),
    ("Status", "status"),
    ("Remark", "remark"),
    ("Reupload", "reupload"),
]

AUDIT_COLUMNS = [
    ("Timestamp", "timestamp"),
    ("GST Number", "gst_number"),
    ("PO Number", "po_number"),
    ("Invoice ID", "invoice_id"),
    ("Action", "action"),
    ("Details", "details"),
    ("Performed By", "performed_by"),
    ("Role", "role"),
]


def _text(value):
    """Drop control characters (vertical tabs, NULs) that worksheets cannot hold."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def invoice_row(invoice: dict) -> list:
    pdfs = invoice.get("pdfs") or {}
    row = []
    for _, key in INVOICE_COLUMNS:
        if key in ("po_pdf", "invoice_pdf"):
            row.append(", ".join(pdfs.get(key) or []))
        elif key == "remark":
            row.append(_text(invoice.get("remark") or ""))
        elif key == "reupload":
            row.append("Yes" if invoice.get("reupload") else "")
        else:
            row.append(_text(invoice.get(key)))
    return row


def invoice_rows(invoices: Iterable[dict]) -> List[list]:
    return [invoice_row(inv) for inv in invoices]


def invoices_to_xlsx(invoices: List[dict]) -> bytes:
    """Build the single-sheet `Invoices` workbook."""
    if not invoices:
        raise EmptyExport("No invoices to export.")

    wb = Workbook()
    ws = wb.active
    ws.title = "Invoices"
    ws.append([header for header, _ in INVOICE_COLUMNS])
    for row in invoice_rows(invoices):
        ws.append(row)
        for cell in ws[ws.max_row]:
            # vendor text like "=HYPERLINK(...)" stays text
            if cell.data_type == "f":
                cell.data_type = "s"

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def invoice_export_filename(active_tab: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"invoices_{active_tab}_{stamp}.xlsx"


def format_timestamp(value) -> str:
    """Render an ISO string or datetime as dd/mm/yyyy, HH:MM:SS."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def audit_logs_to_csv(logs: List[dict]) -> str:
    """Eight quoted columns, header first, one line per log entry."""
    if not logs:
        raise EmptyExport("No audit logs to export.")

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in AUDIT_COLUMNS])
    for log in logs:
        row = []
        for _, key in AUDIT_COLUMNS:
            value = log.get(key)
            if key == "timestamp":
                value = format_timestamp(value)
            row.append("" if value is None else value)
        writer.writerow(row)
    return output.getvalue()


def audit_export_filename(now_ms: Optional[int] = None) -> str:
    return f"audit-logs-{now_ms if now_ms is not None else int(time.time() * 1000)}.csv"
