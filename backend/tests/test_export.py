"""xlsx and csv projections."""
import csv
import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from vendor_portal.services.export_service import (
    AUDIT_COLUMNS,
    INVOICE_COLUMNS,
    EmptyExport,
    audit_export_filename,
    audit_logs_to_csv,
    invoice_export_filename,
    invoice_row,
    invoices_to_xlsx,
)

INVOICE = {
    "id": "V001",
    "name": "Acme Supplies",
    "gst_number": "29ABCDE1234F1Z5",
    "po_number": "PO-1001",
    "po_date": "2024-05-01",
    "taxable_amt": "10000",
    "pdfs": {"po_pdf": ["https://b/1.pdf", "https://b/2.pdf"], "invoice_pdf": []},
    "status": "changes_requested",
    "remark": None,
    "reupload": True,
}


def test_invoice_headers():
    headers = [h for h, _ in INVOICE_COLUMNS]
    assert len(headers) == 26
    assert headers[0] == "Vendor Code"
    assert headers[-4:] == ["Invoice PDFs", "Status", "Remark", "Reupload"]


def test_invoice_row_projection():
    row = dict(zip([h for h, _ in INVOICE_COLUMNS], invoice_row(INVOICE)))
    assert row["Vendor Code"] == "V001"
    assert row["PO PDFs"] == "https://b/1.pdf, https://b/2.pdf"
    assert row["Invoice PDFs"] == ""
    assert row["Remark"] == ""
    assert row["Reupload"] == "Yes"
    assert row["Status"] == "changes_requested"


def test_reupload_false_is_blank():
    assert invoice_row({**INVOICE, "reupload": False})[-1] == ""


def test_xlsx_workbook():
    content = invoices_to_xlsx([INVOICE, {**INVOICE, "po_number": "PO-1002", "remark": "Missing PAN"}])
    ws = load_workbook(io.BytesIO(content)).active
    rows = list(ws.iter_rows(values_only=True))
    assert ws.title == "Invoices"
    assert len(rows) == 3
    assert rows[0] == tuple(h for h, _ in INVOICE_COLUMNS)
    assert rows[2][9] == "PO-1002"
    assert rows[2][24] == "Missing PAN"


def test_xlsx_refuses_empty_list():
    with pytest.raises(EmptyExport):
        invoices_to_xlsx([])


def test_invoice_filename():
    name = invoice_export_filename("pending", now=datetime(2024, 5, 1, 9, 30, 5))
    assert name == "invoices_pending_2024-05-01T09-30-05.xlsx"


def test_audit_csv_quotes_every_cell():
    logs = [{
        "timestamp": "2024-05-01T09:30:05+00:00",
        "gst_number": "29ABCDE1234F1Z5",
        "po_number": "PO-1001",
        "invoice_id": 7,
        "action": "remark_sent",
        "details": 'Attach the "signed" PO',
        "performed_by": "Fiona",
        "role": "finance",
    }]
    text = audit_logs_to_csv(logs)
    lines = text.splitlines()
    assert lines[0] == ",".join(f'"{h}"' for h, _ in AUDIT_COLUMNS)
    assert lines[1] == (
        '"01/05/2024, 09:30:05","29ABCDE1234F1Z5","PO-1001","7","remark_sent",'
        '"Attach the ""signed"" PO","Fiona","finance"'
    )
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1][5] == 'Attach the "signed" PO'


def test_audit_csv_missing_values_are_empty():
    text = audit_logs_to_csv([{"action": "vendor_bulk_created", "role": "admin"}])
    assert text.splitlines()[1] == '"","","","","vendor_bulk_created","","","admin"'


def test_audit_csv_refuses_empty_list():
    with pytest.raises(EmptyExport):
        audit_logs_to_csv([])


def test_audit_filename():
    assert audit_export_filename(1714555805000) == "audit-logs-1714555805000.csv"


def _sheet_cell(invoice, header):
    ws = load_workbook(io.BytesIO(invoices_to_xlsx([invoice])))["Invoices"]
    column = [h for h, _ in INVOICE_COLUMNS].index(header) + 1
    return ws.cell(row=2, column=column)


def test_xlsx_formula_text_stays_text():
    cell = _sheet_cell({**INVOICE, "service_desc": '=HYPERLINK("http://x","click")'}, "Service/Goods Description")
    assert cell.value == '=HYPERLINK("http://x","click")'
    assert cell.data_type == "s"

    cell = _sheet_cell({**INVOICE, "remark": "=1+1"}, "Remark")
    assert cell.value == "=1+1"
    assert cell.data_type == "s"


def test_xlsx_strips_control_characters():
    cell = _sheet_cell({**INVOICE, "service_desc": "line\x0bbreak\x00"}, "Service/Goods Description")
    assert cell.value == "linebreak"
    assert invoice_row({**INVOICE, "remark": "a\x01b"})[-2] == "ab"
