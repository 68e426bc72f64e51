"""State machine and workflow service, without HTTP."""
import itertools

import pytest
from sqlalchemy.exc import IntegrityError

from vendor_portal.models.audit_log import AuditLogEntry
from vendor_portal.models.invoice import Invoice
from vendor_portal.schemas.invoice import InvoiceCreate, PdfLists, ReuploadRequest
from vendor_portal.services import invoice_workflow as workflow
from vendor_portal.services.invoice_workflow import InvalidTransition, InvoiceStatus, Trigger

ALLOWED = {
    (None, Trigger.SUBMIT): InvoiceStatus.PENDING,
    ("pending", Trigger.SEND_REMARK): InvoiceStatus.CHANGES_REQUESTED,
    ("pending", Trigger.SEND_FOR_PAYMENT): InvoiceStatus.SENT_FOR_PAYMENT,
    ("changes_requested", Trigger.REUPLOAD): InvoiceStatus.PENDING,
}


@pytest.mark.parametrize("current,trigger", list(ALLOWED))
def test_allowed_edges(current, trigger):
    assert workflow.next_status(current, trigger) == ALLOWED[(current, trigger)]


def test_every_other_pair_raises():
    states = [None, "pending", "changes_requested", "sent_for_payment", "archived"]
    for current, trigger in itertools.product(states, Trigger):
        if (current, trigger) in ALLOWED:
            continue
        with pytest.raises(InvalidTransition):
            workflow.next_status(current, trigger)


def test_sent_for_payment_is_terminal():
    for trigger in Trigger:
        with pytest.raises(InvalidTransition):
            workflow.next_status("sent_for_payment", trigger)


def test_invalid_transition_message():
    err = InvalidTransition("sent_for_payment", Trigger.SEND_REMARK)
    assert str(err) == "Cannot send remark an invoice that is sent for payment"


def test_merge_pdfs_appends_and_keeps_order():
    existing = {"po_pdf": ["a", "b"], "invoice_pdf": []}
    merged = workflow.merge_pdfs(existing, PdfLists(po_pdf=["b", "c"], invoice_pdf=["x"]))
    assert merged == {"po_pdf": ["a", "b", "c"], "invoice_pdf": ["x"]}
    # input untouched
    assert existing == {"po_pdf": ["a", "b"], "invoice_pdf": []}


def test_merge_pdfs_with_nothing_uploaded():
    assert workflow.merge_pdfs(None, PdfLists()) == {"po_pdf": [], "invoice_pdf": []}


def _create(db, user, payload, **overrides):
    return workflow.submit_invoice(db, InvoiceCreate(**{**payload, **overrides}), user)


def test_submit_uses_login_email(db_session, vendor_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload, email="spoofed@evil.com")
    assert invoice.email == "vendor@acme.com"
    assert invoice.status == "pending"
    assert invoice.reupload is False
    assert invoice.vendor_code == "V001"


def test_submit_writes_audit_entry(db_session, vendor_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload, pdfs={"po_pdf": ["u1", "u2"], "invoice_pdf": []})
    entry = db_session.query(AuditLogEntry).one()
    assert entry.action == "submitted"
    assert entry.invoice_id == invoice.invoice_id
    assert entry.gst_number == "29ABCDE1234F1Z5"
    assert entry.po_number == "PO-1001"
    assert entry.performed_by == "Acme Supplies"
    assert entry.role == "vendor"
    assert entry.details == "2 file(s) attached"


def test_numbers_are_kept_as_text(db_session, vendor_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload, taxable_amt=10000.5, gst_rate=18)
    assert invoice.taxable_amt == "10000.5"
    assert invoice.gst_rate == "18"


def test_remark_then_reupload_cycle(db_session, vendor_user, finance_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload, pdfs={"po_pdf": ["u1"], "invoice_pdf": []})

    invoice = workflow.send_remark(db_session, invoice, "  Missing PAN copy ", None, finance_user)
    assert invoice.status == "changes_requested"
    assert invoice.remark == "Missing PAN copy"

    invoice = workflow.reupload_invoice(
        db_session, invoice,
        ReuploadRequest(po_number="PO-1001-A", pdfs=PdfLists(invoice_pdf=["u9"])),
        vendor_user,
    )
    assert invoice.status == "pending"
    assert invoice.reupload is True
    assert invoice.remark is None
    assert invoice.po_number == "PO-1001-A"
    assert invoice.pdfs == {"po_pdf": ["u1"], "invoice_pdf": ["u9"]}

    actions = [e.action for e in db_session.query(AuditLogEntry).order_by(AuditLogEntry.id)]
    assert actions == ["submitted", "remark_sent", "reuploaded"]
    reuploaded = db_session.query(AuditLogEntry).filter_by(action="reuploaded").one()
    assert "po_number" in reuploaded.details
    assert "Missing PAN copy" in reuploaded.details


def test_remark_stores_reviewed_pdf_lists(db_session, vendor_user, finance_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload, pdfs={"po_pdf": ["u1", "u2"], "invoice_pdf": []})
    invoice = workflow.send_remark(
        db_session, invoice, "Wrong PO attached", PdfLists(po_pdf=["u1"]), finance_user
    )
    assert invoice.pdfs == {"po_pdf": ["u1"], "invoice_pdf": []}


def test_empty_remark_is_rejected_before_transition(db_session, vendor_user, finance_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload)
    with pytest.raises(ValueError):
        workflow.send_remark(db_session, invoice, "   ", None, finance_user)
    assert invoice.status == "pending"


def test_reupload_ignores_identity_fields(db_session, vendor_user, finance_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload)
    workflow.send_remark(db_session, invoice, "Fix cost center", None, finance_user)
    body = ReuploadRequest.model_validate(
        {"gst_number": "27ZZZZZ9999Z9Z9", "name": "Evil Corp", "status": "sent_for_payment", "cost_center": "CC-7"}
    )
    invoice = workflow.reupload_invoice(db_session, invoice, body, vendor_user)
    assert invoice.gst_number == "29ABCDE1234F1Z5"
    assert invoice.name == "Acme Supplies"
    assert invoice.status == "pending"
    assert invoice.cost_center == "CC-7"


def test_payment_is_terminal(db_session, vendor_user, finance_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload)
    invoice = workflow.send_for_payment(db_session, invoice, "  Batch 12 ", finance_user)
    assert invoice.status == "sent_for_payment"
    assert invoice.payment_message == "Batch 12"

    with pytest.raises(InvalidTransition):
        workflow.send_remark(db_session, invoice, "Too late", None, finance_user)
    with pytest.raises(InvalidTransition):
        workflow.reupload_invoice(db_session, invoice, ReuploadRequest(), vendor_user)


def test_reupload_requires_a_remark_first(db_session, vendor_user, invoice_payload):
    invoice = _create(db_session, vendor_user, invoice_payload)
    with pytest.raises(InvalidTransition):
        workflow.reupload_invoice(db_session, invoice, ReuploadRequest(), vendor_user)


def test_list_and_inbox_queries(db_session, vendor_user, other_vendor, finance_user, invoice_payload):
    first = _create(db_session, vendor_user, invoice_payload, po_number="PO-1")
    second = _create(db_session, vendor_user, invoice_payload, po_number="PO-2")
    theirs = _create(db_session, other_vendor, invoice_payload, po_number="PO-3")
    workflow.send_remark(db_session, second, "Need stamp", None, finance_user)
    workflow.send_remark(db_session, theirs, "Need stamp", None, finance_user)

    assert [i.po_number for i in workflow.list_invoices(db_session)] == ["PO-1", "PO-2", "PO-3"]
    assert [i.invoice_id for i in workflow.list_invoices(db_session, "pending")] == [first.invoice_id]
    assert [i.po_number for i in workflow.vendor_inbox(db_session, "vendor@acme.com")] == ["PO-2"]


def test_status_is_only_set_by_transitions(db_session):
    assert Invoice.__table__.c.status.default is None
    db_session.add(Invoice(email="vendor@acme.com"))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()
