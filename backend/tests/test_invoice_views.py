"""Filtering, grouping, search and pagination helpers."""
import pytest

from vendor_portal.services.invoice_views import (
    distinct_values,
    filter_audit_logs,
    filter_invoices,
    group_by_po_date,
    paginate,
    search_vendors,
    total_pages,
)

INVOICES = [
    {"invoice_id": 1, "gst_number": "29ABCDE1234F1Z5", "status": "pending", "po_date": "2024-05-01", "name": "Acme"},
    {"invoice_id": 2, "gst_number": "29abcde1234f1z5", "status": "changes_requested", "po_date": "2024-05-01", "name": "Acme"},
    {"invoice_id": 3, "gst_number": "27XYZAB9876C1Z2", "status": "pending", "po_date": "01/05/2024", "name": "Globex"},
    {"invoice_id": 4, "gst_number": None, "status": "pending", "po_date": "2024-05-01", "name": "Initech"},
    {"invoice_id": 5, "gst_number": "29ABCDE0000F1Z5", "status": "sent_for_payment", "po_date": "2024-06-10", "name": "Acme"},
]


def ids(rows):
    return [r["invoice_id"] for r in rows]


def test_search_is_case_insensitive_substring():
    assert ids(filter_invoices(INVOICES, "abcde1234")) == [1, 2]


def test_empty_search_matches_missing_gst():
    assert ids(filter_invoices(INVOICES, "")) == [1, 2, 3, 4, 5]
    assert 4 not in ids(filter_invoices(INVOICES, "29"))


def test_status_filter_is_exact():
    assert ids(filter_invoices(INVOICES, status_filter="pending")) == [1, 3, 4]


@pytest.mark.parametrize("term", ["", "29", "abcde", "zzz"])
@pytest.mark.parametrize("status", [None, "pending", "changes_requested", "sent_for_payment"])
def test_search_and_status_commute(term, status):
    search_first = filter_invoices(filter_invoices(INVOICES, term), status_filter=status)
    status_first = filter_invoices(filter_invoices(INVOICES, status_filter=status), term)
    assert search_first == status_first == filter_invoices(INVOICES, term, status)


def test_group_by_raw_po_date():
    groups = group_by_po_date(INVOICES)
    assert list(groups) == ["2024-05-01", "01/05/2024", "2024-06-10"]
    may = groups["2024-05-01"]
    assert ids(may.invoices) == [1, 2, 4]
    assert may.vendors == {"Acme", "Initech"}


def test_group_counts_sum_to_filtered_length():
    rows = filter_invoices(INVOICES, "29")
    groups = group_by_po_date(rows)
    assert sum(len(g.invoices) for g in groups.values()) == len(rows)
    for group in groups.values():
        assert len(group.vendors) <= len(group.invoices)


def test_filters_do_not_mutate_input():
    snapshot = [dict(inv) for inv in INVOICES]
    filter_invoices(INVOICES, "29", "pending")
    group_by_po_date(INVOICES)
    assert INVOICES == snapshot


def test_search_vendors_any_field():
    vendors = [
        {"id": "V001", "name": "Acme Supplies", "state": "Karnataka", "gst_number": "29ABC"},
        {"id": "V002", "name": "Globex", "state": "Maharashtra", "gst_number": None},
    ]
    assert [v["id"] for v in search_vendors(vendors, "karna")] == ["V001"]
    assert [v["id"] for v in search_vendors(vendors, "v00")] == ["V001", "V002"]
    assert [v["id"] for v in search_vendors(vendors, "none")] == ["V002"]
    assert len(search_vendors(vendors, "")) == 2


LOGS = [
    {"id": i, "role": role, "action": action}
    for i, (role, action) in enumerate(
        [("vendor", "submitted")] * 12 + [("finance", "remark_sent")] * 3 + [("admin", "vendor_created")] * 2,
        start=1,
    )
]


def test_audit_filters():
    assert len(filter_audit_logs(LOGS)) == 17
    assert len(filter_audit_logs(LOGS, role="vendor")) == 12
    assert len(filter_audit_logs(LOGS, role="finance", action="remark_sent")) == 3
    assert filter_audit_logs(LOGS, role="finance", action="submitted") == []


def test_distinct_values_first_seen_order():
    assert distinct_values(LOGS, "role") == ["vendor", "finance", "admin"]
    assert distinct_values(LOGS, "action") == ["submitted", "remark_sent", "vendor_created"]


def test_pagination():
    assert total_pages(17) == 2
    assert total_pages(20) == 2
    assert total_pages(0) == 0
    assert [r["id"] for r in paginate(LOGS, 2)] == list(range(11, 18))
    assert paginate(LOGS, 3) == []
    assert paginate(LOGS, 0) == []
