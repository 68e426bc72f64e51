"""
Derived list views shared by the API and the client SDK.

All functions take plain dicts (the REST representation) and never mutate
their input.
"""
from dataclasses import dataclass, field
from math import ceil
from typing import Any, Dict, Iterable, List, Optional, Set

AUDIT_PAGE_SIZE = 10


@dataclass
class InvoiceGroup:
    """Invoices sharing one raw `po_date` string."""
    vendors: Set[str] = field(default_factory=set)
    invoices: List[dict] = field(default_factory=list)


def matches_search(invoice: dict, search_term: str) -> bool:
    """Case-insensitive substring match on gst_number."""
    term = (search_term or "").lower()
    gst = invoice.get("gst_number")
    if gst is None:
        return term == ""
    return term in str(gst).lower()


def matches_status(invoice: dict, status_filter: Optional[str]) -> bool:
    if not status_filter:
        return True
    return invoice.get("status") == status_filter


def filter_invoices(invoices: Iterable[dict], search_term: str = "", status_filter: Optional[str] = None) -> List[dict]:
    """Keep invoices passing both predicates; the predicates are independent."""
    return [
        inv for inv in invoices
        if matches_search(inv, search_term) and matches_status(inv, status_filter)
    ]


def group_by_po_date(invoices: Iterable[dict]) -> Dict[Optional[str], InvoiceGroup]:
    """
    Group by raw po_date in first-seen order.

    No date parsing: "2024-05-01" and "01/05/2024" are different groups.
    """
    groups: Dict[Optional[str], InvoiceGroup] = {}
    for inv in invoices:
        group = groups.setdefault(inv.get("po_date"), InvoiceGroup())
        if inv.get("name") is not None:
            group.vendors.add(inv["name"])
        group.invoices.append(inv)
    return groups


def search_vendors(vendors: Iterable[dict], query: str) -> List[dict]:
    """Any field, stringified and lower-cased, containing the query."""
    q = (query or "").lower()
    return [
        v for v in vendors
        if any(q in str(value).lower() for value in v.values())
    ]


def filter_audit_logs(logs: Iterable[dict], role: str = "all", action: str = "all") -> List[dict]:
    result = list(logs)
    if role != "all":
        result = [log for log in result if log.get("role") == role]
    if action != "all":
        result = [log for log in result if log.get("action") == action]
    return result


def distinct_values(rows: Iterable[dict], key: str) -> List[Any]:
    """Distinct values of one key, first-seen order (filter drop-down options)."""
    seen: Dict[Any, None] = {}
    for row in rows:
        seen.setdefault(row.get(key), None)
    return list(seen)


def total_pages(count: int, per_page: int = AUDIT_PAGE_SIZE) -> int:
    return ceil(count / per_page) if count else 0


def paginate(rows: List[dict], page: int, per_page: int = AUDIT_PAGE_SIZE) -> List[dict]:
    """1-based page slice; out-of-range pages are empty."""
    if page < 1:
        return []
    start = (page - 1) * per_page
    return rows[start:start + per_page]
