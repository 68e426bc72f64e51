"""
Finance dashboard: review tabs, remark, payment approval, export.

Mutations never touch local copies; the active tab is re-fetched after each.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional

from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext
from vendor_portal.services.export_service import invoice_export_filename, invoices_to_xlsx
from vendor_portal.services.invoice_views import InvoiceGroup, filter_invoices, group_by_po_date

logger = logging.getLogger(__name__)

TABS = ("pending", "changes_requested", "sent_for_payment")


class FinanceInbox:
    def __init__(self, session: SessionContext, notifier: Notifier):
        self.session = session
        self.notifier = notifier
        self.active_tab = "pending"
        self.invoices: List[dict] = []
        self.selected: Optional[dict] = None
        self.search_term = ""
        self.status_filter: Optional[str] = None
        self.busy = False

    def fetch(self, tab: Optional[str] = None) -> List[dict]:
        if tab is not None:
            if tab not in TABS:
                raise ValueError(f"Unknown tab: {tab}")
            self.active_tab = tab
        try:
            self.invoices = self.session.api.get("/invoices", params={"status": self.active_tab})
        except ApiError as e:
            logger.error(f"Error fetching invoices: {e.message}")
            self.notifier.error("Failed to fetch invoices.")
            self.invoices = []
        return self.invoices

    def select(self, invoice_id: int) -> Optional[dict]:
        self.selected = next((inv for inv in self.invoices if inv["invoice_id"] == invoice_id), None)
        return self.selected

    def send_remark(self, remark: str) -> bool:
        if not self.selected:
            self.notifier.warning("Please select an invoice first.")
            return False
        if not (remark or "").strip():
            self.notifier.warning("Please enter a remark.")
            return False

        self.busy = True
        try:
            self.session.api.post(
                f"/remark/{self.selected['invoice_id']}",
                json={"remark": remark, "pdfs": self.selected.get("pdfs")},
            )
            self.notifier.success("Remark sent to vendor")
        except ApiError as e:
            logger.error(f"Error sending remark: {e.message}")
            self.notifier.error("Failed to send remark.")
            return False
        finally:
            self.busy = False

        self.selected = None
        self.fetch()
        return True

    def send_for_payment(self, message: str = "") -> bool:
        if not self.selected:
            self.notifier.warning("Please select an invoice first.")
            return False

        self.busy = True
        try:
            self.session.api.post(
                f"/send-for-payment/{self.selected['invoice_id']}", json={"message": message}
            )
            self.notifier.success("Invoice sent for payment")
        except ApiError as e:
            logger.error(f"Error sending for payment: {e.message}")
            self.notifier.error(e.message)
            return False
        finally:
            self.busy = False

        self.selected = None
        self.fetch()
        return True

    def filtered(self) -> List[dict]:
        return filter_invoices(self.invoices, self.search_term, self.status_filter)

    def view(self) -> Dict[Optional[str], InvoiceGroup]:
        """Filtered invoices grouped by PO date, as the table renders them."""
        return group_by_po_date(self.filtered())

    def export(self, directory=".") -> Optional[Path]:
        """Write the filtered view to an .xlsx file; None when there is nothing."""
        rows = self.filtered()
        if not rows:
            self.notifier.warning("No invoices to export.")
            return None
        path = Path(directory) / invoice_export_filename(self.active_tab)
        path.write_bytes(invoices_to_xlsx(rows))
        self.notifier.success(f"Exported {len(rows)} invoice(s) to {path.name}")
        return path
