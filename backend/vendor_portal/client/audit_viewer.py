"""Admin dashboard: audit trail table with filters, paging and CSV export."""
import logging
from pathlib import Path
from typing import List, Optional

from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext
from vendor_portal.services.export_service import audit_export_filename, audit_logs_to_csv
from vendor_portal.services.invoice_views import (
    AUDIT_PAGE_SIZE,
    distinct_values,
    filter_audit_logs,
    paginate,
    total_pages,
)

logger = logging.getLogger(__name__)


class AuditLogViewer:
    def __init__(self, session: SessionContext, notifier: Notifier):
        self.session = session
        self.notifier = notifier
        self.logs: List[dict] = []
        self.role = "all"
        self.action = "all"
        self.page = 1

    def fetch(self) -> List[dict]:
        try:
            self.logs = self.session.api.get("/audit-logs")
        except ApiError as e:
            logger.error(f"Error fetching audit logs: {e.message}")
            self.notifier.error("Failed to fetch audit logs.")
        return self.logs

    def set_role(self, role: str) -> None:
        self.role = role
        self.page = 1

    def set_action(self, action: str) -> None:
        self.action = action
        self.page = 1

    def filtered(self) -> List[dict]:
        return filter_audit_logs(self.logs, self.role, self.action)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered()), AUDIT_PAGE_SIZE)

    def rows(self) -> List[dict]:
        return paginate(self.filtered(), self.page, AUDIT_PAGE_SIZE)

    def go_to(self, page: int) -> None:
        self.page = max(1, min(page, self.total_pages or 1))

    def next_page(self) -> None:
        self.go_to(self.page + 1)

    def previous_page(self) -> None:
        self.go_to(self.page - 1)

    def role_options(self) -> list:
        return distinct_values(self.logs, "role")

    def action_options(self) -> list:
        return distinct_values(self.logs, "action")

    def export(self, directory=".") -> Optional[Path]:
        """All filtered rows, not just the current page."""
        rows = self.filtered()
        if not rows:
            self.notifier.warning("No audit logs to export.")
            return None
        path = Path(directory) / audit_export_filename()
        path.write_text(audit_logs_to_csv(rows), encoding="utf-8")
        self.notifier.success(f"Exported {len(rows)} log entries to {path.name}")
        return path
