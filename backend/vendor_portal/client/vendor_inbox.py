"""Vendor dashboard: invoices sent back by finance, and their reupload."""
import logging
from typing import Dict, Iterable, List, Optional

from vendor_portal.client.files import PendingFile
from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext
from vendor_portal.client.uploader import PdfUploader
from vendor_portal.services.invoice_workflow import CORRECTABLE_FIELDS, PDF_FIELDS

logger = logging.getLogger(__name__)


class VendorInbox:
    def __init__(self, session: SessionContext, notifier: Notifier, uploader: Optional[PdfUploader] = None):
        self.session = session
        self.notifier = notifier
        self.uploader = uploader or PdfUploader(session, notifier)
        self.invoices: List[dict] = []
        self.has_new = False
        self.edits: Dict[int, Dict[str, str]] = {}
        self.files: Dict[int, Dict[str, List[PendingFile]]] = {}
        self.reuploading: Optional[int] = None

    def fetch(self) -> List[dict]:
        email = self.session.email
        if not email:
            return self.invoices
        try:
            self.invoices = self.session.api.get(f"/inbox/{email}")
        except ApiError as e:
            logger.error(f"Error fetching inbox: {e.message}")
            return self.invoices
        self.has_new = len(self.invoices) > 0
        return self.invoices

    def open(self) -> None:
        """Opening the inbox tab clears the new-item marker."""
        self.has_new = False

    def edit_field(self, invoice_id: int, name: str, value) -> None:
        if name not in CORRECTABLE_FIELDS:
            raise KeyError(f"{name} cannot be changed on reupload")
        self.edits.setdefault(invoice_id, {})[name] = "" if value is None else str(value)

    def set_files(self, invoice_id: int, field: str, files: Iterable[PendingFile]) -> None:
        if field not in PDF_FIELDS:
            raise KeyError(f"Unknown document field: {field}")
        self.files.setdefault(invoice_id, {})[field] = list(files)

    def _current_fields(self, invoice_id: int) -> dict:
        invoice = next((inv for inv in self.invoices if inv["invoice_id"] == invoice_id), {})
        fields = {name: invoice.get(name) for name in CORRECTABLE_FIELDS}
        fields.update(self.edits.get(invoice_id, {}))
        return fields

    def reupload(self, invoice_id: int) -> bool:
        """Upload picked files (possibly none), then post corrections."""
        self.reuploading = invoice_id
        try:
            uploaded = {}
            for field, files in self.files.get(invoice_id, {}).items():
                if files:
                    uploaded[field] = self.uploader.upload(field, files, reupload=True)

            self.session.api.post(
                f"/reupload/{invoice_id}",
                json={"pdfs": uploaded, **self._current_fields(invoice_id), "reupload": True},
            )
        except ApiError as e:
            logger.error(f"Reupload error: {e.message}")
            self.notifier.error(e.message or "Something went wrong during reupload.")
            # the invoice never referenced them
            self.uploader.sweep()
            return False
        finally:
            self.reuploading = None

        self.uploader.forget()
        self.notifier.success("Invoice reuploaded successfully")
        self.edits.pop(invoice_id, None)
        self.files.pop(invoice_id, None)
        self.fetch()
        return True
