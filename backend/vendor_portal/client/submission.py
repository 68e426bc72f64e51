"""Vendor dashboard: the new-invoice form."""
import logging
from typing import Dict, Iterable, List, Optional

from vendor_portal.client.files import PendingFile
from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext
from vendor_portal.client.uploader import PdfUploader
from vendor_portal.services.invoice_workflow import PDF_FIELDS, SUBMITTED_FIELDS

logger = logging.getLogger(__name__)

FORM_FIELDS = ("id",) + SUBMITTED_FIELDS
AUTOFILL_FIELDS = ("id", "name", "address", "state", "gst_number", "pan")


def _empty_pdfs() -> Dict[str, List[str]]:
    return {field: [] for field in PDF_FIELDS}


class InvoiceSubmissionForm:
    def __init__(self, session: SessionContext, notifier: Notifier, uploader: Optional[PdfUploader] = None):
        self.session = session
        self.notifier = notifier
        self.uploader = uploader or PdfUploader(session, notifier)
        self.busy = False
        self.reset()

    def reset(self) -> None:
        self.values: Dict[str, str] = dict.fromkeys(FORM_FIELDS, "")
        self.pdfs = _empty_pdfs()

    def set_field(self, name: str, value) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(f"Unknown invoice field: {name}")
        self.values[name] = "" if value is None else str(value)

    def autofill(self) -> bool:
        """Copy vendor master identity fields for the typed GSTIN."""
        gst_number = self.values["gst_number"].strip()
        if not gst_number:
            self.notifier.warning("Please enter a Vendor GSTN to search.")
            return False
        try:
            vendor = self.session.api.get(f"/vendor/gst/{gst_number}")["vendor"]
        except ApiError as e:
            logger.error(f"Failed to autofill {gst_number}: {e.message}")
            self.notifier.error("Vendor not found or server error.")
            return False
        for name in AUTOFILL_FIELDS:
            self.values[name] = vendor.get(name) or ""
        self.notifier.success("Vendor details autofilled.")
        return True

    def add_files(self, field: str, files: Iterable[PendingFile]) -> List[str]:
        if field not in PDF_FIELDS:
            raise KeyError(f"Unknown document field: {field}")
        self.busy = True
        try:
            urls = self.uploader.upload(field, files)
            self.pdfs[field] = self.pdfs[field] + urls
            return urls
        finally:
            self.busy = False

    def remove_file(self, field: str, url: str) -> bool:
        if not self.uploader.remove(url):
            return False
        self.pdfs[field] = [u for u in self.pdfs[field] if u != url]
        return True

    def clear(self) -> None:
        """Delete files uploaded for this draft, then reset."""
        self.uploader.sweep()
        self.reset()

    def payload(self) -> dict:
        return {**self.values, "pdfs": {f: list(urls) for f, urls in self.pdfs.items()}, "email": self.session.email}

    def submit(self) -> Optional[dict]:
        if not self.session.token:
            self.notifier.error("Unauthorized: Please log in again.")
            return None
        if not self.values["gst_number"].strip():
            self.notifier.warning("GST number is required.")
            return None

        self.busy = True
        try:
            invoice = self.session.api.post("/vendor/upload", json=self.payload())
        except ApiError as e:
            logger.error(f"Invoice submission failed: {e.message}")
            self.notifier.error("Something went wrong.")
            return None
        finally:
            self.busy = False

        self.notifier.success("File uploaded successfully and finance notified.")
        self.uploader.forget()
        self.reset()
        return invoice
