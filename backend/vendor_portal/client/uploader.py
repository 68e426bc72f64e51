"""
PDF upload/removal through the server's /uploads proxy.

Files go one at a time. A rejected or failed file is reported on its own and
the rest of the batch carries on. Keys of uploaded-but-unsubmitted files are
tracked so a cleared form can delete them again.
"""
import logging
from typing import Dict, Iterable, List

from vendor_portal.client.files import PendingFile
from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class PdfUploader:
    def __init__(self, session: SessionContext, notifier: Notifier):
        self.session = session
        self.notifier = notifier
        # key -> public url
        self.tracked: Dict[str, str] = {}

    @property
    def tracked_keys(self) -> List[str]:
        return list(self.tracked)

    def upload(self, field: str, files: Iterable[PendingFile], reupload: bool = False) -> List[str]:
        """Upload in order; returns the URLs of the files that made it."""
        urls = []
        for f in files:
            if f.content_type != PDF_CONTENT_TYPE:
                self.notifier.error(f"{f.filename} is not a PDF file.")
                continue
            try:
                stored = self.session.api.upload_pdf(field, f.filename, f.content, f.content_type, reupload=reupload)
            except ApiError as e:
                logger.error(f"Error uploading {f.filename}: {e.message}")
                self.notifier.error(f"Error uploading {f.filename}")
                continue
            self.tracked[stored["key"]] = stored["url"]
            urls.append(stored["url"])
        return urls

    def remove(self, url: str) -> bool:
        try:
            result = self.session.api.delete_upload(url)
        except ApiError as e:
            logger.error(f"Failed to delete {url}: {e.message}")
            self.notifier.error("Error removing file.")
            return False
        self.tracked.pop(result["key"], None)
        self.notifier.success("File removed successfully.")
        return True

    def sweep(self) -> None:
        """
        Delete every tracked file. A failed delete is logged and skipped.

        The submission form calls this from clear(); a failed submit keeps the
        files tracked so the vendor can retry. A failed reupload sweeps at once.
        """
        for key, url in list(self.tracked.items()):
            try:
                self.session.api.delete_upload(url)
            except ApiError as e:
                logger.error(f"Failed to delete {key}: {e.message}")
        self.tracked.clear()

    def forget(self) -> None:
        """After a successful submit the files belong to the invoice."""
        self.tracked.clear()
