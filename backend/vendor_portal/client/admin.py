"""
Admin dashboard: vendor master list, form actions and spreadsheet import.

Import sheet layout (first worksheet, header in row 1):
    ID | Name | Address | State | GST Number | PAN
"""
import io
import logging
import zipfile
from pathlib import Path
from typing import List, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from vendor_portal.client.http import ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext
from vendor_portal.services.invoice_views import search_vendors

logger = logging.getLogger(__name__)

SHEET_COLUMNS = {
    "ID": "id",
    "Name": "name",
    "Address": "address",
    "State": "state",
    "GST Number": "gst_number",
    "PAN": "pan",
}


def _cell(value):
    if value is None:
        return None
    if isinstance(value, float) and value == int(value):
        return str(int(value))
    text = str(value).strip()
    return text or None


def read_vendor_sheet(source: Union[str, Path, bytes]) -> List[dict]:
    """One dict per non-blank row of the first worksheet, keyed by API field."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)
    wb = load_workbook(source, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [SHEET_COLUMNS.get(str(h).strip()) if h is not None else None for h in header]

        vendors = []
        for row in rows:
            record = {key: None for key in columns if key}
            for key, value in zip(columns, row):
                if key:
                    record[key] = _cell(value)
            if any(v is not None for v in record.values()):
                vendors.append(record)
        return vendors
    finally:
        wb.close()


class VendorAdmin:
    def __init__(self, session: SessionContext, notifier: Notifier):
        self.session = session
        self.notifier = notifier
        self.vendors: List[dict] = []
        self.query = ""
        self.busy = False

    def fetch(self) -> List[dict]:
        try:
            self.vendors = self.session.api.get("/vendor")["vendors"]
        except ApiError as e:
            logger.error(f"Error fetching vendors: {e.message}")
            self.notifier.error("Failed to fetch vendors.")
        return self.vendors

    def visible(self) -> List[dict]:
        return search_vendors(self.vendors, self.query)

    def _mutate(self, method: str, path: str, success: str, **kwargs) -> bool:
        self.busy = True
        try:
            self.session.api.request(method, path, **kwargs)
        except ApiError as e:
            logger.error(f"{method} {path} failed: {e.message}")
            self.notifier.error(e.message)
            return False
        finally:
            self.busy = False
        self.notifier.success(success)
        self.fetch()
        return True

    def create(self, vendor: dict) -> bool:
        return self._mutate("POST", "/vendor", "Vendor added.", json=vendor)

    def update(self, vendor: dict) -> bool:
        fields = {k: v for k, v in vendor.items() if k not in ("id", "updated_at")}
        return self._mutate("PUT", f"/{vendor['id']}", "Vendor updated.", json=fields)

    def delete(self, vendor_id: str) -> bool:
        return self._mutate("DELETE", f"/vendor/{vendor_id}", "Vendor deleted.")

    def bulk_import(self, source) -> Optional[dict]:
        """Read the sheet and post it. Skipped rows come back as warnings."""
        try:
            rows = read_vendor_sheet(source)
        except (OSError, ValueError, KeyError, InvalidFileException, zipfile.BadZipFile) as e:
            logger.error(f"Unreadable vendor sheet: {e}")
            self.notifier.error("Could not read the spreadsheet.")
            return None
        if not rows:
            self.notifier.warning("No vendors found in the spreadsheet.")
            return None

        self.busy = True
        try:
            result = self.session.api.post("/vendor/bulk-create", json={"vendors": rows})
        except ApiError as e:
            logger.error(f"Error saving vendors: {e.message}")
            self.notifier.error("Failed to save vendors.")
            return None
        finally:
            self.busy = False

        self.notifier.success(result["message"])
        for skipped in result["skipped"]:
            self.notifier.warning(f"Row {skipped['row']} skipped: {skipped['reason']}")
        self.fetch()
        return result
