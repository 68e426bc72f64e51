"""
Thin JSON client over a requests-compatible session.

Non-2xx responses and transport failures both become ApiError; callers turn
them into error notices. Nothing is retried.
"""
import logging
from typing import Any, Optional

import requests

from vendor_portal.client.config import ClientConfig

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Failed API call. status_code is 0 when the server was never reached."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


def error_message(response, fallback: str = "Something went wrong.") -> str:
    """Prefer the server's `message`, then a string `detail`, then the fallback."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return fallback


class ApiClient:
    """
    One method per HTTP verb plus the multipart upload.

    `session` is anything with requests.Session.request's signature; tests pass
    FastAPI's TestClient.
    """

    def __init__(self, config: Optional[ClientConfig] = None, session=None):
        self.config = config or ClientConfig()
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(self, method: str, path: str, raw: bool = False, **kwargs) -> Any:
        url = self.config.url(path)
        if self.config.timeout is not None:
            kwargs.setdefault("timeout", self.config.timeout)
        try:
            response = self.session.request(method, url, headers=self._headers(), **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(0, "Network error. Please check your connection.") from e

        if not 200 <= response.status_code < 300:
            message = error_message(response)
            logger.warning(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiError(response.status_code, message)

        if raw:
            return response.content
        if not response.text:
            return None
        return response.json()

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    def upload_pdf(self, field: str, filename: str, content: bytes, content_type: str, reupload: bool = False) -> dict:
        """POST /uploads; returns {key, url}."""
        return self.post(
            "/uploads",
            files={"file": (filename, content, content_type)},
            data={"field": field, "reupload": "true" if reupload else "false"},
        )

    def delete_upload(self, url: str) -> dict:
        return self.delete("/uploads", json={"url": url})
