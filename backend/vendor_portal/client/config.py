"""Client configuration. Environment variables override defaults."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _default_session_file() -> str:
    return os.getenv(
        "VENDOR_PORTAL_SESSION_FILE",
        str(Path.home() / ".vendor_portal" / "session.json"),
    )


@dataclass
class ClientConfig:
    base_url: str = field(default_factory=lambda: os.getenv("VENDOR_PORTAL_API_URL", "http://localhost:8000"))
    # Seconds; None leaves the session default. Requests are never retried
    timeout: Optional[float] = 30.0
    session_file: str = field(default_factory=_default_session_file)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
