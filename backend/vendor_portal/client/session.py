"""
Session lifecycle: hydrate -> establish/resolve -> teardown.

The store is a small JSON file holding `token` and `user`, the only state the
portal keeps between runs. Resolution fails closed: any error presenting the
token to GET /me clears the credentials.
"""
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from vendor_portal.client.config import ClientConfig
from vendor_portal.client.http import ApiClient, ApiError

logger = logging.getLogger(__name__)

LOGIN = "login"
UNAUTHORIZED = "unauthorized"
OK = "ok"


class SessionStore:
    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, token: str, user: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionContext:
    """Current token and user, shared by every dashboard component."""

    def __init__(self, api: Optional[ApiClient] = None, store: Optional[SessionStore] = None):
        self.api = api or ApiClient()
        self.store = store or SessionStore(self.api.config.session_file)
        self.token: Optional[str] = None
        self.user: Optional[dict] = None

    @classmethod
    def from_config(cls, config: ClientConfig, http_session=None) -> "SessionContext":
        return cls(ApiClient(config, http_session), SessionStore(config.session_file))

    @property
    def role(self) -> Optional[str]:
        return self.user.get("role") if self.user else None

    @property
    def email(self) -> Optional[str]:
        return self.user.get("email") if self.user else None

    def hydrate(self) -> None:
        """Load whatever the store holds. Nothing is verified yet; see resolve()."""
        data = self.store.load()
        self.token = data.get("token")
        self.user = data.get("user")
        self.api.token = self.token

    def establish(self, token: str, user: dict) -> None:
        self.token = token
        self.user = user
        self.api.token = token
        self.store.save(token, user)

    def resolve(self) -> Optional[dict]:
        """Present the token to /me. Returns the user, or None after tearing down."""
        if not self.token:
            self.teardown()
            return None
        try:
            user = self.api.get("/me")
        except ApiError as e:
            logger.warning(f"Session rejected ({e.status_code}): {e.message}")
            self.teardown()
            return None
        self.establish(self.token, user)
        return user

    def teardown(self) -> None:
        self.token = None
        self.user = None
        self.api.token = None
        self.store.clear()

    def login(self, email: str, password: str) -> dict:
        """Raises ApiError on bad credentials; the caller shows the message."""
        data = self.api.post("/login", json={"email": email, "password": password})
        self.establish(data["token"], data["user"])
        logger.info(f"Logged in as {email} ({self.role})")
        return data["user"]

    def signup(self, name: str, email: str, password: str, role: str = "vendor") -> dict:
        return self.api.post(
            "/signup", json={"name": name, "email": email, "password": password, "role": role}
        )

    def logout(self) -> None:
        try:
            if self.token:
                self.api.post("/logout")
        except ApiError as e:
            logger.warning(f"Logout call failed, clearing local session anyway: {e.message}")
        finally:
            self.teardown()


def guard_page(session: SessionContext, allowed_roles: Iterable[str]) -> str:
    """Where a dashboard should send the user: login, unauthorized or ok."""
    if not session.user:
        return LOGIN
    if session.role not in allowed_roles:
        return UNAUTHORIZED
    return OK
