"""
Portal client: the dashboards' behaviour over the REST API.

Every component takes a SessionContext (token + user) and a Notifier that
collects the notices a browser would show as toasts.
"""
from vendor_portal.client.config import ClientConfig
from vendor_portal.client.http import ApiClient, ApiError
from vendor_portal.client.notifier import Notifier
from vendor_portal.client.session import SessionContext, SessionStore, guard_page

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientConfig",
    "Notifier",
    "SessionContext",
    "SessionStore",
    "guard_page",
]
