"""
Role allow-lists shared by the API routes and the client page guard.
Trust: vendors only ever see their own invoices.
"""
from vendor_portal.models.user import User

VENDOR = "vendor"
FINANCE = "finance"
ADMIN = "admin"
ROLES = (VENDOR, FINANCE, ADMIN)

# Dashboard -> roles allowed to open it
PAGE_ROLES = {
    "finance-dashboard": (FINANCE,),
    "vendor-dashboard": (VENDOR,),
    "admin-dashboard": (ADMIN,),
}


def user_owns_inbox(user: User, email: str) -> bool:
    """A vendor may read only the inbox for their own login email."""
    return user.email.lower() == (email or "").lower()
