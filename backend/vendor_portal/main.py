"""
Vendor Invoice Portal Backend.

ARCHITECTURE:
- Vendor dashboard: submit PO/invoice PDFs with GST metadata, answer remarks
- Finance dashboard: review, send remarks, approve for payment
- Admin dashboard: vendor master, audit trail
- SQL database: source of truth for invoices, vendors, audit entries
- Object storage: PDFs, reachable only through this server's /uploads proxy

WORKFLOW:
- pending -> changes_requested -> pending (reupload) -> sent_for_payment
- Every transition is decided here and written to the audit trail
- Clients send intent and re-fetch; no client-side status changes
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from vendor_portal.api.routes import auth, invoices, vendors, audit, uploads
from vendor_portal.core.config import settings
from vendor_portal.core.exceptions import http_exception_handler
from vendor_portal.core.logging_config import configure_logging
from vendor_portal.core.rate_limiter import RateLimitMiddleware
from vendor_portal.db.init_db import init_db
from vendor_portal.services.storage_service import LocalStorage, get_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    1. Configure logging
    2. Initialize database tables
    """
    configure_logging()
    logger.info("Initializing database...")
    init_db()
    logger.info(f"Database ready; storage backend: {settings.STORAGE_BACKEND}")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Vendor Invoice Portal API",
    description="Vendor submission, finance review and vendor master. pending -> review -> payment.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# SECURITY: Trust only specific hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to configured origins, explicit methods and headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)

# SECURITY: Rate limiting against brute force and upload floods
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


@app.get("/health")
def health():
    return {"status": "ok", "storage": settings.STORAGE_BACKEND}


app.include_router(auth.router, tags=["auth"])
app.include_router(invoices.router, tags=["invoices"])
app.include_router(uploads.router, tags=["uploads"])
app.include_router(audit.router, tags=["audit"])
# Last: it owns the bare PUT /{vendor_id} route
app.include_router(vendors.router, tags=["vendors"])

# Development storage serves its files itself; S3 URLs point at the bucket
_storage = get_storage()
if isinstance(_storage, LocalStorage):
    app.mount("/files", StaticFiles(directory=str(_storage.root)), name="files")
