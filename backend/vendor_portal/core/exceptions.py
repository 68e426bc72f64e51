"""
Portal errors as HTTPExceptions with non-leaky messages.

Callers get a short, fixed message; the reason goes to the log only.
Every error body carries both `detail` (FastAPI convention) and `message`
(what the portal front-ends read); see `http_exception_handler`.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str, headers: Optional[dict] = None) -> HTTPException:
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


class BusinessError:
    """Factories for the errors routes raise. Use as `raise BusinessError.x(...)`."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        404 for a missing invoice, vendor or upload.

            if not invoice:
                raise BusinessError.not_found("Invoice", reason=f"id={invoice_id}")
        """
        if reason:
            logger.warning(f"{resource} lookup failed: {reason}")
        return _error(status.HTTP_404_NOT_FOUND, f"{resource} not found")

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """Same 401 for a missing, forged or expired token and for unknown users."""
        logger.warning(f"Rejected credentials: {reason}")
        return _error(
            status.HTTP_401_UNAUTHORIZED,
            "Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        """403 for role mismatches and cross-vendor access."""
        logger.warning(f"Denied: {reason}")
        return _error(status.HTTP_403_FORBIDDEN, "Access denied")

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """400 for business validation, e.g. an empty remark or a non-PDF upload."""
        logger.info(f"Rejected request: {detail}")
        return _error(status.HTTP_400_BAD_REQUEST, detail)

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """409 for duplicate vendor codes and illegal invoice status transitions."""
        logger.info(f"Conflict: {detail}")
        return _error(status.HTTP_409_CONFLICT, detail)

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500. The real cause (storage, SQL) is logged with its traceback
        and never sent to the client.
        """
        if original_error is not None:
            logger.error(
                f"Unhandled {type(original_error).__name__}: {original_error}",
                exc_info=original_error,
            )
        else:
            logger.error("Unhandled server error")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred. Please try again later.",
        )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Mirror `detail` into `message` so clients can read either key."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "message": message},
        headers=getattr(exc, "headers", None),
    )
