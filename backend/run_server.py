"""Run the portal API with uvicorn. Host/port from PORTAL_HOST / PORTAL_PORT."""
import logging
import os
import signal
import sys

import uvicorn

from vendor_portal.core.logging_config import configure_logging

logger = logging.getLogger("run_server")


def handle_signal(sig, frame):
    logger.info(f"Received signal {sig}, shutting down gracefully...")
    sys.exit(0)


signal.signal(signal.SIGINT, handle_signal)
signal.signal(signal.SIGTERM, handle_signal)

if __name__ == "__main__":
    configure_logging()
    logger.info("Starting Vendor Invoice Portal API")
    uvicorn.run(
        "vendor_portal.main:app",
        host=os.getenv("PORTAL_HOST", "127.0.0.1"),
        port=int(os.getenv("PORTAL_PORT", "8000")),
        log_level="info",
    )
