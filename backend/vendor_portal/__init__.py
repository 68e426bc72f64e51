"""Vendor invoice portal: FastAPI backend and a requests-based portal client."""
