#!/usr/bin/env python
"""Seed development data: one user per role plus a few vendor master rows.

Idempotent: existing users and vendor codes are left alone.
"""
import logging

from vendor_portal.core.logging_config import configure_logging
from vendor_portal.core.security import get_password_hash
from vendor_portal.db.init_db import init_db
from vendor_portal.db.session import SessionLocal
from vendor_portal.models.user import User
from vendor_portal.models.vendor import Vendor

logger = logging.getLogger("seed_vendors")

DEV_PASSWORD = "Portal@2024"

USERS = [
    ("Vendor Demo", "vendor@example.com", "vendor"),
    ("Finance Demo", "finance@example.com", "finance"),
    ("Admin Demo", "admin@example.com", "admin"),
]

VENDORS = [
    {"id": "V001", "name": "Acme Supplies Pvt Ltd", "address": "12 MG Road, Bengaluru",
     "state": "Karnataka", "gst_number": "29ABCDE1234F1Z5", "pan": "ABCDE1234F"},
    {"id": "V002", "name": "Globex Services LLP", "address": "44 Marine Drive, Mumbai",
     "state": "Maharashtra", "gst_number": "27XYZAB9876C1Z2", "pan": "XYZAB9876C"},
    {"id": "V003", "name": "Initech Facilities", "address": "7 Anna Salai, Chennai",
     "state": "Tamil Nadu", "gst_number": "33PQRST4567K1Z9", "pan": "PQRST4567K"},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        for name, email, role in USERS:
            if db.query(User).filter(User.email == email).first():
                continue
            db.add(User(name=name, email=email, hashed_password=get_password_hash(DEV_PASSWORD), role=role))
            logger.info(f"Created {role} user {email} / {DEV_PASSWORD}")

        for row in VENDORS:
            if db.query(Vendor).filter(Vendor.id == row["id"]).first():
                continue
            db.add(Vendor(**row))
            logger.info(f"Created vendor {row['id']} {row['name']}")

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
