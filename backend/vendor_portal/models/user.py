from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from vendor_portal.db.base import Base


class User(Base):
    """Portal login. Role decides which dashboard the user may open."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="vendor")  # vendor | finance | admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())
