"""ORM model for the admin action audit trail."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.models.base import Base


class AdminLog(Base):
    """
    One audited admin action (login, logout, account changes, ...).

    details holds a JSON-encoded object. admin_user_id is 0 for failed logins
    with an unknown username, so it is not a foreign key.
    """

    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_user_id = Column(Integer, nullable=False, index=True)
    admin_username = Column(String(50), nullable=False)
    action = Column(String(100), nullable=False, index=True)
    target_type = Column(String(50), nullable=True)
    target_id = Column(String(50), nullable=True)
    details = Column(Text, nullable=False, default="{}")
    ip_address = Column(String(45), nullable=False, default="unknown")
    user_agent = Column(Text, nullable=True)
    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
