"""
Audit log table.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base


class AuditLog(Base):
    """
    One bookkeeping or admin action.

    target_type/target_id name the record touched, e.g.
    ("journal_entry", "42") or ("exchange_rate", "USD").
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # None for system actions such as seeding
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)

    action = Column(String(100), nullable=False, index=True)
    target_type = Column(String(50), nullable=True)
    target_id = Column(String(64), index=True, nullable=True)
    meta_data = Column(JSON, nullable=True)

    correlation_id = Column(String(64), index=True, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', target={self.target_type}:{self.target_id})>"
