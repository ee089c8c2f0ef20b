"""
Document counter database model.

Backs sequential document numbers such as journal entry numbers
(JE-2026-0001). Incremented atomically with UPDATE ... RETURNING.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base


class DocumentCounter(Base):
    __tablename__ = "document_counters"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    counter_key = Column(String(50), unique=True, nullable=False)
    prefix = Column(String(10), nullable=False)
    counter_value = Column(Integer, default=0, nullable=False)
    description = Column(String(255), nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<DocumentCounter(key='{self.counter_key}', value={self.counter_value})>"
