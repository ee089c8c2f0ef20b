"""
Currency exchange rate database model.

One row per foreign currency: how many units of the base currency
one unit of the foreign currency is worth.
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from freight_ledger.app.db.session import Base


class ExchangeRate(Base):
    __tablename__ = "currency_exchange_rates"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    currency_code = Column(String(3), unique=True, index=True, nullable=False)
    currency_name = Column(String(100), nullable=False)
    rate_to_base = Column(Numeric(18, 6), nullable=False)

    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<ExchangeRate({self.currency_code}={self.rate_to_base})>"
