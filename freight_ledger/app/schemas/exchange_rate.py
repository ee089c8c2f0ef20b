"""
Exchange Rate Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ExchangeRateUpdate(BaseModel):
    """Body of PUT /exchange-rates/{currency_code}."""
    rate_to_base: Decimal = Field(..., gt=0, description="Base-currency units per one unit")
    currency_name: Optional[str] = Field(default=None, max_length=100)


class ExchangeRateResponse(BaseModel):
    id: int
    currency_code: str
    currency_name: str
    rate_to_base: Decimal
    updated_by: Optional[int]
    updated_at: datetime

    class Config:
        from_attributes = True
