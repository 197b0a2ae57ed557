"""
Exchange rate Pydantic schemas.
"""

from pydantic import BaseModel


class RateQuoteResponse(BaseModel):
    """A published rate in VES per USD."""
    price: float
    last_update: str


class ExchangeRatesResponse(BaseModel):
    """Current BCV, parallel-market and average rates."""
    bcv: RateQuoteResponse
    paralelo: RateQuoteResponse
    promedio: RateQuoteResponse
