"""
Exchange Rate API Endpoints.
"""

from fastapi import APIRouter, Depends

from freight_ledger.app.schemas.exchange_rate import ExchangeRatesResponse
from freight_ledger.app.services.exchange_rates import ExchangeRateClient, get_exchange_rate_client

router = APIRouter(prefix="/exchange-rates", tags=["Exchange Rates"])


@router.get("", response_model=ExchangeRatesResponse)
async def get_current_rates(
    rates: ExchangeRateClient = Depends(get_exchange_rate_client)
):
    """
    Current BCV, parallel and average rates (VES per USD).

    Returns 503 when the source is unavailable; clients should then let the
    user enter a custom rate.
    """
    current = await rates.fetch_current_rates()
    return ExchangeRatesResponse.model_validate(current.model_dump())
