"""
Exchange Rate Source Adapter.

Fetches the current BCV and parallel-market rates from the pydolarve
monitor API, derives the average rate, and caches the result in Redis.

Failures surface as ExternalRateFetchError. Callers that only want a rate
to pre-fill a form use resolve_rate(), which degrades to None so the user
can still submit a custom rate.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel
from redis.exceptions import RedisError
from fastapi import Depends

from freight_ledger.app.core.config import settings
from freight_ledger.app.core.exceptions import ExternalRateFetchError
from freight_ledger.app.core.redis_client import get_redis
from freight_ledger.app.core.reliability import CircuitBreaker, CircuitOpenError, rate_circuit_breaker
from freight_ledger.app.domain.ledger.money import average_rate, to_decimal
from freight_ledger.app.models.enums import RateType

logger = logging.getLogger(__name__)

CACHE_KEY = "exchange_rates:current"


class RateQuote(BaseModel):
    """A single published rate (VES per USD)."""
    price: Decimal
    last_update: str


class ExchangeRates(BaseModel):
    """Current rates by source."""
    bcv: RateQuote
    paralelo: RateQuote
    promedio: RateQuote

    def price_for(self, rate_type: RateType) -> Optional[Decimal]:
        """Price for a fetched rate type; None for custom rates."""
        rate_type = RateType(rate_type)
        if rate_type == RateType.CUSTOM:
            return None
        return getattr(self, rate_type.value).price


def parse_rates(payload: Dict[str, Any]) -> ExchangeRates:
    """
    Build ExchangeRates from a monitor API response.

    Raises:
        ExternalRateFetchError: If the payload lacks the expected monitors.
    """
    try:
        monitors = payload["monitors"]
        bcv = monitors["bcv"]
        parallel = monitors["enparalelovzla"]
        bcv_price = to_decimal(bcv["price"])
        parallel_price = to_decimal(parallel["price"])
        stamp = payload.get("datetime") or {}
        if stamp.get("date") and stamp.get("time"):
            fetched_at = f"{stamp['date']} {stamp['time']}"
        else:
            fetched_at = datetime.now(timezone.utc).isoformat()
        return ExchangeRates(
            bcv=RateQuote(price=bcv_price, last_update=str(bcv.get("last_update", fetched_at))),
            paralelo=RateQuote(price=parallel_price, last_update=str(parallel.get("last_update", fetched_at))),
            promedio=RateQuote(price=average_rate(bcv_price, parallel_price), last_update=fetched_at),
        )
    except ExternalRateFetchError:
        raise
    except Exception as exc:
        raise ExternalRateFetchError(f"Unexpected exchange rate payload: {exc}") from exc


class ExchangeRateClient:
    """
    Client for the external rate source.

    Args:
        redis: Redis client used as cache (None disables caching)
        http_client: Optional shared httpx.AsyncClient (tests inject a mock transport)
        breaker: Circuit breaker guarding the HTTP call
    """

    def __init__(
        self,
        redis=None,
        http_client: Optional[httpx.AsyncClient] = None,
        breaker: CircuitBreaker = rate_circuit_breaker,
        url: str = None,
        cache_ttl: int = None,
    ):
        self.redis = redis
        self.http_client = http_client
        self.breaker = breaker
        self.url = url or settings.exchange_rate_api_url
        self.cache_ttl = cache_ttl or settings.exchange_rate_cache_ttl

    async def fetch_current_rates(self) -> ExchangeRates:
        """
        Return current rates, from cache when fresh.

        Raises:
            ExternalRateFetchError: If the source is unreachable, returns an
                error, sends an unexpected payload, or the circuit is open.
        """
        cached = await self._read_cache()
        if cached is not None:
            return cached

        try:
            rates = await self.breaker.call(self._download)
        except CircuitOpenError as exc:
            raise ExternalRateFetchError("Exchange rate source temporarily disabled") from exc

        await self._write_cache(rates)
        return rates

    async def resolve_rate(self, rate_type: Optional[RateType]) -> Optional[Decimal]:
        """
        Live price for rate_type, or None when it is custom or unavailable.
        """
        if rate_type is None or RateType(rate_type) == RateType.CUSTOM:
            return None
        try:
            rates = await self.fetch_current_rates()
        except ExternalRateFetchError as exc:
            logger.warning("No live exchange rate available: %s", exc.message)
            return None
        return rates.price_for(rate_type)

    async def _download(self) -> ExchangeRates:
        try:
            if self.http_client is not None:
                response = await self.http_client.get(self.url)
            else:
                async with httpx.AsyncClient(timeout=settings.exchange_rate_timeout_seconds) as client:
                    response = await client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Exchange rate fetch failed: %s", exc)
            raise ExternalRateFetchError(f"Error al obtener tasa de cambio: {exc}") from exc
        return parse_rates(payload)

    async def _read_cache(self) -> Optional[ExchangeRates]:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(CACHE_KEY)
        except RedisError as exc:
            logger.warning("Exchange rate cache read failed: %s", exc)
            return None
        if not raw:
            return None
        return ExchangeRates.model_validate_json(raw)

    async def _write_cache(self, rates: ExchangeRates) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.set(CACHE_KEY, rates.model_dump_json(), ex=self.cache_ttl)
        except RedisError as exc:
            logger.warning("Exchange rate cache write failed: %s", exc)


async def get_exchange_rate_client(redis=Depends(get_redis)) -> ExchangeRateClient:
    """FastAPI dependency providing a cache-backed rate client."""
    return ExchangeRateClient(redis=redis)
