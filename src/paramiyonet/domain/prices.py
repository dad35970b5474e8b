"""Gold price quotes: provider client and time-to-live cache."""

import os
from datetime import datetime, timedelta, UTC
from decimal import Decimal, InvalidOperation
from typing import Optional, Protocol

import httpx
import structlog

from paramiyonet.domain.entities import GoldType, PriceSnapshot

logger = structlog.get_logger()

TRUNCGIL_BASE_URL = "https://finance.truncgil.com"
PROVIDER_SOURCE = "Truncgil Finance API"
FALLBACK_SOURCE = "Fallback Data"
DEFAULT_TTL = timedelta(minutes=2)

_CENTS = Decimal("0.01")

FALLBACK_PRICES = {
    GoldType.GRAM: Decimal("1950"),
    GoldType.QUARTER: Decimal("480"),
    GoldType.HALF: Decimal("960"),
    GoldType.FULL: Decimal("1920"),
}


class PriceProviderError(Exception):
    """The price provider could not produce a snapshot."""


class PriceProvider(Protocol):
    def fetch(self) -> PriceSnapshot: ...


def fallback_snapshot(timestamp: datetime) -> PriceSnapshot:
    """Fixed prices labelled as degraded data."""
    return PriceSnapshot(
        prices=dict(FALLBACK_PRICES),
        changes={gold_type: Decimal("0") for gold_type in GoldType},
        timestamp=timestamp,
        source=FALLBACK_SOURCE,
    )


def ttl_from_env() -> timedelta:
    """Cache time-to-live from PARAMIYONET_PRICE_TTL (seconds)."""
    value = os.environ.get("PARAMIYONET_PRICE_TTL")
    if value is None:
        return DEFAULT_TTL
    return timedelta(seconds=int(value))


class TruncgilPriceProvider:
    """Fetch gold quotes from the Truncgil finance API.

    One request per gold type; the quote code is the gold type's value.
    The unit price is the midpoint of the buying and selling prices.
    """

    def __init__(self, client: Optional[httpx.Client] = None, base_url: str = TRUNCGIL_BASE_URL):
        self.client = client or httpx.Client(timeout=10.0)
        self.base_url = base_url.rstrip("/")

    def _quote(self, gold_type: GoldType) -> tuple[Decimal, Decimal]:
        url = f"{self.base_url}/api/gold-rates/{gold_type.value}"
        try:
            response = self.client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PriceProviderError(f"Quote request for {gold_type.value} failed: {e}") from e

        quote = payload.get(gold_type.value) if isinstance(payload, dict) else None
        if not isinstance(quote, dict):
            raise PriceProviderError(f"Quote response has no '{gold_type.value}' entry")
        try:
            buying = Decimal(str(quote["Buying"]))
            selling = Decimal(str(quote["Selling"]))
            change = Decimal(str(quote.get("Change", 0)))
        except (KeyError, InvalidOperation) as e:
            raise PriceProviderError(f"Malformed quote for {gold_type.value}: {quote!r}") from e
        return ((buying + selling) / 2).quantize(_CENTS), change.quantize(_CENTS)

    def fetch(self) -> PriceSnapshot:
        prices = {}
        changes = {}
        for gold_type in GoldType:
            prices[gold_type], changes[gold_type] = self._quote(gold_type)
        return PriceSnapshot(
            prices=prices,
            changes=changes,
            timestamp=datetime.now(UTC),
            source=PROVIDER_SOURCE,
        )


class PriceQuoteCache:
    """Explicitly constructed price cache with a time-to-live.

    A failed fetch yields the fallback snapshot, which is never cached so
    the next ``get`` retries the provider.
    """

    def __init__(
        self,
        provider: PriceProvider,
        ttl: timedelta = DEFAULT_TTL,
        fallback=fallback_snapshot,
    ):
        """Initialize price cache.

        Args:
            provider: Source of fresh snapshots
            ttl: How long a fetched snapshot stays valid
            fallback: Callable building the degraded snapshot for a given time
        """
        self.provider = provider
        self.ttl = ttl
        self.fallback = fallback
        self._snapshot: Optional[PriceSnapshot] = None
        self._fetched_at: Optional[datetime] = None

    def get(self, now: Optional[datetime] = None) -> PriceSnapshot:
        now = now or datetime.now(UTC)
        if self._snapshot is not None and now - self._fetched_at < self.ttl:
            return self._snapshot

        try:
            snapshot = self.provider.fetch()
        except PriceProviderError as e:
            logger.warning("price_fetch_failed", error=str(e))
            return self.fallback(now)

        self._snapshot = snapshot
        self._fetched_at = now
        logger.debug("price_snapshot_cached", source=snapshot.source)
        return snapshot

    def invalidate(self) -> None:
        self._snapshot = None
        self._fetched_at = None
