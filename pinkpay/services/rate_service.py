"""PinkPay Offramp - Exchange Rate Service.

This module provides:
- RateTable: an immutable snapshot of (asset, currency) -> rate
- Rate sources: static reference table, HTTP feed, Redis snapshot
- RateProvider: holds the current table and swaps it whole on refresh
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any

import httpx
import redis

from pinkpay.models.exchange_rate import DEFAULT_RATES, ExchangeRate

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "pinkpay:rates:snapshot"


class RateTable:
    """Immutable rate snapshot. Readers never observe a partial refresh."""

    def __init__(self, rates: Iterable[ExchangeRate] = (), fetched_at: datetime | None = None):
        self._rates = MappingProxyType({rate.pair: rate for rate in rates})
        self.fetched_at = fetched_at or datetime.now(UTC)

    def get(self, from_asset: str, to_currency: str) -> ExchangeRate | None:
        return self._rates.get((from_asset.upper(), to_currency.upper()))

    def __len__(self) -> int:
        return len(self._rates)

    def __iter__(self) -> Iterator[ExchangeRate]:
        return iter(self._rates.values())


# ==================== Sources ====================


class RateSource(ABC):
    """Where a full rate table comes from."""

    name = "source"

    @abstractmethod
    def fetch(self) -> list[ExchangeRate]:
        """Fetch every available rate. Raises on transport or parse failure."""


class StaticRateSource(RateSource):
    """Fixed reference rates, stamped with the fetch time."""

    name = "static"

    def __init__(self, rates: dict[tuple[str, str], Decimal] | None = None):
        self._rates = DEFAULT_RATES if rates is None else rates

    def fetch(self) -> list[ExchangeRate]:
        now = datetime.now(UTC)
        return [
            ExchangeRate(from_asset=base, to_currency=quote, rate=rate, observed_at=now)
            for (base, quote), rate in self._rates.items()
        ]


class HttpRateSource(RateSource):
    """JSON rate feed.

    The value at ``response_path`` must be a list of objects with
    ``from``, ``to`` and ``rate`` keys.
    """

    name = "http"

    def __init__(self, url: str, response_path: str | None = None, timeout: float = 10.0):
        self.url = url
        self.response_path = response_path
        self.timeout = timeout

    def fetch(self) -> list[ExchangeRate]:
        headers = {
            "Accept": "application/json, text/plain, */*",
            "Cache-Control": "no-cache",
        }
        with httpx.Client(timeout=self.timeout, headers=headers) as client:
            response = client.get(self.url)
            response.raise_for_status()
            data = response.json()

        entries = extract_value(data, self.response_path)
        if not isinstance(entries, list):
            raise ValueError(f"No rate list at path {self.response_path!r}")

        now = datetime.now(UTC)
        return [
            ExchangeRate(
                from_asset=str(entry["from"]).upper(),
                to_currency=str(entry["to"]).upper(),
                rate=Decimal(str(entry["rate"])),
                observed_at=now,
            )
            for entry in entries
        ]


class RedisRateSource(RateSource):
    """Reads the snapshot published by the rate refresh worker."""

    name = "redis"

    def __init__(self, client: redis.Redis, key: str = SNAPSHOT_KEY):
        self._client = client
        self._key = key

    def fetch(self) -> list[ExchangeRate]:
        raw = self._client.get(self._key)
        if raw is None:
            return []
        return [ExchangeRate.model_validate(item) for item in json.loads(raw)]


def publish_snapshot(client: redis.Redis, rates: list[ExchangeRate], key: str = SNAPSHOT_KEY) -> None:
    """Replace the shared snapshot in a single SET."""
    payload = json.dumps([rate.model_dump(mode="json") for rate in rates])
    client.set(key, payload)


def extract_value(data: Any, path: str | None) -> Any:
    """Extract value from nested dict/list using dot notation path.

    Supports:
    - data.field
    - data.array[0]
    - data.array[0].field

    Example: 'data.rates' or 'result.items[0].rates'
    """
    if not path:
        return data

    current = data
    parts = re.split(r"\.(?![^\[]*\])", path)

    for part in parts:
        if current is None:
            return None

        match = re.match(r"(\w+)\[(\d+)\]", part)
        if match:
            field, index = match.groups()
            if isinstance(current, dict) and field in current:
                current = current[field]
                if isinstance(current, list) and int(index) < len(current):
                    current = current[int(index)]
                else:
                    return None
            else:
                return None
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None

    return current


# ==================== Provider ====================


class RateProvider:
    """Serves rates from the latest complete snapshot."""

    def __init__(self, source: RateSource, table: RateTable | None = None):
        self.source = source
        self._table = table or RateTable()

    @property
    def table(self) -> RateTable:
        return self._table

    def get_rate(self, from_asset: str, to_currency: str) -> ExchangeRate | None:
        """Get the current rate, or None when the pair is unavailable."""
        return self._table.get(from_asset, to_currency)

    def refresh(self) -> bool:
        """Fetch a full table and swap it in.

        On failure the previous table stays in place.

        Returns:
            True if the table was replaced
        """
        try:
            rates = self.source.fetch()
        except Exception as e:
            logger.warning("Rate refresh from %s failed: %s", self.source.name, e)
            return False

        if not rates:
            logger.warning("Rate refresh from %s returned no rates", self.source.name)
            return False

        self._table = RateTable(rates)
        logger.debug("Rate table refreshed from %s: %d pairs", self.source.name, len(rates))
        return True

    async def poll(self, interval: float) -> None:
        """Refresh every ``interval`` seconds until cancelled.

        The first refresh happens after one interval; callers load the
        initial table themselves.
        """
        while True:
            await asyncio.sleep(interval)
            await asyncio.to_thread(self.refresh)


def build_rate_source(
    kind: str,
    url: str = "",
    response_path: str | None = None,
    timeout: float = 10.0,
    client: redis.Redis | None = None,
) -> RateSource:
    """Create a rate source by name: static, http or redis."""
    if kind == "http":
        if not url:
            raise ValueError("HTTP rate source requires a URL")
        return HttpRateSource(url, response_path, timeout)
    if kind == "redis":
        if client is None:
            raise ValueError("Redis rate source requires a client")
        return RedisRateSource(client)
    return StaticRateSource()
