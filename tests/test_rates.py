"""Tests for rate sources and the rate provider."""

import json
from datetime import UTC, datetime
from decimal import Decimal

import httpx
import pytest

from pinkpay.models.exchange_rate import ExchangeRate
from pinkpay.services import rate_service
from pinkpay.services.rate_service import (
    HttpRateSource,
    RateProvider,
    RateSource,
    RateTable,
    RedisRateSource,
    StaticRateSource,
    build_rate_source,
    extract_value,
    publish_snapshot,
)
from pinkpay.tasks import rates as rate_tasks


class ListSource(RateSource):
    name = "list"

    def __init__(self, batches):
        self.batches = list(batches)

    def fetch(self):
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch


def _rate(asset, currency, value):
    return ExchangeRate(
        from_asset=asset, to_currency=currency, rate=Decimal(value), observed_at=datetime.now(UTC)
    )


class TestRateTable:
    def test_lookup_is_case_insensitive(self):
        table = RateTable([_rate("USDC", "KSH", "129.50")])

        assert table.get("usdc", "ksh").rate == Decimal("129.50")
        assert table.get("USDT", "KSH") is None
        assert len(table) == 1


class TestRateProvider:
    def test_refresh_replaces_whole_table(self):
        source = ListSource(
            [
                [_rate("USDC", "KSH", "129.50"), _rate("USDT", "KSH", "129.45")],
                [_rate("USDC", "KSH", "130.00")],
            ]
        )
        provider = RateProvider(source)

        assert provider.refresh() is True
        assert provider.refresh() is True

        assert provider.get_rate("USDC", "KSH").rate == Decimal("130.00")
        assert provider.get_rate("USDT", "KSH") is None

    def test_failed_refresh_keeps_previous_table(self):
        source = ListSource([[_rate("USDC", "KSH", "129.50")], httpx.ConnectError("down"), []])
        provider = RateProvider(source)
        provider.refresh()
        before = provider.table

        assert provider.refresh() is False
        assert provider.refresh() is False
        assert provider.table is before
        assert provider.get_rate("USDC", "KSH").rate == Decimal("129.50")

    def test_unavailable_pair_returns_none(self, rate_provider):
        assert rate_provider.get_rate("DOGE", "KSH") is None

    def test_static_source_serves_reference_table(self, rate_provider):
        assert rate_provider.get_rate("USDC", "KSH").rate == Decimal("129.50")
        assert rate_provider.get_rate("BTC", "NGN").rate == Decimal("86700000.00")
        assert len(rate_provider.table) == 12


class TestHttpRateSource:
    def test_fetch_reads_rates_at_path(self, monkeypatch):
        payload = {
            "data": {
                "rates": [
                    {"from": "usdc", "to": "ksh", "rate": "129.9"},
                    {"from": "USDT", "to": "KSH", "rate": 129.8},
                ]
            }
        }

        def handler(request):
            return httpx.Response(200, json=payload)

        transport = httpx.MockTransport(handler)
        original_client = httpx.Client

        def client_factory(*args, **kwargs):
            return original_client(*args, transport=transport, **kwargs)

        monkeypatch.setattr(httpx, "Client", client_factory)

        rates = HttpRateSource("https://rates.example.com", "data.rates").fetch()

        assert [(r.from_asset, r.to_currency, r.rate) for r in rates] == [
            ("USDC", "KSH", Decimal("129.9")),
            ("USDT", "KSH", Decimal("129.8")),
        ]

    def test_fetch_raises_when_path_missing(self, monkeypatch):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"data": {}}))
        original_client = httpx.Client
        monkeypatch.setattr(
            httpx, "Client", lambda *a, **kw: original_client(*a, transport=transport, **kw)
        )

        with pytest.raises(ValueError):
            HttpRateSource("https://rates.example.com", "data.rates").fetch()


class TestRedisSnapshot:
    def test_published_snapshot_round_trips(self, fake_redis):
        rates = StaticRateSource().fetch()
        publish_snapshot(fake_redis, rates)

        fetched = RedisRateSource(fake_redis).fetch()

        assert {r.pair: r.rate for r in fetched} == {r.pair: r.rate for r in rates}

    def test_missing_snapshot_is_empty(self, fake_redis):
        provider = RateProvider(RedisRateSource(fake_redis))

        assert provider.refresh() is False

    def test_snapshot_is_one_json_document(self, fake_redis):
        publish_snapshot(fake_redis, [_rate("USDC", "KSH", "129.50")], key="k")

        assert json.loads(fake_redis.data["k"])[0]["from_asset"] == "USDC"


class TestExtractValue:
    @pytest.mark.parametrize(
        "path,expected",
        [
            (None, {"data": {"items": [{"rates": [1]}]}}),
            ("data.items[0].rates", [1]),
            ("data.items[3]", None),
            ("data.missing", None),
        ],
    )
    def test_paths(self, path, expected):
        assert extract_value({"data": {"items": [{"rates": [1]}]}}, path) == expected


class TestBuildRateSource:
    def test_defaults_to_static(self):
        assert isinstance(build_rate_source("static"), StaticRateSource)

    def test_http_requires_url(self):
        with pytest.raises(ValueError):
            build_rate_source("http")

    def test_redis_requires_client(self, fake_redis):
        with pytest.raises(ValueError):
            build_rate_source("redis")
        assert isinstance(build_rate_source("redis", client=fake_redis), RedisRateSource)


class FailingSource(RateSource):
    name = "failing"

    def fetch(self):
        raise httpx.ConnectError("upstream down")


class TestRefreshTask:
    def test_publishes_snapshot(self, monkeypatch, fake_redis):
        monkeypatch.setattr(rate_tasks, "get_redis", lambda: fake_redis)
        monkeypatch.setattr(rate_tasks, "build_rate_source", lambda *a, **kw: StaticRateSource())

        assert rate_tasks.refresh_rates() == 12

        provider = RateProvider(RedisRateSource(fake_redis, key=rate_service.SNAPSHOT_KEY))
        assert provider.refresh()
        assert provider.get_rate("USDC", "KSH").rate == Decimal("129.50")

    def test_failed_fetch_keeps_snapshot(self, monkeypatch, fake_redis):
        fake_redis.data[rate_service.SNAPSHOT_KEY] = "[]"
        monkeypatch.setattr(rate_tasks, "get_redis", lambda: fake_redis)
        monkeypatch.setattr(rate_tasks, "build_rate_source", lambda *a, **kw: FailingSource())

        assert rate_tasks.refresh_rates() == 0
        assert fake_redis.data[rate_service.SNAPSHOT_KEY] == "[]"
