import asyncio
import http.client
from datetime import datetime, timedelta

import pytest

from expense_tracker.services import http_client
from expense_tracker.services.http_client import HttpError
from expense_tracker.services.rates.cache_service import RateCacheService
from expense_tracker.services.rates.providers import (
    ExternalHTTPRateProvider,
    StaticRateProvider,
    make_rate_provider,
)

from conftest import FULL_RATES, FakeRateProvider, make_table


def test_refresh_replaces_table_and_persists(db):
    svc = RateCacheService(FakeRateProvider(make_table()), db=db)
    assert not svc.rates_ready()
    assert svc.refresh() is True
    assert svc.rates_ready()
    assert db.load_rate_table().rates == FULL_RATES


def test_failed_refresh_keeps_previous_table(db):
    first = make_table()
    svc = RateCacheService(FakeRateProvider(first, None), db=db)
    svc.refresh()
    assert svc.refresh() is False
    assert svc.table() == first


def test_empty_table_counts_as_no_update():
    svc = RateCacheService(FakeRateProvider(make_table({})))
    assert svc.refresh() is False
    assert not svc.rates_ready()


def test_load_cached_seeds_table(db):
    db.save_rate_table(make_table())
    svc = RateCacheService(FakeRateProvider(), db=db)
    assert svc.load_cached() is True
    assert svc.converter().convert(100, "USD", "EUR") == pytest.approx(90.0)


def test_load_cached_without_db():
    assert RateCacheService(FakeRateProvider()).load_cached() is False


def test_refresh_async_runs_fetch():
    provider = FakeRateProvider(make_table())
    svc = RateCacheService(provider)
    assert asyncio.run(svc.refresh_async()) is True
    assert provider.calls == 1


def test_staleness_follows_ttl():
    fetched = datetime(2024, 3, 15, 12, 0)
    svc = RateCacheService(FakeRateProvider(), ttl_seconds=60)
    assert svc.is_stale(fetched)
    svc.set_table(make_table(fetched_at=fetched))
    assert not svc.is_stale(fetched + timedelta(seconds=30))
    assert svc.is_stale(fetched + timedelta(seconds=60))


def test_refresh_if_stale_skips_fresh_table():
    fetched = datetime(2024, 3, 15, 12, 0)
    provider = FakeRateProvider(make_table())
    svc = RateCacheService(provider, ttl_seconds=3600)
    svc.set_table(make_table(fetched_at=fetched))
    assert svc.refresh_if_stale(fetched + timedelta(minutes=5)) is False
    assert provider.calls == 0


def test_static_provider_covers_supported_currencies():
    table = StaticRateProvider().fetch()
    assert table is not None
    assert set(FULL_RATES) <= set(table.rates)


def test_make_rate_provider_rejects_unknown_kind():
    with pytest.raises(ValueError):
        make_rate_provider("carrier-pigeon")


def test_external_provider_builds_url():
    provider = make_rate_provider(
        "external-http", base_url="https://rates.example/v4/latest/", base_currency="USD"
    )
    assert isinstance(provider, ExternalHTTPRateProvider)
    assert provider.url == "https://rates.example/v4/latest/USD"


def test_external_provider_network_failure_is_no_update(monkeypatch):
    def boom(url, **kwargs):
        raise HttpError("offline")

    monkeypatch.setattr("expense_tracker.services.rates.providers.get_json", boom)
    assert ExternalHTTPRateProvider().fetch() is None


def test_external_provider_rejects_partial_payload(monkeypatch):
    monkeypatch.setattr(
        "expense_tracker.services.rates.providers.get_json",
        lambda url, **kwargs: {"base": "USD", "rates": {"EUR": 0.9}},
    )
    assert ExternalHTTPRateProvider().fetch() is None


def test_external_provider_decodes_payload(monkeypatch):
    payload = {"base": "USD", "rates": {k: v for k, v in FULL_RATES.items()}}
    monkeypatch.setattr(
        "expense_tracker.services.rates.providers.get_json", lambda url, **kwargs: payload
    )
    table = ExternalHTTPRateProvider().fetch()
    assert table is not None
    assert table.rates["JPY"] == 150.0
    assert table.fetched_at is not None


def test_get_json_retries_then_raises(monkeypatch):
    attempts = []

    def fail(request, timeout):
        attempts.append(request.full_url)
        raise TimeoutError("slow")

    monkeypatch.setattr(http_client.urllib.request, "urlopen", fail)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)
    with pytest.raises(HttpError):
        http_client.get_json("https://rates.example/latest/USD", retries=2)
    assert len(attempts) == 3


def test_get_json_does_not_retry_client_errors(monkeypatch):
    attempts = []

    def not_found(request, timeout):
        attempts.append(1)
        raise http_client.urllib.error.HTTPError(request.full_url, 404, "Not Found", None, None)

    monkeypatch.setattr(http_client.urllib.request, "urlopen", not_found)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)
    with pytest.raises(HttpError):
        http_client.get_json("https://rates.example/latest/XXX", retries=3)
    assert len(attempts) == 1


def test_dropped_connection_is_no_update(monkeypatch):
    def hang_up(request, timeout):
        raise http.client.RemoteDisconnected("Remote end closed connection without response")

    monkeypatch.setattr(http_client.urllib.request, "urlopen", hang_up)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)
    svc = RateCacheService(ExternalHTTPRateProvider(retries=1))
    assert svc.refresh() is False
    assert not svc.rates_ready()


class _TruncatedResponse:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        raise http.client.IncompleteRead(b'{"base": "US')


def test_truncated_body_is_retried_then_raises(monkeypatch):
    attempts = []

    def truncated(request, timeout):
        attempts.append(1)
        return _TruncatedResponse()

    monkeypatch.setattr(http_client.urllib.request, "urlopen", truncated)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)
    with pytest.raises(HttpError):
        http_client.get_json("https://rates.example/latest/USD", retries=1)
    assert len(attempts) == 2
