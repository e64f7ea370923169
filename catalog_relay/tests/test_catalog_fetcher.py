from unittest.mock import MagicMock

import pytest

from catalog_relay.features.catalog.domain.catalog_entity import CatalogPage
from catalog_relay.features.catalog.domain.catalog_errors import (
    AuthenticationFailed,
    PartialCatalog,
    RemoteUnavailable,
)
from catalog_relay.features.catalog.service.catalog_fetcher import CatalogFetcher
from catalog_relay.config.env_config import RelaySettings
from catalog_relay.services.system.cache_service import TTLCache
from conftest import FakeCatalogClient, build_catalog, make_entry


def _fetcher(client, **kwargs):
    kwargs.setdefault('sleep', MagicMock())
    return CatalogFetcher(client, **kwargs)


@pytest.mark.parametrize("pagination", ["cursor", "since_id"])
def test_catalog_of_exactly_one_page_needs_one_request(pagination):
    client = FakeCatalogClient(build_catalog(250))
    entries = _fetcher(client, pagination=pagination).fetch_full_catalog()
    assert len(entries) == 250
    assert len(client.calls) == 1


def test_cursor_pagination_follows_next_cursor():
    client = FakeCatalogClient(build_catalog(600))
    entries = _fetcher(client, pagination="cursor").fetch_full_catalog()

    assert [e.id for e in entries] == list(range(1, 601))
    assert [c['cursor'] for c in client.calls] == [None, '250', '500']
    assert all(c['since_id'] is None for c in client.calls)


def test_since_id_pagination_reads_count_first():
    client = FakeCatalogClient(build_catalog(600))
    result = _fetcher(client, pagination="since_id").fetch_catalog_report()

    assert client.count_calls == 1
    assert [c['since_id'] for c in client.calls] == [None, 250, 500]
    assert result.report.total_count == 600
    assert result.report.complete
    assert result.report.entry_count == 600


def test_empty_catalog_stops_after_first_page():
    client = FakeCatalogClient([])
    assert _fetcher(client).fetch_full_catalog() == []
    assert len(client.calls) == 1


def test_page_cap_bounds_requests_when_returning_partial():
    client = FakeCatalogClient(build_catalog(1000))
    result = _fetcher(client, page_size=10, partial_policy="return").fetch_catalog_report(page_cap=3)

    assert len(client.calls) == 3
    assert len(result.entries) == 30
    assert result.report.complete is False
    assert "page cap" in result.report.reason


def test_page_cap_raises_partial_catalog_by_default():
    client = FakeCatalogClient(build_catalog(1000))
    with pytest.raises(PartialCatalog) as exc_info:
        _fetcher(client, page_size=10).fetch_full_catalog(page_cap=2)

    assert len(client.calls) == 2
    assert exc_info.value.pages_fetched == 2
    assert len(exc_info.value.entries) == 20


def test_page_cap_equal_to_catalog_pages_is_complete():
    client = FakeCatalogClient(build_catalog(30))
    entries = _fetcher(client, page_size=10).fetch_full_catalog(page_cap=3)
    assert len(entries) == 30


def test_invalid_page_cap_is_rejected():
    with pytest.raises(ValueError):
        _fetcher(FakeCatalogClient([])).fetch_full_catalog(page_cap=0)


def test_throttle_sleeps_every_n_pages():
    sleep = MagicMock()
    client = FakeCatalogClient(build_catalog(25))
    _fetcher(client, page_size=1, throttle_every=10, throttle_seconds=1.0, sleep=sleep).fetch_full_catalog()

    assert len(client.calls) == 25
    assert sleep.call_count == 2
    sleep.assert_called_with(1.0)


def test_throttle_can_be_disabled():
    sleep = MagicMock()
    client = FakeCatalogClient(build_catalog(25))
    _fetcher(client, page_size=1, throttle_every=0, sleep=sleep).fetch_full_catalog()
    sleep.assert_not_called()


def test_mid_sequence_failure_raises_partial_catalog_by_default(remote_error):
    client = FakeCatalogClient(build_catalog(30), failures={2: remote_error})
    with pytest.raises(PartialCatalog) as exc_info:
        _fetcher(client, page_size=10).fetch_full_catalog()

    assert [e.id for e in exc_info.value.entries] == list(range(1, 11))
    assert exc_info.value.pages_fetched == 2
    assert "page 2" in exc_info.value.reason
    assert exc_info.value.__cause__ is remote_error


def test_mid_sequence_failure_returns_partial_when_configured(remote_error):
    client = FakeCatalogClient(build_catalog(30), failures={2: remote_error})
    result = _fetcher(client, page_size=10, partial_policy="return").fetch_catalog_report()

    assert [e.id for e in result.entries] == list(range(1, 11))
    assert result.report.complete is False
    assert "page 2" in result.report.reason


def test_first_page_failure_always_raises(remote_error):
    client = FakeCatalogClient(build_catalog(30), failures={1: remote_error})
    with pytest.raises(RemoteUnavailable):
        _fetcher(client, page_size=10, partial_policy="return").fetch_full_catalog()


def test_authentication_failure_is_never_swallowed():
    client = FakeCatalogClient(build_catalog(30), failures={2: AuthenticationFailed(status_code=401)})
    with pytest.raises(AuthenticationFailed):
        _fetcher(client, page_size=10, partial_policy="return").fetch_full_catalog()


def test_repeated_cursor_is_treated_as_incomplete():
    client = MagicMock()
    client.fetch_page.return_value = CatalogPage(entries=(make_entry(1),), next_cursor="abc")
    result = _fetcher(client, page_size=1, partial_policy="return").fetch_catalog_report()

    assert client.fetch_page.call_count == 2
    assert result.report.complete is False
    assert "cursor" in result.report.reason


def test_complete_catalog_is_served_from_cache():
    cache = TTLCache(ttl_seconds=60)
    client = FakeCatalogClient(build_catalog(5))
    fetcher = _fetcher(client, cache=cache)

    fetcher.fetch_full_catalog()
    result = fetcher.fetch_catalog_report()

    assert len(client.calls) == 1
    assert result.report.from_cache is True
    assert len(result.entries) == 5


def test_partial_catalog_is_not_cached():
    cache = TTLCache(ttl_seconds=60)
    client = FakeCatalogClient(build_catalog(30))
    fetcher = _fetcher(client, page_size=10, partial_policy="return", cache=cache)

    fetcher.fetch_full_catalog(page_cap=1)
    fetcher.fetch_full_catalog(page_cap=1)

    assert len(client.calls) == 2
    assert len(cache) == 0


def test_constructor_validates_settings():
    client = FakeCatalogClient([])
    with pytest.raises(ValueError):
        CatalogFetcher(client, pagination="offset")
    with pytest.raises(ValueError):
        CatalogFetcher(client, partial_policy="ignore")
    with pytest.raises(ValueError):
        CatalogFetcher(client, page_size=251)


def test_from_settings_copies_tuning():
    settings = RelaySettings(store_url="demo.myshopify.com", access_token="x",
                             pagination="since_id", page_size=100, partial_policy="return")
    fetcher = CatalogFetcher.from_settings(FakeCatalogClient([]), settings)
    assert fetcher.pagination == "since_id"
    assert fetcher.page_size == 100
    assert fetcher.partial_policy == "return"
    assert fetcher.cache_key == ("catalog", "demo.myshopify.com", "since_id", 100)
