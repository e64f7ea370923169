from unittest.mock import MagicMock

import pytest

from catalog_relay.features.catalog.domain.catalog_errors import AuthenticationFailed, RemoteUnavailable
from catalog_relay.features.matching.service.availability_service import AvailabilityService
from catalog_relay.features.matching.service.matcher import QueryRecord
from conftest import make_entry, make_variant


@pytest.fixture
def entries():
    return [
        make_entry(1, "LOFT.73 - Aurora Dress", [
            make_variant(11, "AUR-001", quantity=5),
            make_variant(12, "AUR-002", quantity=1),
        ]),
        make_entry(2, "Borealis Skirt", [make_variant(21, "BOR-001", quantity=3)]),
    ]


@pytest.fixture
def fetcher(entries):
    fetcher = MagicMock()
    fetcher.fetch_full_catalog.return_value = entries
    return fetcher


def test_match_availability_accepts_dict_rows(fetcher):
    service = AvailabilityService(fetcher)
    results = service.match_availability([
        {"name": "Aurora Dress", "sku": "AUR001"},
        {"name": "", "sku": None},
    ])

    assert results[0].matched.id == 1
    assert results[0].total_available == 6
    assert results[1].matched is None


def test_page_cap_falls_back_to_default(fetcher):
    service = AvailabilityService(fetcher, default_page_cap=7)
    service.match_availability([QueryRecord(name="Borealis Skirt")])
    fetcher.fetch_full_catalog.assert_called_once_with(7)

    fetcher.fetch_full_catalog.reset_mock()
    service.match_availability([QueryRecord(name="Borealis Skirt")], page_cap=2)
    fetcher.fetch_full_catalog.assert_called_once_with(2)


def test_live_inventory_refreshes_totals(fetcher, entries):
    lookup = MagicMock()
    lookup.fetch_availability.return_value = {11: 0, 12: 4}
    factory = MagicMock(return_value=lookup)

    service = AvailabilityService(fetcher, inventory_factory=factory)
    results = service.match_availability([QueryRecord(name="Aurora Dress"), QueryRecord(name="unknown thing")])

    factory.assert_called_once_with(entries)
    assert lookup.fetch_availability.call_args.args[0] == {11, 12}
    assert results[0].total_available == 4
    assert results[1].matched is None


def test_inventory_lookup_skipped_without_matches(fetcher):
    factory = MagicMock()
    AvailabilityService(fetcher, inventory_factory=factory).match_availability([QueryRecord(name="zzz")])
    factory.assert_not_called()


def test_inventory_failure_keeps_catalog_quantities(fetcher):
    lookup = MagicMock()
    lookup.fetch_availability.side_effect = RemoteUnavailable("boom", status_code=500)
    service = AvailabilityService(fetcher, inventory_factory=MagicMock(return_value=lookup))

    results = service.match_availability([QueryRecord(name="Aurora Dress")])
    assert results[0].total_available == 6


def test_inventory_auth_failure_propagates(fetcher):
    lookup = MagicMock()
    lookup.fetch_availability.side_effect = AuthenticationFailed(status_code=401)
    service = AvailabilityService(fetcher, inventory_factory=MagicMock(return_value=lookup))

    with pytest.raises(AuthenticationFailed):
        service.match_availability([QueryRecord(name="Aurora Dress")])


def test_fetch_errors_propagate(fetcher):
    fetcher.fetch_full_catalog.side_effect = RemoteUnavailable("down", status_code=503)
    with pytest.raises(RemoteUnavailable):
        AvailabilityService(fetcher).match_availability([QueryRecord(name="Aurora Dress")])
