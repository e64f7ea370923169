from unittest.mock import MagicMock

import pytest

from catalog_relay.features.catalog.service.catalog_service import CatalogService
from conftest import make_entry, make_variant


@pytest.fixture
def entries():
    return [
        make_entry(1, "Aurora Dress", [make_variant(11, "AUR-S", quantity=2), make_variant(12, "AUR-M")],
                   tags=["Summer 2024", "Dresses"], handle="aurora-dress"),
        make_entry(2, "Borealis Skirt", [make_variant(21, "BOR-1")], tags=["Winter 2024"]),
        make_entry(3, "Aurora Dress", [make_variant(31, None)], tags=["summer 2024 restock"]),
    ]


@pytest.fixture
def fetcher(entries):
    fetcher = MagicMock()
    fetcher.fetch_full_catalog.return_value = entries
    return fetcher


@pytest.fixture
def client():
    return MagicMock()


def test_names_for_tag_is_case_insensitive_sorted_and_unique(client, fetcher):
    service = CatalogService(client, fetcher)
    assert service.names_for_tag("SUMMER 2024") == ["Aurora Dress"]
    assert service.names_for_tag("2024") == ["Aurora Dress", "Borealis Skirt"]
    assert service.names_for_tag("autumn") == []


def test_names_for_tag_uses_default_page_cap(client, fetcher):
    CatalogService(client, fetcher, default_page_cap=5).names_for_tag("summer")
    fetcher.fetch_full_catalog.assert_called_once_with(5)


def test_names_for_tag_requires_a_tag(client, fetcher):
    with pytest.raises(ValueError):
        CatalogService(client, fetcher).names_for_tag("  ")


def test_title_exists_confirms_remote_result(client, fetcher):
    client.find_by_title.return_value = [make_entry(9, "Aurora Dress Long"), make_entry(1, "aurora  dress")]
    service = CatalogService(client, fetcher)

    assert service.title_exists(" Aurora Dress ") is True
    client.find_by_title.assert_called_once_with("Aurora Dress", limit=5)

    client.find_by_title.return_value = [make_entry(9, "Aurora Dress Long")]
    assert service.title_exists("Aurora Dress") is False


def test_variants_by_sku_indexes_every_sku(client, fetcher):
    index = CatalogService(client, fetcher).variants_by_sku()
    assert sorted(index) == ["AUR-M", "AUR-S", "BOR-1"]
    assert index["AUR-S"]["title"] == "Aurora Dress"
    assert index["AUR-S"]["variant"]["inventory_quantity"] == 2


def test_variants_by_sku_can_be_restricted(client, fetcher):
    index = CatalogService(client, fetcher).variants_by_sku(["BOR-1", "NOPE"])
    assert list(index) == ["BOR-1"]


def test_test_connection_delegates_to_client(client, fetcher):
    client.test_connection.return_value = {"name": "Demo"}
    assert CatalogService(client, fetcher).test_connection() == {"name": "Demo"}
