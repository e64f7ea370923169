from catalog_relay.features.catalog.mapper.catalog_mapper import (
    from_shopify_products,
    to_entry_dict,
    to_sku_index_row,
)
from catalog_relay.schemas.catalog_schemas import (
    MatchAvailabilityRequest,
    QueryItemRequest,
    ShopifyProductPayload,
)


def test_product_payload_defaults():
    payload = ShopifyProductPayload.model_validate({
        "id": 1,
        "title": None,
        "tags": "Summer 2024,  Sale ,",
        "variants": [{"id": 11, "sku": "  ", "inventory_quantity": None, "price": 9.5}],
        "images": [{"src": "https://cdn.example/a.jpg"}],
    })
    assert payload.title == ""
    assert payload.tags == ["Summer 2024", "Sale"]
    assert payload.variants[0].sku is None
    assert payload.variants[0].inventory_quantity == 0
    assert payload.variants[0].price == "9.5"
    assert payload.image_url == "https://cdn.example/a.jpg"


def test_featured_image_wins_over_gallery():
    payload = ShopifyProductPayload.model_validate({
        "id": 1,
        "image": {"src": "featured.jpg"},
        "images": [{"src": "gallery.jpg"}],
    })
    assert payload.image_url == "featured.jpg"


def test_malformed_products_are_skipped():
    entries = from_shopify_products([
        {"id": 1, "title": "Aurora Dress", "variants": [{"id": 11}]},
        {"title": "no id"},
        {"id": "not-a-number", "title": "bad id"},
    ])
    assert [e.id for e in entries] == [1]
    assert entries[0].variants[0].inventory_quantity == 0


def test_missing_inventory_becomes_zero():
    entries = from_shopify_products([{"id": 1, "variants": [{"id": 11, "sku": "A"}]}])
    assert entries[0].variants[0].available == 0


def test_entry_dict_and_sku_row_shapes():
    entry = from_shopify_products([{
        "id": 1,
        "title": "Aurora Dress",
        "handle": "aurora-dress",
        "tags": "b, a",
        "variants": [{"id": 11, "sku": "AUR-001", "inventory_quantity": 4, "inventory_policy": "deny"}],
    }])[0]

    data = to_entry_dict(entry)
    assert data["tags"] == ["a", "b"]
    assert data["variants"][0]["available"] == 4

    row = to_sku_index_row(entry, entry.variants[0])
    assert row["handle"] == "aurora-dress"
    assert row["variant"] == {
        "id": 11,
        "sku": "AUR-001",
        "price": None,
        "inventory_quantity": 4,
        "inventory_policy": "deny",
    }


def test_query_item_blank_fields_become_none():
    item = QueryItemRequest.model_validate({"name": "  ", "sku": 12345})
    assert item.name is None
    assert item.sku == "12345"


def test_match_request_accepts_camel_case_page_cap():
    request = MatchAvailabilityRequest.model_validate({"items": [{"name": "Aurora"}], "pageCap": 4})
    assert request.page_cap == 4
    assert request.items[0].name == "Aurora"
