"""
Catalog Feature Module.
Wires the Catalog Service into its Controller and exports the Blueprint.
"""
from flask import Blueprint

from catalog_relay.features.catalog.controller.catalog_controller import CatalogController
from catalog_relay.features.catalog.service.catalog_service import CatalogService


def create_catalog_blueprint(catalog_service: CatalogService) -> Blueprint:
    catalog_controller = CatalogController(catalog_service)

    # Blueprint Creation
    catalog_bp = Blueprint('catalog', __name__)

    # Route Registration
    catalog_bp.add_url_rule(
        '/api/catalog/products',
        view_func=catalog_controller.get_products_by_tag,
        methods=['GET']
    )

    catalog_bp.add_url_rule(
        '/api/catalog/check-name',
        view_func=catalog_controller.check_name,
        methods=['POST']
    )

    catalog_bp.add_url_rule(
        '/api/catalog/skus',
        view_func=catalog_controller.get_sku_index,
        methods=['POST']
    )

    catalog_bp.add_url_rule(
        '/api/shopify/test',
        view_func=catalog_controller.test_shopify,
        methods=['POST']
    )

    return catalog_bp
