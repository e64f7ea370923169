"""
Catalog Controller.
Read-only catalog endpoints: tag listings, title checks, SKU index and the
Shopify connection test.
"""
from flask import request
from pydantic import ValidationError

from catalog_relay.common.base.base_controller import BaseController
from catalog_relay.features.catalog.domain.catalog_errors import CatalogError
from catalog_relay.features.catalog.service.catalog_service import CatalogService
from catalog_relay.schemas.catalog_schemas import CheckNameRequest, SkuLookupRequest
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

class CatalogController(BaseController):
    def __init__(self, catalog_service: CatalogService):
        self.catalog_service = catalog_service

    def get_products_by_tag(self):
        tag = (request.args.get('tag') or request.args.get('season') or '').strip()
        if not tag:
            return self.handle_error("tag parameter is required", 400)

        try:
            names = self.catalog_service.names_for_tag(tag)
        except CatalogError as e:
            return self.handle_catalog_error(e)

        return self.handle_response({
            'success': True,
            'tag': tag,
            'products': names,
            'count': len(names),
        })

    def check_name(self):
        try:
            payload = CheckNameRequest.model_validate(request.get_json(silent=True) or {})
        except ValidationError as e:
            return self.validation_error(e)

        try:
            exists = self.catalog_service.title_exists(payload.name)
        except CatalogError as e:
            return self.handle_catalog_error(e)

        return self.handle_response({'success': True, 'name': payload.name, 'exists': exists})

    def get_sku_index(self):
        """SKU -> product/variant details; optionally restricted to `skus`"""
        try:
            payload = SkuLookupRequest.model_validate(request.get_json(silent=True) or {})
        except ValidationError as e:
            return self.validation_error(e)

        try:
            index = self.catalog_service.variants_by_sku(payload.skus or None)
        except CatalogError as e:
            return self.handle_catalog_error(e)

        missing = [s for s in (payload.skus or []) if s not in index]
        return self.handle_response({
            'success': True,
            'variants': index,
            'count': len(index),
            'missing': missing,
        })

    def test_shopify(self):
        try:
            shop = self.catalog_service.test_connection()
        except CatalogError as e:
            return self.handle_catalog_error(e)

        logger.info("Shopify connection test passed")
        return self.handle_response({
            'success': True,
            'message': 'Shopify connection successful',
            'shop': {
                'name': shop.get('name'),
                'domain': shop.get('myshopify_domain') or shop.get('domain'),
                'plan': shop.get('plan_name'),
                'currency': shop.get('currency'),
            },
        })
