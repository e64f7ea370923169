"""
Flask application for the catalog relay.
Builds the Shopify client, catalog fetcher and matcher from the environment
and registers the feature blueprints.
"""
import os
import time
import uuid
from typing import Optional, Tuple

from dotenv import load_dotenv
from flask import Flask, g, request

# Load environment variables from .env file
load_dotenv()

# Initialize logging service FIRST (before other imports)
from catalog_relay.services.system.logger_service import get_logger
logger = get_logger(__name__)

from catalog_relay.config.env_config import RelaySettings, load_settings
from catalog_relay.features.catalog.index import create_catalog_blueprint
from catalog_relay.features.catalog.service.catalog_fetcher import CatalogFetcher
from catalog_relay.features.catalog.service.catalog_service import CatalogService
from catalog_relay.features.matching.index import create_matching_blueprint
from catalog_relay.features.matching.service.availability_service import AvailabilityService
from catalog_relay.features.matching.service.matcher import AvailabilityMatcher, ScoringPolicy
from catalog_relay.services.shopify.shopify_client import ShopifyCatalogClient, ShopifyInventoryLookup
from catalog_relay.services.system.cache_service import TTLCache


def _resolve_service(path: str) -> str:
    parts = [segment for segment in (path or '').split('/') if segment]
    if not parts:
        return 'root'
    if parts[0] == 'api':
        return parts[1] if len(parts) > 1 else 'api'
    return parts[0]


def build_services(settings: RelaySettings) -> Tuple[CatalogService, AvailabilityService]:
    """One client, cache and fetcher shared by both features."""
    client = ShopifyCatalogClient(settings)
    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)
    fetcher = CatalogFetcher.from_settings(client, settings, cache=cache)
    matcher = AvailabilityMatcher(
        policy=ScoringPolicy.default(settings.brand_prefix),
        min_score=settings.min_score,
    )

    catalog_service = CatalogService(client, fetcher, default_page_cap=settings.page_cap)
    availability_service = AvailabilityService(
        fetcher,
        matcher,
        inventory_factory=lambda entries: ShopifyInventoryLookup.for_entries(client, entries),
        default_page_cap=settings.page_cap,
    )
    return catalog_service, availability_service


def create_app(settings: Optional[RelaySettings] = None,
               catalog_service: Optional[CatalogService] = None,
               availability_service: Optional[AvailabilityService] = None) -> Flask:
    if catalog_service is None or availability_service is None:
        built_catalog, built_availability = build_services(settings or load_settings())
        catalog_service = catalog_service or built_catalog
        availability_service = availability_service or built_availability

    app = Flask(__name__)

    @app.before_request
    def _start_request_timer():
        g.request_started = time.monotonic()
        g.request_id = request.headers.get('X-Request-Id') or uuid.uuid4().hex

    @app.after_request
    def _log_request(response):
        started = getattr(g, 'request_started', None)
        elapsed = round((time.monotonic() - started) * 1000, 2) if started is not None else None
        response.headers['X-Request-Id'] = g.get('request_id', '')

        logger.info(f"{request.method} {request.path} -> {response.status_code}", extra={
            'request_id': g.get('request_id'),
            'request_service': _resolve_service(request.path),
            'request_status': response.status_code,
            'request_duration_ms': elapsed,
            'remote_addr': request.headers.get('X-Forwarded-For', request.remote_addr),
        })
        return response

    # Register all blueprints
    app.register_blueprint(create_catalog_blueprint(catalog_service))
    app.register_blueprint(create_matching_blueprint(availability_service))
    return app


if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', os.getenv('HOST', '0.0.0.0'))
    port = int(os.getenv('FLASK_RUN_PORT', os.getenv('PORT', '5000')))

    logger.info("Starting catalog relay", extra={'host': host, 'port': port})

    create_app().run(debug=False, host=host, port=port, threaded=True)
