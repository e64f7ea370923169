"""
Availability Controller.
Matches uploaded rows (name / SKU) against the Shopify catalog.
"""
from flask import request
from pydantic import ValidationError

from catalog_relay.common.base.base_controller import BaseController
from catalog_relay.features.catalog.domain.catalog_errors import CatalogError
from catalog_relay.features.matching.mapper.match_mapper import to_match_result_dict
from catalog_relay.features.matching.service.availability_service import AvailabilityService
from catalog_relay.schemas.catalog_schemas import MatchAvailabilityRequest
from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

class AvailabilityController(BaseController):
    def __init__(self, availability_service: AvailabilityService):
        self.availability_service = availability_service

    def match(self):
        """Match a batch of query rows and return one result per row"""
        try:
            payload = MatchAvailabilityRequest.model_validate(request.get_json(silent=True) or {})
        except ValidationError as e:
            return self.validation_error(e)

        try:
            results = self.availability_service.match_availability(payload.items, page_cap=payload.page_cap)
        except CatalogError as e:
            return self.handle_catalog_error(e)

        rows = [to_match_result_dict(r) for r in results]
        return self.handle_response({
            'success': True,
            'results': rows,
            'count': len(rows),
            'matched': sum(1 for r in results if r.is_match),
        })
