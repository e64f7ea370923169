"""
Matching Feature Module.
Exports the availability-matching Blueprint.
"""
from flask import Blueprint

from catalog_relay.features.matching.controller.availability_controller import AvailabilityController
from catalog_relay.features.matching.service.availability_service import AvailabilityService


def create_matching_blueprint(availability_service: AvailabilityService) -> Blueprint:
    availability_controller = AvailabilityController(availability_service)

    matching_bp = Blueprint('matching', __name__)

    matching_bp.add_url_rule(
        '/api/availability/match',
        view_func=availability_controller.match,
        methods=['POST']
    )

    return matching_bp
