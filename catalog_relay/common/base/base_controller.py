"""
Base Controller Class.
Provides standardized response handling for all controllers.
"""
from typing import Any, Tuple
from flask import jsonify, Response
from pydantic import ValidationError

from catalog_relay.features.catalog.domain.catalog_errors import AuthenticationFailed, PartialCatalog, RemoteUnavailable
from catalog_relay.services.system.logger_service import get_logger, log_error

logger = get_logger(__name__)

class BaseController:
    """
    Base class for all controllers.
    Enforces the { success, ... } response envelope.
    """

    def handle_response(self, data: Any, status: int = 200) -> Tuple[Response, int]:
        """
        Standardized success response.
        :param data: The payload to return.
        :param status: HTTP status code (default 200).
        :return: Flask JSON response.
        """
        # Payloads that already carry `success` are returned unchanged.
        if isinstance(data, dict) and 'success' in data:
            return jsonify(data), status

        return jsonify({'success': True, 'data': data}), status

    def handle_error(self, message: str, status: int = 500, **extra: Any) -> Tuple[Response, int]:
        """
        Standardized error response.
        """
        logger.error(f"Controller error ({status}): {message}")
        return jsonify({'success': False, 'error': message, **extra}), status

    def handle_catalog_error(self, exc: Exception) -> Tuple[Response, int]:
        """
        Map catalog / remote failures onto HTTP statuses.
        Anything unexpected is logged with its traceback and returned as 500.
        """
        if isinstance(exc, AuthenticationFailed):
            return self.handle_error(str(exc), 401)
        if isinstance(exc, PartialCatalog):
            return self.handle_error(str(exc), 502, partial=True, pagesFetched=exc.pages_fetched)
        if isinstance(exc, RemoteUnavailable):
            return self.handle_error(str(exc), 502, remoteStatus=exc.status_code)
        log_error(logger, exc, {"controller": type(self).__name__})
        return self.handle_error("Internal server error", 500)

    def validation_error(self, exc: ValidationError) -> Tuple[Response, int]:
        details = [
            {'field': '.'.join(str(p) for p in err.get('loc', ())), 'message': err.get('msg')}
            for err in exc.errors()
        ]
        return self.handle_error("Invalid request", 400, details=details)
