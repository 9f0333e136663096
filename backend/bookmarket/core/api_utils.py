"""
Common API utilities for consistent response formatting across all controllers.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from bookmarket.core.exceptions import MarketplaceError, ValidationFailure

logger = logging.getLogger(__name__)


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def error_response(error: MarketplaceError) -> tuple:
    """Render a typed marketplace failure."""
    payload = {"success": False, **error.to_dict()}
    return jsonify(payload), error.status_code


def get_json_body(required: bool = True) -> Dict[str, Any]:
    """Return the request JSON object, or raise ValidationFailure."""
    data = request.get_json(silent=True)
    if data is None:
        if required:
            raise ValidationFailure("Request body must be a JSON object")
        return {}
    if not isinstance(data, dict):
        raise ValidationFailure("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    """Map marketplace errors and stray HTTP errors onto the JSON envelope."""

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(error: MarketplaceError):
        if error.status_code >= 500:
            logger.error(
                "Internal marketplace error",
                extra={"context": {"path": request.path, "error": error.message}},
                exc_info=error,
            )
            return api_response(False, "Internal server error", None, 500)
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return api_response(False, error.description or error.name, None, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.error(
            "Unhandled exception",
            extra={"context": {"path": request.path, "error": str(error)}},
            exc_info=error,
        )
        return api_response(False, "Internal server error", None, 500)
