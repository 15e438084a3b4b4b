"""Error taxonomy shared by the services and the JSON error handlers."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db

logger = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, details=None, status_code=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(APIError):
    """Malformed input. ``details`` is a list of ``{field, message}``."""

    status_code = 400
    message = "Validation failed"

    @classmethod
    def for_field(cls, field, message):
        return cls(message, details=[{"field": field, "message": message}])


class AuthError(APIError):
    status_code = 401
    message = "Access token required"


class NotFoundError(APIError):
    status_code = 404
    message = "Not found"


class ConflictError(APIError):
    status_code = 409
    message = "Conflict"


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(err):
        if err.status_code >= 500:
            logger.error("API error: %s", err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        messages = {
            404: "Route not found",
            405: "Method not allowed",
            413: "File too large. Maximum size is 10MB.",
        }
        return jsonify({"error": messages.get(err.code, err.description)}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500
