import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .models import db

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised for a request that is well-formed HTTP but breaks a payload rule."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def error_response(message, status):
    return jsonify({"message": message}), status


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return error_response(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception("Unhandled error: %s", e)
        return error_response("Internal server error", 500)
