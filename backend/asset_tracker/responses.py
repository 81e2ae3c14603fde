# Overview: JSON error responses shared by the API blueprints.

import sys

from flask import current_app, jsonify, request

from .extensions import db
from .errors import AssetTrackerError, ValidationError


def json_body() -> dict:
    """Request JSON as a dict; a missing or non-object body is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


def domain_error(exc: AssetTrackerError):
    """Expected failure: roll back and answer with the error's own status."""
    db.session.rollback()
    return jsonify({"error": exc.message}), exc.status_code


def internal_error(log_message: str):
    """
    Unexpected failure: roll back, log the traceback, answer 500.

    Must be called from inside an `except` block.
    """
    db.session.rollback()
    current_app.logger.exception(log_message)
    body = {"error": "Internal server error"}
    if current_app.config.get("EXPOSE_ERROR_DETAILS"):
        body["detail"] = str(sys.exc_info()[1])
    return jsonify(body), 500
