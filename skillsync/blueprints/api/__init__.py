from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from werkzeug.exceptions import HTTPException

from skillsync.errors import ApiError

logger = logging.getLogger(__name__)

# Create the blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.app_errorhandler(ApiError)
def handle_api_error(exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__}: {exc.message}")
    return jsonify(exc.to_envelope()), exc.status_code


@api_bp.app_errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    return jsonify({"success": False, "error": exc.description}), exc.code


@api_bp.app_errorhandler(Exception)
def handle_unexpected_error(exc: Exception):
    # Never leak internals; the traceback goes to the log only.
    logger.exception("Unhandled error in API request")
    return jsonify({"success": False, "error": "Internal server error"}), 500


# Health check endpoint
@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"success": True, "data": {"status": "ok"}})


# Import API routes to register them on blueprint after blueprint creation
from .resumes import *
