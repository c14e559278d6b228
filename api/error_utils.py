"""
JSON error bodies for the EcoPack API.
Every client-visible failure has the shape {"error_code", "message", "details"?}.
"""

import logging
from flask import jsonify
from typing import Any, Dict, Optional

# error_code -> default message
ERROR_CODES = {
    # Client errors
    "INVALID_REQUEST": "The request could not be understood",
    "BAD_REQUEST": "Request body failed validation",
    "MISSING_INPUT": "Please provide a description or image",
    "NOT_FOUND": "The requested resource was not found",
    "PROFILE_EXISTS": "A profile already exists for this user",
    "RATE_LIMITED": "Too many requests, please slow down",

    # Server errors
    "SERVER_ERROR": "Something went wrong on our side",
    "INTERNAL_SERVER_ERROR": "An unexpected error occurred on the server.",
    "PROFILE_STORE_ERROR": "Profile storage is unavailable",
}


def create_error_response(error_code: str, message: Optional[str] = None,
                          details: Optional[Dict[str, Any]] = None, status_code: int = 500) -> tuple:
    """
    Build a (response, status) pair for a Flask view.

    Unregistered codes are reported as SERVER_ERROR so clients only ever see
    codes listed in ERROR_CODES. `message` overrides the code's default text.
    """
    if error_code not in ERROR_CODES:
        logging.warning(f"Unregistered error code {error_code!r}, reporting SERVER_ERROR")
        error_code = "SERVER_ERROR"

    body = {"error_code": error_code, "message": message or ERROR_CODES[error_code]}
    if details:
        body["details"] = details

    log = logging.error if status_code >= 500 else logging.info
    log(f"{status_code} {error_code}: {body['message']}")
    return jsonify(body), status_code


def not_found_error(message: Optional[str] = None) -> tuple:
    return create_error_response("NOT_FOUND", message, status_code=404)


def bad_request_error(message: Optional[str] = None) -> tuple:
    return create_error_response("INVALID_REQUEST", message, status_code=400)


def missing_input_error() -> tuple:
    return create_error_response("MISSING_INPUT", status_code=400)


def conflict_error(message: Optional[str] = None) -> tuple:
    return create_error_response("PROFILE_EXISTS", message, status_code=409)


def store_unavailable_error(message: Optional[str] = None) -> tuple:
    return create_error_response("PROFILE_STORE_ERROR", message, status_code=503)
