"""Utility modules for the backend application."""

from app.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    hash_for_correlation,
    mask_email,
    set_request_context,
)
from app.utils.parsers import parse_body, parse_int, parse_user_id
from app.utils.responses import error_response, json_response, success_response

__all__ = [
    "clear_request_context",
    "configure_logging",
    "error_response",
    "get_logger",
    "hash_for_correlation",
    "json_response",
    "mask_email",
    "parse_body",
    "parse_int",
    "parse_user_id",
    "set_request_context",
    "success_response",
]
