"""Shared response utilities for Lambda handlers."""

from __future__ import annotations

import json
import os
from typing import Any
from typing import Mapping
from typing import Optional

from pydantic import BaseModel


def get_security_headers() -> dict[str, str]:
    """Get security headers for all responses.

    SECURITY: These headers protect against common web vulnerabilities:
    - X-Content-Type-Options: Prevents MIME type sniffing
    - X-Frame-Options: Prevents clickjacking
    - Cache-Control: Prevents caching of user records

    Returns:
        Dictionary of security headers.
    """
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Cache-Control": "no-store, no-cache, must-revalidate",
        "Pragma": "no-cache",
    }


# Vite dev server and the local API
_DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]


def get_cors_headers(
    event: Optional[Mapping[str, Any]] = None,
) -> dict[str, str]:
    """Get CORS headers for the response.

    Args:
        event: The Lambda event containing the request origin header.

    Returns:
        Dictionary of CORS headers to include in the response.
    """
    allowed_origins_env = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if allowed_origins_env:
        allowed_origins = [
            origin.strip()
            for origin in allowed_origins_env.split(",")
            if origin.strip()
        ]
    else:
        allowed_origins = _DEFAULT_CORS_ORIGINS

    request_origin = None
    if event:
        headers = event.get("headers") or {}
        request_origin = headers.get("origin") or headers.get("Origin")

    if request_origin and request_origin in allowed_origins:
        allow_origin = request_origin
    elif allowed_origins:
        allow_origin = allowed_origins[0]
    else:
        allow_origin = "*"

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": "Content-Type,Authorization",
        "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    }


def json_response(
    status_code: int,
    body: Any,
    event: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Create a JSON API Gateway response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict or Pydantic model).
        event: Optional Lambda event for CORS origin detection.

    Returns:
        API Gateway response dictionary.
    """
    response_headers = {"Content-Type": "application/json"}
    response_headers.update(get_security_headers())
    response_headers.update(get_cors_headers(event))

    if isinstance(body, BaseModel):
        payload = body.model_dump(mode="json")
    else:
        payload = body

    return {
        "statusCode": status_code,
        "headers": response_headers,
        "body": json.dumps(payload, default=str),
    }


def success_response(
    status_code: int,
    data: Any,
    event: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Wrap ``data`` in a success envelope."""
    return json_response(status_code, {"success": True, "data": data}, event=event)


def error_response(
    status_code: int,
    message: str,
    event: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Wrap ``message`` in a failure envelope."""
    return json_response(
        status_code, {"success": False, "error": message}, event=event
    )
