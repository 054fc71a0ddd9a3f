"""Shared parsing utilities for request handling."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any
from typing import Mapping
from typing import Optional

from app.exceptions import ValidationError


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer from a string.

    Args:
        value: The string value to parse, or None.

    Returns:
        The parsed integer, or None if input is None or empty.

    Raises:
        ValueError: If the string cannot be converted to an integer.
    """
    if value is None or value == "":
        return None
    return int(value)


def parse_user_id(event: Mapping[str, Any]) -> Optional[int]:
    """Read the ``{id}`` path parameter as an integer.

    Returns:
        The id, or None when the route carries no id.

    Raises:
        ValidationError: If the id is present but not an integer.
    """
    path_params = event.get("pathParameters") or {}
    raw = path_params.get("id")
    try:
        return parse_int(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid user ID", field="id") from exc


def parse_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the JSON request body into a dict."""
    raw = event.get("body") or ""
    if event.get("isBase64Encoded") and raw:
        try:
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValidationError("Request body is not valid base64-encoded UTF-8") from exc
    if not raw:
        raise ValidationError("Request body is required")
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def first_query_param(event: Mapping[str, Any], name: str) -> Optional[str]:
    """Return a single query string parameter or None."""
    params = event.get("queryStringParameters") or {}
    value = params.get(name)
    return str(value) if value is not None else None
