"""Lambda entrypoint for the users CRUD API."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from app.api.users import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the users handler."""
    return _handler(event, context)
