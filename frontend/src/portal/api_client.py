"""Thin HTTP client for the users API.

Every call returns an ``ApiResponse`` envelope and never raises for
transport problems: a failed request becomes
``ApiResponse(success=False, error=...)``. Bodies received with an HTTP
error status are returned as parsed, trusting the server to have set
``success`` and ``error``.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any
from typing import Mapping
from typing import Optional

from portal.config import PortalSettings

logger = logging.getLogger(__name__)

USERS_ENDPOINT = "/users"


@dataclass
class ApiResponse:
    """``{success, data?, error?}`` envelope returned by the API."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ApiResponse":
        if not isinstance(payload, Mapping):
            return cls(success=False, error="Unexpected response from server")
        return cls(
            success=bool(payload.get("success")),
            data=payload.get("data"),
            error=payload.get("error"),
        )

    @classmethod
    def failure(cls, message: str) -> "ApiResponse":
        return cls(success=False, error=message)


class ApiClient:
    """Call the users API with an optional bearer token."""

    def __init__(self, settings: Optional[PortalSettings] = None):
        self._settings = settings or PortalSettings.from_env()

    @property
    def base_url(self) -> str:
        return self._settings.api_base_url

    def request(
        self,
        endpoint: str,
        token: Optional[str] = None,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        """Send one request and return the parsed envelope.

        Args:
            endpoint: Path appended to the base URL, e.g. ``/users/1``.
            token: Identity token sent as ``Authorization: Bearer``.
            method: HTTP method.
            body: JSON-serializable request body.
            headers: Extra request headers.
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            headers=request_headers,
            method=method,
        )

        try:
            try:
                with urllib.request.urlopen(req, timeout=self._settings.timeout) as resp:
                    raw = resp.read()
            except urllib.error.HTTPError as exc:
                # The API still sends an envelope with error statuses.
                logger.debug(f"{method} {endpoint} returned HTTP {exc.code}")
                raw = exc.read()
            payload = json.loads(raw.decode("utf-8"))
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.warning(f"{method} {endpoint} failed: {type(exc).__name__}: {exc}")
            return ApiResponse.failure(str(exc) or "Network error occurred")

        return ApiResponse.from_payload(payload)

    def get_all(self, endpoint: str, token: Optional[str] = None) -> ApiResponse:
        return self.request(endpoint, token, method="GET")

    def get_user(
        self, endpoint: str, user_id: int | str, token: Optional[str] = None
    ) -> ApiResponse:
        return self.request(f"{endpoint}/{user_id}", token, method="GET")

    def post(
        self, endpoint: str, body: Any, token: Optional[str] = None
    ) -> ApiResponse:
        return self.request(endpoint, token, method="POST", body=body)

    def put(
        self, endpoint: str, body: Any, token: Optional[str] = None
    ) -> ApiResponse:
        return self.request(endpoint, token, method="PUT", body=body)

    def delete_user(
        self, endpoint: str, user_id: int | str, token: Optional[str] = None
    ) -> ApiResponse:
        return self.request(f"{endpoint}/{user_id}", token, method="DELETE")
