"""Python client side of the users portal: API client, auth session and
the users screen controller."""

from portal.api_client import ApiClient, ApiResponse
from portal.auth import AuthSession, logout_url
from portal.config import OidcSettings, PortalSettings
from portal.controller import UserListController, ViewState

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthSession",
    "OidcSettings",
    "PortalSettings",
    "UserListController",
    "ViewState",
    "logout_url",
]
