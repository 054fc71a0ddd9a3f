"""Portal configuration.

The API base URL comes from the environment; the OIDC settings are fixed
for this deployment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import field
from typing import Mapping
from typing import Optional

DEFAULT_API_BASE_URL = "http://localhost:3000"

OIDC_AUTHORITY = (
    "https://cognito-idp.ap-southeast-1.amazonaws.com/ap-southeast-1_TuutdRTLd"
)
OIDC_CLIENT_ID = "56msdcts0r2uahkt6c30lulbeh"
OIDC_REDIRECT_URI = "http://localhost:5173"
OIDC_RESPONSE_TYPE = "code"
OIDC_SCOPE = "email openid phone"
COGNITO_DOMAIN = "https://ap-southeast-1tuutdrtld.auth.ap-southeast-1.amazoncognito.com"


@dataclass(frozen=True)
class OidcSettings:
    authority: str = OIDC_AUTHORITY
    client_id: str = OIDC_CLIENT_ID
    redirect_uri: str = OIDC_REDIRECT_URI
    response_type: str = OIDC_RESPONSE_TYPE
    scope: str = OIDC_SCOPE
    hosted_domain: str = COGNITO_DOMAIN


@dataclass(frozen=True)
class PortalSettings:
    """Settings for the API client and sign-in flow."""

    api_base_url: str = DEFAULT_API_BASE_URL
    oidc: OidcSettings = field(default_factory=OidcSettings)
    timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PortalSettings":
        env = os.environ if environ is None else environ
        base_url = env.get("API_ENDPOINT") or DEFAULT_API_BASE_URL
        return cls(api_base_url=base_url.rstrip("/"))
