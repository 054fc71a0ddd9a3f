"""Identity session held by the portal.

Tokens are issued and validated by the identity provider; the portal only
reads the profile claims of the id token for display and forwards the id
token as a bearer credential.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Optional
from urllib.parse import urlencode

import jwt

from portal.config import OidcSettings


@dataclass(frozen=True)
class AuthSession:
    """Tokens and profile of a signed-in user."""

    id_token: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tokens(
        cls,
        id_token: str,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> "AuthSession":
        """Build a session, reading profile claims from the id token.

        The signature is not verified here; the API gateway authorizer
        does that on every request.

        Raises:
            jwt.DecodeError: If the id token is not a well-formed JWT.
        """
        claims = jwt.decode(
            id_token,
            options={"verify_signature": False, "verify_exp": False},
        )
        return cls(
            id_token=id_token,
            access_token=access_token,
            refresh_token=refresh_token,
            profile=claims,
        )

    @property
    def email(self) -> Optional[str]:
        return self.profile.get("email")

    @property
    def subject(self) -> Optional[str]:
        return self.profile.get("sub")


def logout_url(oidc: OidcSettings) -> str:
    """URL of the hosted-UI logout endpoint that returns to the portal."""
    query = urlencode({"client_id": oidc.client_id, "logout_uri": oidc.redirect_uri})
    return f"{oidc.hosted_domain}/logout?{query}"
