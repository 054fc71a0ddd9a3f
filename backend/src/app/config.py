"""Process-wide configuration for the users service.

Settings are read from the environment once per Lambda container and
passed explicitly into the components that need them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping
from typing import Optional

from app.exceptions import ConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_CONNECT_TIMEOUT = 5


@dataclass(frozen=True)
class Settings:
    """Database and AWS settings for the users service."""

    db_host: Optional[str] = None
    db_name: Optional[str] = None
    secret_name: Optional[str] = None
    region: str = DEFAULT_REGION
    database_url: Optional[str] = None
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A populated Settings instance.
        """
        env = os.environ if environ is None else environ
        return cls(
            db_host=env.get("RDS_HOST") or None,
            db_name=env.get("DB_NAME") or None,
            secret_name=env.get("SECRET_NAME") or None,
            region=env.get("REGION") or DEFAULT_REGION,
            database_url=env.get("DATABASE_URL") or None,
            connect_timeout=int(
                env.get("DB_CONNECT_TIMEOUT") or DEFAULT_CONNECT_TIMEOUT
            ),
        )

    def missing(self) -> list[str]:
        """Return the names of required variables that are not set."""
        if self.database_url:
            return []
        required = {
            "RDS_HOST": self.db_host,
            "DB_NAME": self.db_name,
            "SECRET_NAME": self.secret_name,
        }
        return [name for name, value in required.items() if not value]

    def validate(self) -> None:
        """Raise ConfigurationError if a required variable is missing."""
        missing = self.missing()
        if missing:
            raise ConfigurationError(", ".join(missing))
