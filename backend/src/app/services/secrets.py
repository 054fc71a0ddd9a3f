"""Database credential resolution from AWS Secrets Manager.

The secret payload is expected to look like::

    {"username": "...", "password": "...", "port": 5432}

``port`` is optional and defaults to 5432. Host and database name come
from the process settings, not the secret.

SECURITY NOTES:
- Secret values are never logged
- Secrets are fetched at connection time and not cached in-process
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any
from typing import Optional

from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from app.config import Settings
from app.exceptions import ConfigurationError
from app.exceptions import DatabaseConnectionError
from app.services.aws_clients import get_secretsmanager_client
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DB_PORT = 5432


def get_secret_json(client: Any, secret_id: str) -> dict[str, Any]:
    """Fetch a secret from AWS Secrets Manager and parse JSON."""
    response = client.get_secret_value(SecretId=secret_id)
    secret_str = response.get("SecretString")
    if not secret_str and response.get("SecretBinary"):
        secret_str = base64.b64decode(response["SecretBinary"]).decode("utf-8")
    if not secret_str:
        raise RuntimeError("Secret value is empty")
    payload = json.loads(secret_str)
    if not isinstance(payload, dict):
        raise RuntimeError("Secret value is not a JSON object")
    return payload


@dataclass(frozen=True)
class DbCredentials:
    """Everything needed to open a database connection."""

    host: str
    port: int
    dbname: str
    username: str
    password: str

    def __repr__(self) -> str:
        return (
            f"DbCredentials(host={self.host!r}, port={self.port}, "
            f"dbname={self.dbname!r}, username={self.username!r})"
        )


class CredentialResolver:
    """Resolve database credentials from settings and the secret store."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self._settings = settings
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_secretsmanager_client(self._settings.region)
        return self._client

    def resolve(self) -> DbCredentials:
        """Fetch credentials for the configured database.

        Raises:
            ConfigurationError: If host, database name or secret id is unset.
            DatabaseConnectionError: If the secret cannot be fetched or is
                missing the username or password.
        """
        settings = self._settings
        if not settings.db_host:
            raise ConfigurationError("RDS_HOST")
        if not settings.db_name:
            raise ConfigurationError("DB_NAME")
        if not settings.secret_name:
            raise ConfigurationError("SECRET_NAME")

        try:
            secret = get_secret_json(self.client, settings.secret_name)
        except (ClientError, BotoCoreError, RuntimeError, ValueError) as exc:
            logger.error(f"Failed to get secret: {type(exc).__name__}: {exc}")
            raise DatabaseConnectionError(
                "Failed to get database credentials", detail=str(exc)
            ) from exc

        username = secret.get("username")
        password = secret.get("password")
        if not username or not password:
            raise DatabaseConnectionError(
                "Secret is missing database username or password"
            )

        try:
            port = int(secret.get("port") or DEFAULT_DB_PORT)
        except (TypeError, ValueError) as exc:
            raise DatabaseConnectionError("Secret has an invalid port") from exc

        return DbCredentials(
            host=settings.db_host,
            port=port,
            dbname=settings.db_name,
            username=str(username),
            password=str(password),
        )
