"""Health check endpoint for monitoring and deployment pipelines."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Mapping
from typing import Optional

from sqlalchemy import text

from app.config import Settings
from app.db.engine import ConnectionManager
from app.utils.parsers import first_query_param
from app.utils.responses import json_response


@dataclass
class HealthCheck:
    """Result of a single health check."""

    name: str
    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "healthy": self.healthy}
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class HealthStatus:
    """Overall health status of the service."""

    healthy: bool
    checks: list[HealthCheck]
    version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "version": self.version,
            "checks": [check.to_dict() for check in self.checks],
        }


def check_health(
    settings: Settings,
    manager: ConnectionManager,
    include_details: bool = False,
) -> HealthStatus:
    """Run the configuration and database checks."""
    configuration = _check_configuration(settings)
    checks = [configuration]
    # Without configuration the database check can only fail the same way.
    if configuration.healthy:
        checks.append(_check_database(manager))

    return HealthStatus(
        healthy=all(check.healthy for check in checks),
        checks=checks if include_details else [],
        version=os.getenv("APP_VERSION", "unknown"),
    )


def _check_database(manager: ConnectionManager) -> HealthCheck:
    """Open a connection through the manager and run ``SELECT 1``."""
    start_time = time.perf_counter()
    try:
        with manager.connection() as session:
            session.execute(text("SELECT 1")).fetchone()
    except Exception as e:
        return HealthCheck(
            name="database",
            healthy=False,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            error=str(e),
        )
    return HealthCheck(
        name="database",
        healthy=True,
        latency_ms=(time.perf_counter() - start_time) * 1000,
        details={"connection": "ok"},
    )


def _check_configuration(settings: Settings) -> HealthCheck:
    missing = settings.missing()
    if missing:
        return HealthCheck(
            name="configuration",
            healthy=False,
            error=f"Missing required variables: {', '.join(missing)}",
        )
    return HealthCheck(
        name="configuration",
        healthy=True,
        details={"database_url_override": bool(settings.database_url)},
    )


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Return 200 when healthy and 503 otherwise.

    ``?details=true`` includes the individual check results.
    """
    settings = Settings.from_env()
    include_details = first_query_param(event, "details") == "true"
    status = check_health(
        settings,
        ConnectionManager(settings),
        include_details=include_details,
    )
    return json_response(200 if status.healthy else 503, status.to_dict(), event=event)
