"""Cached boto3 clients, one per (service, region) per container."""

from __future__ import annotations

from typing import Any
from typing import Optional

import boto3

from app.utils.logging import get_logger

logger = get_logger(__name__)

_CLIENT_CACHE: dict[tuple[str, Optional[str]], Any] = {}


def get_client(service: str, region_name: Optional[str] = None) -> Any:
    """Return a boto3 client, creating it on first use."""
    cache_key = (service, region_name)
    client = _CLIENT_CACHE.get(cache_key)
    if client is None:
        logger.debug(f"Creating {service} client for region {region_name}")
        client = boto3.client(service, region_name=region_name)  # type: ignore[call-overload]
        _CLIENT_CACHE[cache_key] = client
    return client


def get_secretsmanager_client(region_name: Optional[str] = None) -> Any:
    return get_client("secretsmanager", region_name=region_name)


def clear_client_cache() -> None:
    """Drop every cached client (tests and credential rotation)."""
    _CLIENT_CACHE.clear()
