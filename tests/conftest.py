"""Pytest configuration and fixtures for the users service tests.

SQLite database files stand in for PostgreSQL; the per-request
connection manager opens and disposes its own engine, so each test gets
its own file under ``tmp_path``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any
from typing import Generator
from typing import Optional
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

# Add backend and portal sources to path for imports
_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(_ROOT / 'backend' / 'src'))
sys.path.insert(0, str(_ROOT / 'frontend' / 'src'))


# --- Database Fixtures ---


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh SQLite database file."""
    from app.config import Settings

    return Settings(database_url=f"sqlite:///{tmp_path / 'users.db'}")


@pytest.fixture
def connection_manager(settings):
    """Connection manager bound to the test database."""
    from app.db.engine import ConnectionManager

    return ConnectionManager(settings)


@pytest.fixture
def db_session(connection_manager) -> Generator:
    """A prepared session (schema created, demo rows seeded)."""
    with connection_manager.connection() as session:
        yield session


# --- Sample Data Factories ---


@pytest.fixture
def sample_user_body() -> dict:
    """Camel-cased create body as sent by the portal."""
    return {
        'cognitoSub': 's1',
        'username': 'A',
        'email': 'a@x.com',
        'role': 'user',
        'phoneNumber': '1',
    }


# --- API Event Fixtures ---


def make_event(
    method: str,
    user_id: Optional[Any] = None,
    body: Optional[dict] = None,
) -> dict:
    """Build an API Gateway proxy event for the users resource."""
    path = '/users' if user_id is None else f'/users/{user_id}'
    return {
        'httpMethod': method,
        'path': path,
        'pathParameters': None if user_id is None else {'id': str(user_id)},
        'queryStringParameters': None,
        'headers': {'Content-Type': 'application/json'},
        'requestContext': {'requestId': str(uuid4())},
        'body': None if body is None else json.dumps(body),
        'isBase64Encoded': False,
    }


def response_body(response: dict) -> dict:
    """Decode the JSON body of a Lambda proxy response."""
    return json.loads(response['body'])


# --- Mock Fixtures ---


@pytest.fixture
def mock_secrets_client() -> MagicMock:
    """Secrets Manager client returning a valid database secret."""
    client = MagicMock()
    client.get_secret_value.return_value = {
        'SecretString': json.dumps({'username': 'app', 'password': 'p@ss word'}),
    }
    return client
