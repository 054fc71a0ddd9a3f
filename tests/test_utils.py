"""Tests for parsing, response and logging utilities."""

from __future__ import annotations

import json
import logging

import pytest

from app.exceptions import ValidationError
from app.utils.logging import StructuredLogFormatter
from app.utils.logging import clear_request_context
from app.utils.logging import hash_for_correlation
from app.utils.logging import mask_email
from app.utils.logging import set_request_context
from app.utils.parsers import parse_body
from app.utils.parsers import parse_int
from app.utils.parsers import parse_user_id
from app.utils.responses import error_response
from app.utils.responses import get_cors_headers
from app.utils.responses import success_response


class TestParseInt:
    def test_returns_none_for_none(self) -> None:
        assert parse_int(None) is None

    def test_returns_none_for_empty_string(self) -> None:
        assert parse_int('') is None

    def test_parses_positive_integer(self) -> None:
        assert parse_int('42') == 42

    def test_raises_for_invalid_string(self) -> None:
        with pytest.raises(ValueError):
            parse_int('not-a-number')


class TestParseUserId:
    def test_no_path_parameters(self) -> None:
        assert parse_user_id({'pathParameters': None}) is None

    def test_parses_id(self) -> None:
        assert parse_user_id({'pathParameters': {'id': '7'}}) == 7

    def test_invalid_id_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_user_id({'pathParameters': {'id': '7x'}})
        assert exc_info.value.field == 'id'


class TestParseBody:
    def test_parses_object(self) -> None:
        assert parse_body({'body': '{"a": 1}'}) == {'a': 1}

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValidationError):
            parse_body({'body': '[1, 2]'})

    def test_rejects_malformed_base64(self) -> None:
        with pytest.raises(ValidationError):
            parse_body({'body': 'not base64!', 'isBase64Encoded': True})


class TestResponses:
    def test_success_envelope(self) -> None:
        response = success_response(200, [])
        assert response['statusCode'] == 200
        assert json.loads(response['body']) == {'success': True, 'data': []}

    def test_error_envelope(self) -> None:
        response = error_response(404, 'User not found')
        assert json.loads(response['body']) == {
            'success': False,
            'error': 'User not found',
        }

    def test_cors_echoes_allowed_origin(self) -> None:
        headers = get_cors_headers({'headers': {'origin': 'http://localhost:5173'}})
        assert headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'

    def test_cors_origins_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv('CORS_ALLOWED_ORIGINS', 'https://portal.example.com')
        headers = get_cors_headers({'headers': {'Origin': 'https://evil.example'}})
        assert headers['Access-Control-Allow-Origin'] == 'https://portal.example.com'


class TestLogging:
    def test_mask_email(self) -> None:
        assert mask_email('alice@example.com') == 'al***@***.com'
        assert mask_email('not-an-email') == '***'

    def test_hash_is_short_and_stable(self) -> None:
        assert hash_for_correlation('demo-sub-1') == hash_for_correlation('demo-sub-1')
        assert len(hash_for_correlation('demo-sub-1')) == 12

    def test_formatter_includes_request_id(self) -> None:
        set_request_context(req_id='req-123')
        record = logging.LogRecord('users', logging.INFO, __file__, 1, 'hello', None, None)
        try:
            payload = json.loads(StructuredLogFormatter().format(record))
        finally:
            clear_request_context()
        assert payload['message'] == 'hello'
        assert payload['request_id'] == 'req-123'
        assert payload['level'] == 'INFO'
