"""Tests for the user repository."""

from __future__ import annotations

import pytest

from app.api.schemas import UserCreate
from app.api.schemas import UserUpdate
from app.db.repositories import UserRepository
from app.exceptions import ValidationError


def _create_fields(**overrides) -> UserCreate:
    data = {
        'cognito_sub': 'sub-new',
        'username': 'Carol',
        'email': 'carol@example.com',
        'role': 'user',
        'phone_number': '5551234',
    }
    data.update(overrides)
    return UserCreate(**data)


def _demo_user(repo: UserRepository, cognito_sub: str):
    return next(user for user in repo.list() if user.cognito_sub == cognito_sub)


class TestCreate:
    def test_returns_row_with_generated_id(self, db_session) -> None:
        repo = UserRepository(db_session)
        existing = {user.id for user in repo.list()}

        user = repo.create(_create_fields())

        assert user.id > 0
        assert user.id not in existing
        assert user.username == 'Carol'
        assert user.cognito_sub == 'sub-new'

    def test_duplicate_email_raises_validation_error(self, db_session) -> None:
        repo = UserRepository(db_session)
        with pytest.raises(ValidationError) as exc_info:
            repo.create(_create_fields(email='alice@example.com'))
        assert 'UNIQUE' in exc_info.value.message.upper()

    def test_duplicate_subject_raises_validation_error(self, db_session) -> None:
        repo = UserRepository(db_session)
        with pytest.raises(ValidationError):
            repo.create(_create_fields(cognito_sub='demo-sub-1'))

    def test_session_usable_after_violation(self, db_session) -> None:
        repo = UserRepository(db_session)
        with pytest.raises(ValidationError):
            repo.create(_create_fields(email='bob@example.com'))
        assert repo.create(_create_fields()).id > 0

    def test_ids_are_not_reused(self, db_session) -> None:
        repo = UserRepository(db_session)
        first = repo.create(_create_fields())
        repo.delete(first.id)
        second = repo.create(_create_fields(cognito_sub='sub-2', email='c2@x.com'))
        assert second.id > first.id


class TestRead:
    def test_list_is_ordered_by_id(self, db_session) -> None:
        repo = UserRepository(db_session)
        repo.create(_create_fields(cognito_sub='z', email='z@x.com'))
        repo.create(_create_fields(cognito_sub='a', email='a@x.com'))

        ids = [user.id for user in repo.list()]

        assert ids == sorted(ids)
        assert len(ids) == 4

    def test_get_by_id_returns_none_for_missing(self, db_session) -> None:
        assert UserRepository(db_session).get_by_id(9999) is None


class TestUpdate:
    def test_overwrites_every_mutable_field(self, db_session) -> None:
        repo = UserRepository(db_session)
        user = _demo_user(repo, 'demo-sub-1')

        updated = repo.update(user.id, UserUpdate(
            username='Alicia', email='alicia@example.com', role='user',
        ))

        assert updated.username == 'Alicia'
        assert updated.email == 'alicia@example.com'
        assert updated.role == 'user'
        # Full overwrite: the omitted phone number is cleared.
        assert updated.phone_number is None
        assert updated.cognito_sub == 'demo-sub-1'

    def test_missing_returns_none(self, db_session) -> None:
        fields = UserUpdate(username='x', email='x@x.com', role='user')
        assert UserRepository(db_session).update(9999, fields) is None

    def test_email_collision_raises_validation_error(self, db_session) -> None:
        repo = UserRepository(db_session)
        user = _demo_user(repo, 'demo-sub-1')
        with pytest.raises(ValidationError):
            repo.update(user.id, UserUpdate(
                username='Alice', email='bob@example.com', role='admin',
            ))


class TestDelete:
    def test_returns_deleted_row(self, db_session) -> None:
        repo = UserRepository(db_session)
        user = _demo_user(repo, 'demo-sub-2')
        user_id = user.id

        deleted = repo.delete(user_id)

        assert deleted.username == 'Bob'
        assert repo.get_by_id(user_id) is None

    def test_missing_returns_none(self, db_session) -> None:
        assert UserRepository(db_session).delete(9999) is None
