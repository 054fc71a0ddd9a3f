"""Users CRUD API handler.

Routes (API Gateway proxy integration):

    POST   /users        create a user                 201
    GET    /users        list users ordered by id      200
    GET    /users/{id}   fetch one user                200 / 404
    PUT    /users/{id}   overwrite a user's fields     200 / 404
    DELETE /users/{id}   delete and return the user    200 / 404

Every response body is an envelope ``{"success", "data"?, "error"?}``.
Each invocation opens exactly one database connection and releases it
before returning, whatever the outcome.
"""

from __future__ import annotations

import time
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.api.schemas import DeletedUser
from app.api.schemas import UserCreate
from app.api.schemas import UserSchema
from app.api.schemas import UserUpdate
from app.config import Settings
from app.db.engine import ConnectionManager
from app.db.repositories import UserRepository
from app.exceptions import AppError
from app.exceptions import NotFoundError
from app.exceptions import UnsupportedMethodError
from app.exceptions import ValidationError
from app.utils.logging import clear_request_context
from app.utils.logging import configure_logging
from app.utils.logging import get_logger
from app.utils.logging import hash_for_correlation
from app.utils.logging import log_lambda_event
from app.utils.logging import log_response
from app.utils.logging import mask_email
from app.utils.logging import set_request_context
from app.utils.parsers import parse_body
from app.utils.parsers import parse_user_id
from app.utils.responses import error_response
from app.utils.responses import json_response
from app.utils.responses import success_response

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)

RESOURCE = "User"

# (status_code, data) produced by a route handler
RouteResult = tuple[int, Any]
RouteHandler = Callable[[Session, Mapping[str, Any], Optional[int]], RouteResult]

_CONNECTION_MANAGER: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """Return the process-wide connection manager, built on first use."""
    global _CONNECTION_MANAGER
    if _CONNECTION_MANAGER is None:
        _CONNECTION_MANAGER = ConnectionManager(Settings.from_env())
    return _CONNECTION_MANAGER


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle users CRUD requests."""
    request_id = (event.get("requestContext") or {}).get("requestId", "")
    set_request_context(req_id=request_id)
    start_time = time.perf_counter()
    logger.info("[users-handler] process start.")
    log_lambda_event(logger, event)

    try:
        response = handle_request(event, get_connection_manager())
    finally:
        logger.info("[users-handler] process end.")

    duration_ms = (time.perf_counter() - start_time) * 1000
    log_response(logger, response["statusCode"], duration_ms)
    clear_request_context()
    return response


def handle_request(
    event: Mapping[str, Any],
    manager: ConnectionManager,
) -> dict[str, Any]:
    """Dispatch one request and convert every outcome into an envelope."""
    method = str(event.get("httpMethod") or "").upper()

    try:
        user_id = parse_user_id(event)
        handler = _resolve_route(method, user_id is not None)
        with manager.connection() as session:
            status_code, data = handler(session, event, user_id)
        return success_response(status_code, data, event=event)
    except NotFoundError as exc:
        logger.info(f"{exc.resource} not found: {exc.identifier}")
        return json_response(exc.status_code, exc.to_dict(), event=event)
    except ValidationError as exc:
        logger.warning(f"Validation error: {exc.message}")
        return json_response(exc.status_code, exc.to_dict(), event=event)
    except AppError as exc:
        logger.error(f"{type(exc).__name__}: {exc.message}")
        return json_response(exc.status_code, exc.to_dict(), event=event)
    except Exception:
        logger.exception("Unexpected error in users handler")
        return error_response(500, "Internal server error", event=event)


def _create_user(
    session: Session,
    event: Mapping[str, Any],
    user_id: Optional[int],
) -> RouteResult:
    fields = _validate(UserCreate, parse_body(event))
    user = UserRepository(session).create(fields)
    session.commit()
    logger.info(
        f"Created user {user.id}",
        extra={
            "user": {
                "email": mask_email(user.email),
                "sub_hash": hash_for_correlation(user.cognito_sub),
            }
        },
    )
    return 201, _serialize(user)


def _list_users(
    session: Session,
    event: Mapping[str, Any],
    user_id: Optional[int],
) -> RouteResult:
    users = UserRepository(session).list()
    return 200, [_serialize(user) for user in users]


def _get_user(
    session: Session,
    event: Mapping[str, Any],
    user_id: Optional[int],
) -> RouteResult:
    user = UserRepository(session).get_by_id(_require(user_id))
    if user is None:
        raise NotFoundError(RESOURCE, user_id)
    return 200, _serialize(user)


def _update_user(
    session: Session,
    event: Mapping[str, Any],
    user_id: Optional[int],
) -> RouteResult:
    fields = _validate(UserUpdate, parse_body(event))
    user = UserRepository(session).update(_require(user_id), fields)
    if user is None:
        raise NotFoundError(RESOURCE, user_id)
    session.commit()
    logger.info(f"Updated user {user_id}")
    return 200, _serialize(user)


def _delete_user(
    session: Session,
    event: Mapping[str, Any],
    user_id: Optional[int],
) -> RouteResult:
    user = UserRepository(session).delete(_require(user_id))
    if user is None:
        raise NotFoundError(RESOURCE, user_id)
    snapshot = UserSchema.model_validate(user)
    session.commit()
    logger.info(f"Deleted user {user_id}")
    return 200, DeletedUser(user=snapshot).model_dump()


# (method, has_id) -> handler
_ROUTES: dict[tuple[str, bool], RouteHandler] = {
    ("POST", False): _create_user,
    ("POST", True): _create_user,
    ("GET", False): _list_users,
    ("GET", True): _get_user,
    ("PUT", True): _update_user,
    ("DELETE", True): _delete_user,
}

_ID_REQUIRED = frozenset({"PUT", "DELETE"})


def _resolve_route(method: str, has_id: bool) -> RouteHandler:
    handler = _ROUTES.get((method, has_id))
    if handler is None:
        if method in _ID_REQUIRED:
            raise ValidationError("Missing user ID", field="id")
        raise UnsupportedMethodError(method)
    return handler


def _require(user_id: Optional[int]) -> int:
    if user_id is None:
        raise ValidationError("Missing user ID", field="id")
    return user_id


def _validate(schema: Any, body: dict[str, Any]) -> Any:
    """Validate a request body against a pydantic schema."""
    try:
        return schema.model_validate(body)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            f"Invalid request body: {location} {first.get('msg', '')}".strip(),
            field=location or None,
        ) from exc


def _serialize(user: Any) -> dict[str, Any]:
    return UserSchema.model_validate(user).model_dump()
