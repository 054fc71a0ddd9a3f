"""User management screen logic.

The controller holds the state behind the users table (list, detail
panel, edit form and inline error) and drives the API client. Rendering
is left to the caller. The list is always re-fetched after a successful
change; nothing is updated optimistically.
"""

from __future__ import annotations

import enum
import logging
from typing import Any
from typing import Callable
from typing import Optional

from portal.api_client import ApiClient
from portal.api_client import USERS_ENDPOINT
from portal.auth import AuthSession

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this user?"
REQUIRED_FIELDS = ("username", "email", "role")
FORM_FIELDS = REQUIRED_FIELDS + ("phone_number",)


class ViewState(str, enum.Enum):
    LOADING = "loading"
    IDLE = "idle"
    LOADED = "loaded"
    DETAIL = "detail"
    EDITING = "editing"
    ERROR = "error"


def _empty_form() -> dict[str, Optional[str]]:
    return {name: "" for name in FORM_FIELDS}


class UserListController:
    """State machine for the users list, detail and edit views.

    Args:
        client: API client used for every request.
        session: Signed-in identity session, or None when signed out.
        confirm: Called with a prompt before deleting; returns True to go on.
    """

    def __init__(
        self,
        client: ApiClient,
        session: Optional[AuthSession],
        confirm: Callable[[str], bool],
    ):
        self._client = client
        self._session = session
        self._confirm = confirm
        self.state = ViewState.LOADING
        self.users: Optional[list[dict[str, Any]]] = None
        self.selected_user: Optional[dict[str, Any]] = None
        self.editing_user: Optional[dict[str, Any]] = None
        self.form: dict[str, Optional[str]] = _empty_form()
        self.error: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        if self._session is None:
            return None
        return self._session.id_token or None

    def load(self) -> bool:
        """Fetch the user list; does nothing without a signed-in session."""
        if self.token is None:
            self.state = ViewState.IDLE
            return False

        response = self._client.get_all(USERS_ENDPOINT, self.token)
        if not response.success:
            self._fail(response.error, "Failed to load users.")
            return False

        self.users = response.data or None
        self.state = ViewState.LOADED
        return True

    def show_details(self, user_id: int) -> bool:
        if self.token is None:
            return False

        response = self._client.get_user(USERS_ENDPOINT, user_id, self.token)
        if response.success and response.data:
            self.selected_user = response.data
            self.error = None
            self.state = ViewState.DETAIL
            return True

        self._fail(response.error, "Failed to fetch user details.")
        return False

    def close_details(self) -> None:
        self.selected_user = None
        self.state = ViewState.LOADED

    def start_edit(self, user: dict[str, Any]) -> None:
        """Open the edit form pre-filled with the user's current values."""
        self.editing_user = user
        self.form = {name: user.get(name) or "" for name in REQUIRED_FIELDS}
        # A missing phone number stays null through the overwrite.
        self.form["phone_number"] = user.get("phone_number")
        self.selected_user = None
        self.state = ViewState.EDITING

    def update_form(self, **fields: Optional[str]) -> None:
        unknown = set(fields) - set(FORM_FIELDS)
        if unknown:
            raise ValueError(f"Unknown form fields: {', '.join(sorted(unknown))}")
        self.form.update(fields)

    def save(self) -> bool:
        """Send every form field as a full overwrite, then reload the list."""
        if self.editing_user is None or self.token is None:
            return False

        response = self._client.put(
            f"{USERS_ENDPOINT}/{self.editing_user['id']}",
            self._payload(),
            self.token,
        )
        if not response.success:
            self._fail(response.error, "Failed to update user.")
            return False

        self.error = None
        self.editing_user = None
        self.form = _empty_form()
        self.load()
        return True

    def _payload(self) -> dict[str, Optional[str]]:
        payload = dict(self.form)
        if not payload.get("phone_number"):
            payload["phone_number"] = None
        return payload

    def cancel_edit(self) -> None:
        self.editing_user = None
        self.form = _empty_form()
        self.state = ViewState.LOADED

    def delete(self, user_id: int) -> bool:
        """Ask for confirmation, delete the user, then reload the list."""
        if self.token is None:
            return False
        if not self._confirm(DELETE_PROMPT):
            return False

        response = self._client.delete_user(USERS_ENDPOINT, user_id, self.token)
        if not response.success:
            self._fail(response.error, "Failed to delete user.")
            return False

        self.error = None
        self.selected_user = None
        self.load()
        return True

    def _fail(self, error: Optional[str], fallback: str) -> None:
        self.error = error or fallback
        self.state = ViewState.ERROR
        logger.info(f"User action failed: {self.error}")
