"""Pydantic schemas for user requests and responses."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class UserSchema(BaseModel):
    """User record as returned by the API (snake_case keys)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    cognito_sub: str
    username: str
    email: str
    role: str
    phone_number: Optional[str] = None


class UserUpdate(BaseModel):
    """Body of ``PUT /users/{id}``.

    Accepts both ``phoneNumber`` and ``phone_number``. Numbers sent for
    string fields are stored as their text.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    username: str = Field(max_length=255)
    email: str = Field(max_length=255)
    role: str = Field(max_length=50)
    phone_number: Optional[str] = Field(
        default=None, alias="phoneNumber", max_length=20
    )


class UserCreate(UserUpdate):
    """Body of ``POST /users``."""

    cognito_sub: str = Field(alias="cognitoSub", max_length=255)


class DeletedUser(BaseModel):
    """Payload of a successful delete."""

    message: str = "User deleted"
    user: UserSchema

