"""Pydantic schemas for registration, login and user reads.

Learn: password_hash never appears in a Read schema, so it cannot
leak through a response_model even if a handler returns the ORM row.
"""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from issuetracker.schemas.sanitize import is_valid_email, sanitize_string

Email = Annotated[str, BeforeValidator(sanitize_string), Field(min_length=1, max_length=255)]


class RegisterRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please provide a valid email address")
        return v


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please provide a valid email address")
        return v


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResult(BaseModel):
    """Returned by register and login: who you are plus a bearer token."""
    user: UserRead
    token: str
