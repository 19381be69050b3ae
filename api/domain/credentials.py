"""Domain rules for account credentials and the result of auth use cases."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from api.db.models import User

USERNAME_MIN_EXCLUSIVE = 2
PASSWORD_MIN_EXCLUSIVE = 3


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class UsernamePasswordInput:
    username: str
    password: str


@dataclass(frozen=True)
class AuthErrors:
    """Business-rule failure; always carries at least one FieldError."""

    errors: list[FieldError]

    def __post_init__(self):
        if not self.errors:
            raise ValueError("AuthErrors requires at least one FieldError")


@dataclass(frozen=True)
class AuthSuccess:
    user: User


AuthResult = Union[AuthErrors, AuthSuccess]


def field_error(field_name: str, message: str) -> AuthErrors:
    return AuthErrors([FieldError(field_name, message)])


def validate_registration(options: UsernamePasswordInput) -> Optional[AuthErrors]:
    """Length checks in order; the first failure wins."""
    if len(options.username or "") <= USERNAME_MIN_EXCLUSIVE:
        return field_error("username", f"length must be greater than {USERNAME_MIN_EXCLUSIVE}")
    if len(options.password or "") <= PASSWORD_MIN_EXCLUSIVE:
        return field_error("password", f"length must be greater than {PASSWORD_MIN_EXCLUSIVE}")
    return None
