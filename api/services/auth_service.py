"""
Authentication and identity related use cases.

Every operation receives an explicit AuthContext holding the collaborators it
may touch: the caller's session, the user store and the password hasher.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from api.core.security import PasswordHasher, default_hasher
from api.db.models import User
from api.domain.credentials import (
    AuthResult,
    AuthSuccess,
    UsernamePasswordInput,
    field_error,
    validate_registration,
)
from api.repositories.sql_repository import SQLRepository, UniquenessViolation
from api.services.session_service import SessionHandle

logger = logging.getLogger(__name__)

@dataclass
class AuthContext:
    session: SessionHandle
    users: SQLRepository
    hasher: PasswordHasher = default_hasher


def me(ctx: AuthContext) -> Optional[User]:
    user_id = ctx.session.user_id
    # not logged in
    if user_id is None:
        return None
    return ctx.users.get_user(user_id)


def register(ctx: AuthContext, options: UsernamePasswordInput) -> AuthResult:
    invalid = validate_registration(options)
    if invalid is not None:
        return invalid

    password_hash = ctx.hasher.hash(options.password)
    try:
        user = ctx.users.create_user(options.username, password_hash)
    except UniquenessViolation as exc:
        logger.info("Registration rejected, %s taken: %s", exc.field, options.username)
        return field_error(exc.field, "username already taken")
    logger.info("Registered user %s (%s)", user.username, user.id)
    return AuthSuccess(user)


def login(ctx: AuthContext, options: UsernamePasswordInput) -> AuthResult:
    user = ctx.users.get_user_by_username(options.username)
    if user is None:
        logger.info("Login failed, unknown username: %s", options.username)
        return field_error("username", "that username does not exist")
    if not ctx.hasher.verify(user.password, options.password):
        logger.info("Login failed, incorrect password for user %s", user.id)
        return field_error("password", "incorrect password")

    if ctx.hasher.needs_rehash(user.password):
        new_hash = ctx.hasher.hash(options.password)
        ctx.users.update_user_password(user.id, new_hash)
        user.password = new_hash
        logger.info("Rehashed password for user %s", user.id)

    ctx.session.log_in(user.id)
    logger.info("User %s logged in", user.id)
    return AuthSuccess(user)


def logout(ctx: AuthContext) -> bool:
    user_id = ctx.session.user_id
    cleared = ctx.session.clear()
    if cleared:
        logger.info("User %s logged out", user_id)
    return cleared
