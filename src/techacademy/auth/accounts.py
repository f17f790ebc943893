# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account signup and login.

Both operations are single-attempt pipelines: any store failure is
reported as ``InternalError`` and nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import HashingError

from techacademy.auth.passwords import build_hasher, hash_password, verify_password
from techacademy.core.errors import (
    AuthError,
    ConfigurationError,
    ConflictError,
    InternalError,
    StoreError,
    StoreErrorKind,
    ValidationError,
)
from techacademy.infra.user_store import CredentialStore

logger = logging.getLogger(__name__)

ADMIN_HANDLE = "admin"
ADMIN_NAME = "Administrador"


class AccountService:
    def __init__(self, store: CredentialStore, hasher: Optional[PasswordHasher] = None):
        self.store = store
        self.hasher = hasher or build_hasher()

    def _hash(self, password: str) -> str:
        try:
            return hash_password(password, hasher=self.hasher)
        except HashingError as exc:
            logger.exception("Password hashing failed")
            raise InternalError("password hashing failed") from exc

    def signup(
        self,
        name: Optional[str],
        handle: Optional[str],
        password: Optional[str],
        password_confirmation: Optional[str],
    ) -> int:
        """Create an account and return its id.

        Presence is checked, values are not trimmed.

        Raises:
            ValidationError: a field is missing or the confirmation differs.
            ConflictError: the handle is already taken.
            InternalError: hashing or the store failed.
        """
        if not name or not handle or not password or not password_confirmation:
            raise ValidationError(ValidationError.MISSING_FIELD)
        if password != password_confirmation:
            raise ValidationError(ValidationError.PASSWORD_MISMATCH)

        password_hash = self._hash(password)
        try:
            user_id = self.store.create_user(name, handle, password_hash)
        except StoreError as exc:
            if exc.kind is StoreErrorKind.DUPLICATE_HANDLE:
                logger.info("Signup rejected, handle already exists: %s", handle)
                raise ConflictError() from exc
            logger.error("Could not create user %s: %s", handle, exc)
            raise InternalError("could not create user") from exc

        logger.info("User created: %s (id=%s)", handle, user_id)
        return user_id

    def login(self, handle: Optional[str], password: Optional[str]) -> int:
        """Check credentials and return the user id.

        An unknown handle and a wrong password raise the same ``AuthError``.
        """
        if not handle or not password:
            raise AuthError()
        try:
            user = self.store.find_by_handle(handle)
        except StoreError as exc:
            logger.error("Could not look up user %s: %s", handle, exc)
            raise InternalError("could not look up user") from exc

        if user is None or not verify_password(user.password_hash, password, hasher=self.hasher):
            logger.info("Failed login for %s", handle)
            raise AuthError()

        logger.info("Login ok: %s", handle)
        return user.id

    def ensure_user(self, name: str, handle: str, password: str) -> bool:
        """Create the account unless the handle exists. Returns True if created."""
        password_hash = self._hash(password)
        try:
            self.store.create_user(name, handle, password_hash)
        except StoreError as exc:
            if exc.kind is StoreErrorKind.DUPLICATE_HANDLE:
                return False
            raise InternalError("could not create user") from exc
        return True


def seed_admin(accounts: AccountService, *, enabled: bool, password: str) -> bool:
    """Seed the administrative account at startup.

    There is no built-in default password: seeding without one configured is
    a ConfigurationError. An existing ``admin`` row is left as is.
    """
    if not enabled:
        logger.info("Admin seeding disabled")
        return False
    if not password:
        raise ConfigurationError(
            "TECHACADEMY_ADMIN_PASSWORD must be set (or TECHACADEMY_SEED_ADMIN=false)"
        )
    created = accounts.ensure_user(ADMIN_NAME, ADMIN_HANDLE, password)
    if created:
        logger.info("Seeded admin account")
    return created
