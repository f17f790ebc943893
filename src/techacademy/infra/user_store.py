# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential store over the ``usuarios`` table.

Handle uniqueness is enforced by the table's UNIQUE constraint, so two
concurrent inserts with the same handle resolve to one success and one
``DUPLICATE_HANDLE`` without any locking here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from techacademy.core.errors import StoreError, StoreErrorKind
from techacademy.infra.db import UserRow


@dataclass(frozen=True)
class User:
    id: int
    name: str
    handle: str
    password_hash: str


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "unique" in str(getattr(exc, "orig", exc)).lower()


class CredentialStore:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def create_user(self, name: str, handle: str, password_hash: str) -> int:
        """Insert a user and return its id.

        Raises:
            StoreError: ``DUPLICATE_HANDLE`` when the handle is taken,
                ``UNAVAILABLE`` on any other database failure.
        """
        with self._sessions() as session:
            row = UserRow(name=name, handle=handle, password_hash=password_hash)
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _is_unique_violation(exc):
                    raise StoreError(StoreErrorKind.DUPLICATE_HANDLE, handle) from exc
                raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc.orig)) from exc
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc)) from exc
            return int(row.id)

    def find_by_handle(self, handle: str) -> Optional[User]:
        try:
            with self._sessions() as session:
                row = session.execute(select(UserRow).where(UserRow.handle == handle)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc)) from exc
        if row is None:
            return None
        return User(id=row.id, name=row.name, handle=row.handle, password_hash=row.password_hash)

    def count_by_handle(self, handle: str) -> int:
        try:
            with self._sessions() as session:
                return int(
                    session.execute(
                        select(func.count()).select_from(UserRow).where(UserRow.handle == handle)
                    ).scalar_one()
                )
        except SQLAlchemyError as exc:
            raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc)) from exc
