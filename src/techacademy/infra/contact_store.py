# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Append-only log of contact-form messages (``contatos`` table)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from techacademy.core.errors import StoreError, StoreErrorKind
from techacademy.infra.db import ContactRow


class ContactStore:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def add(self, name: str, email: str, phone: Optional[str], message: str) -> int:
        with self._sessions() as session:
            row = ContactRow(name=name, email=email, phone=phone or None, message=message)
            session.add(row)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc)) from exc
            return int(row.id)

    def count(self) -> int:
        try:
            with self._sessions() as session:
                return int(session.execute(select(func.count()).select_from(ContactRow)).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(StoreErrorKind.UNAVAILABLE, str(exc)) from exc
