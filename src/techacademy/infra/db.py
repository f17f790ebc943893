# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SQLite engine, session factory and table definitions."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import Column, DateTime, Integer, Text, create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()

# Seconds a writer waits on a locked database before failing.
BUSY_TIMEOUT_SECONDS = 30


class UserRow(Base):
    __tablename__ = "usuarios"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column("nome", Text, nullable=False)
    handle = Column("username", Text, nullable=False, unique=True)
    password_hash = Column("password", Text, nullable=False)


class ContactRow(Base):
    __tablename__ = "contatos"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column("nome", Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column("telefone", Text, nullable=True)
    message = Column("mensagem", Text, nullable=False)
    sent_at = Column("data_envio", DateTime, server_default=func.current_timestamp())


def make_engine(db_path: Path) -> Engine:
    """Create an engine for the SQLite file at ``db_path``."""
    db_path = Path(db_path)
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT_SECONDS},
    )
    logger.info("Connected to SQLite database at %s", db_path)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_schema(engine: Engine) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(bind=engine)
