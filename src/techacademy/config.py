# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process settings.

All values come from environment variables (a local ``.env`` file is read
first). Settings are loaded once at startup and passed explicitly to the
components that need them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from techacademy.core.errors import ConfigurationError

TRUTHY = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class MailSettings:
    host: str = "smtp.office365.com"
    port: int = 587
    starttls: bool = True
    timeout: float = 30.0
    username: str = ""
    password: str = ""
    recipient: str = ""

    @property
    def sender(self) -> str:
        return self.username

    @property
    def to(self) -> str:
        return self.recipient or self.username


@dataclass(frozen=True)
class Settings:
    db_path: Path = Path("techacademy.db")
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    static_dir: Optional[Path] = None
    login_redirect: str = "/painelA.html"
    signup_redirect: str = "/login.html?success=1"
    seed_admin: bool = True
    admin_password: str = ""
    log_level: str = "INFO"
    hash_time_cost: Optional[int] = None
    hash_memory_cost: Optional[int] = None
    mail: MailSettings = field(default_factory=MailSettings)

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def _int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``environ`` (defaults to ``.env`` + ``os.environ``)."""
    if environ is None:
        load_dotenv()
        environ = os.environ
    env = environ

    static_raw = (env.get("TECHACADEMY_STATIC_DIR") or "").strip()

    mail = MailSettings(
        host=env.get("SMTP_HOST", "smtp.office365.com"),
        port=_int(env, "SMTP_PORT", 587),
        starttls=_flag(env, "SMTP_STARTTLS", True),
        timeout=_float(env, "SMTP_TIMEOUT", 30.0),
        username=env.get("EMAIL_USER", ""),
        password=env.get("EMAIL_PASS", ""),
        recipient=env.get("EMAIL_TO", ""),
    )

    return Settings(
        db_path=Path(env.get("TECHACADEMY_DB_PATH", "techacademy.db")),
        host=env.get("TECHACADEMY_HOST", "0.0.0.0"),
        port=_int(env, "TECHACADEMY_PORT", 3000),
        reload=_flag(env, "TECHACADEMY_RELOAD", False),
        static_dir=Path(static_raw).resolve() if static_raw else None,
        login_redirect=env.get("TECHACADEMY_LOGIN_REDIRECT", "/painelA.html"),
        signup_redirect=env.get("TECHACADEMY_SIGNUP_REDIRECT", "/login.html?success=1"),
        seed_admin=_flag(env, "TECHACADEMY_SEED_ADMIN", True),
        admin_password=env.get("TECHACADEMY_ADMIN_PASSWORD", ""),
        log_level=env.get("TECHACADEMY_LOG_LEVEL", "INFO"),
        hash_time_cost=_int(env, "TECHACADEMY_HASH_TIME_COST", None),
        hash_memory_cost=_int(env, "TECHACADEMY_HASH_MEMORY_COST", None),
        mail=mail,
    )
