# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application error types.

Services raise these; the HTTP layer maps each one to exactly one response.
"""

from __future__ import annotations

from enum import Enum


class TechAcademyError(Exception):
    """Base class for every application error."""


class ConfigurationError(TechAcademyError):
    """Invalid or missing settings detected at startup."""


class ValidationError(TechAcademyError):
    """User-correctable input problem."""

    MISSING_FIELD = "missing field"
    PASSWORD_MISMATCH = "password mismatch"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ConflictError(TechAcademyError):
    def __init__(self, message: str = "handle exists"):
        super().__init__(message)


class AuthError(TechAcademyError):
    """Bad credentials. Unknown handle and wrong password are not told apart."""

    def __init__(self, message: str = "invalid credentials"):
        super().__init__(message)


class InternalError(TechAcademyError):
    """Store, hashing or mail failure. Detail goes to the log, not the client."""


class StoreErrorKind(str, Enum):
    DUPLICATE_HANDLE = "duplicate_handle"
    UNAVAILABLE = "unavailable"


class StoreError(TechAcademyError):
    """Failure reported by a store, classified into a closed set of kinds."""

    def __init__(self, kind: StoreErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class MailError(TechAcademyError):
    """Outbound mail could not be delivered to the SMTP server."""
