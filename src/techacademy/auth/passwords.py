# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()


def build_hasher(time_cost: Optional[int] = None, memory_cost: Optional[int] = None) -> PasswordHasher:
    """Return a hasher with the given work factor; unset values keep argon2 defaults."""
    if time_cost is None and memory_cost is None:
        return _PH
    kwargs = {}
    if time_cost is not None:
        kwargs["time_cost"] = time_cost
    if memory_cost is not None:
        kwargs["memory_cost"] = memory_cost
    return PasswordHasher(**kwargs)


def hash_password(plain: str, *, hasher: PasswordHasher = _PH) -> str:
    if not plain:
        raise ValueError("Empty password")
    return hasher.hash(plain)


def verify_password(hash_value: str, plain: str, *, hasher: PasswordHasher = _PH) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return hasher.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False
