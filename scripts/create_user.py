#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from techacademy.auth.accounts import AccountService
from techacademy.auth.passwords import build_hasher
from techacademy.config import load_settings
from techacademy.core.errors import ConflictError, ValidationError
from techacademy.core.logging_config import setup_logging
from techacademy.infra.db import init_schema, make_engine, make_session_factory
from techacademy.infra.user_store import CredentialStore


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    engine = make_engine(settings.db_path)
    init_schema(engine)
    accounts = AccountService(
        CredentialStore(make_session_factory(engine)),
        hasher=build_hasher(settings.hash_time_cost, settings.hash_memory_cost),
    )

    name = input("Nome: ").strip()
    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")

    try:
        user_id = accounts.signup(name, username, pw1, pw2)
    except ValidationError as e:
        raise SystemExit(f"Dados inválidos: {e.reason}")
    except ConflictError:
        raise SystemExit(f"Usuário já existe: {username}")
    finally:
        engine.dispose()

    print(f"OK -> {username} (id={user_id}) em {settings.db_path}")


if __name__ == "__main__":
    main()
