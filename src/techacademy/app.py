# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from techacademy import __version__
from techacademy.auth.accounts import AccountService, seed_admin
from techacademy.auth.passwords import build_hasher
from techacademy.config import Settings, load_settings
from techacademy.core.errors import AuthError, ConflictError, InternalError, ValidationError
from techacademy.infra.contact_store import ContactStore
from techacademy.infra.db import init_schema, make_engine, make_session_factory
from techacademy.infra.mailer import SmtpMailTransport
from techacademy.infra.user_store import CredentialStore
from techacademy.services.contact_service import ContactRelay, MailTransport

logger = logging.getLogger(__name__)

MSG_SERVER_ERROR = "Erro no servidor"
MSG_BAD_CREDENTIALS = "Usuário ou senha incorretos!"
MSG_USER_EXISTS = "Usuário já existe!"
MSG_SIGNUP_INVALID = {
    ValidationError.MISSING_FIELD: "Preencha todos os campos.",
    ValidationError.PASSWORD_MISMATCH: "As senhas não coincidem.",
}
MSG_CONTACT_MISSING = "Preencha todos os campos obrigatórios."
MSG_CONTACT_SENT = "Mensagem enviada com sucesso!"
MSG_CONTACT_FAILED = "Erro ao enviar mensagem. Tente novamente mais tarde."


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_contact_relay(request: Request) -> ContactRelay:
    return request.app.state.contacts


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _read_fields(request: Request) -> dict:
    """Return body fields from a JSON or form request; unreadable bodies give {}."""
    ctype = request.headers.get("content-type", "")
    if ctype.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def _text_field(fields: dict, name: str) -> Optional[str]:
    """Return a string field; absent or non-string values count as missing."""
    v = fields.get(name)
    return v if isinstance(v, str) else None


def create_app(settings: Optional[Settings] = None, transport: Optional[MailTransport] = None) -> FastAPI:
    """Build the application.

    The database engine and services are created when the app starts and
    disposed when it stops; ``transport`` overrides the SMTP transport.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = make_engine(settings.db_path)
        try:
            init_schema(engine)
            sessions = make_session_factory(engine)

            accounts = AccountService(
                CredentialStore(sessions),
                hasher=build_hasher(settings.hash_time_cost, settings.hash_memory_cost),
            )
            seed_admin(accounts, enabled=settings.seed_admin, password=settings.admin_password)

            app.state.accounts = accounts
            app.state.contacts = ContactRelay(
                ContactStore(sessions),
                transport or SmtpMailTransport(settings.mail),
                settings.mail,
            )
            logger.info("Mail sender configured: %s", settings.mail.sender or "(none)")
            yield
        finally:
            engine.dispose()
            logger.info("Database engine disposed")

    app = FastAPI(title="TechAcademy", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/login")
    async def login_post(
        request: Request,
        accounts: AccountService = Depends(get_accounts),
        cfg: Settings = Depends(get_settings),
    ):
        fields = await _read_fields(request)
        username = _text_field(fields, "username")
        try:
            await run_in_threadpool(accounts.login, username, _text_field(fields, "password"))
        except AuthError:
            return PlainTextResponse(MSG_BAD_CREDENTIALS, status_code=401)
        except InternalError:
            logger.exception("Login failed for %s", username)
            return PlainTextResponse(MSG_SERVER_ERROR, status_code=500)
        # No session is issued: the redirect is the whole success response.
        return RedirectResponse(url=cfg.login_redirect, status_code=302)

    @app.post("/cadastro")
    async def signup_post(
        request: Request,
        accounts: AccountService = Depends(get_accounts),
        cfg: Settings = Depends(get_settings),
    ):
        fields = await _read_fields(request)
        username = _text_field(fields, "username")
        try:
            await run_in_threadpool(
                accounts.signup,
                _text_field(fields, "nome"),
                username,
                _text_field(fields, "password"),
                _text_field(fields, "confirm_password"),
            )
        except ValidationError as e:
            msg = MSG_SIGNUP_INVALID.get(e.reason, MSG_SIGNUP_INVALID[ValidationError.MISSING_FIELD])
            return PlainTextResponse(msg, status_code=400)
        except ConflictError:
            return PlainTextResponse(MSG_USER_EXISTS, status_code=400)
        except InternalError:
            logger.exception("Signup failed for %s", username)
            return PlainTextResponse(MSG_SERVER_ERROR, status_code=500)
        return RedirectResponse(url=cfg.signup_redirect, status_code=302)

    @app.post("/enviar-email")
    async def contact_post(request: Request, relay: ContactRelay = Depends(get_contact_relay)):
        fields = await _read_fields(request)
        try:
            await relay.send(
                _text_field(fields, "nome"),
                _text_field(fields, "email"),
                _text_field(fields, "telefone"),
                _text_field(fields, "mensagem"),
            )
        except ValidationError:
            return JSONResponse({"success": False, "message": MSG_CONTACT_MISSING}, status_code=400)
        except InternalError:
            logger.exception("Contact message failed")
            return JSONResponse({"success": False, "message": MSG_CONTACT_FAILED}, status_code=500)
        return JSONResponse({"success": True, "message": MSG_CONTACT_SENT})

    # Mounted last so the API routes above take precedence.
    if settings.static_dir is not None:
        if settings.static_dir.is_dir():
            app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="static")
        else:
            logger.warning("Static directory not found, not serving front-end: %s", settings.static_dir)

    return app
