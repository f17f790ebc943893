# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Contact-form relay: persist the message, then forward it by mail."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from fastapi.concurrency import run_in_threadpool
from jinja2 import Environment, FileSystemLoader, select_autoescape

from techacademy.config import MailSettings
from techacademy.core.errors import InternalError, MailError, StoreError, ValidationError
from techacademy.infra.contact_store import ContactStore
from techacademy.infra.mailer import MailMessage

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "mail_templates"
NOTIFICATION_TEMPLATE = "contact_notification.html.j2"

_LINE_BREAKS = re.compile(r"[\r\n]+")


class MailTransport(Protocol):
    async def send(self, message: MailMessage) -> None: ...


def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def header_safe(value: str) -> str:
    """Collapse line breaks so user text cannot add mail headers."""
    return _LINE_BREAKS.sub(" ", value).strip()


class ContactRelay:
    def __init__(self, store: ContactStore, transport: MailTransport, mail_settings: MailSettings):
        self.store = store
        self.transport = transport
        self.mail_settings = mail_settings
        self._env = _template_env()

    def render(self, name: str, email: str, phone: Optional[str], message: str) -> MailMessage:
        html = self._env.get_template(NOTIFICATION_TEMPLATE).render(
            name=name, email=email, phone=phone, message=message
        )
        return MailMessage(
            sender=self.mail_settings.sender,
            recipient=self.mail_settings.to,
            subject=f"Nova mensagem de {header_safe(name)}",
            html=html,
        )

    async def send(
        self, name: Optional[str], email: Optional[str], phone: Optional[str], message: Optional[str]
    ) -> int:
        """Store the contact message and mail it. Returns the stored id.

        The row is written before sending; a mail failure leaves it stored
        and is reported as ``InternalError``.
        """
        if not name or not email or not message:
            raise ValidationError(ValidationError.MISSING_FIELD)

        try:
            contact_id = await run_in_threadpool(self.store.add, name, email, phone, message)
        except StoreError as exc:
            logger.error("Could not store contact message from %s: %s", email, exc)
            raise InternalError("could not store contact message") from exc

        try:
            await self.transport.send(self.render(name, email, phone, message))
        except MailError as exc:
            logger.error("Could not send contact message %s: %s", contact_id, exc)
            raise InternalError("could not send contact message") from exc

        return contact_id
