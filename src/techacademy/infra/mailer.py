# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Outbound mail over SMTP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib

from techacademy.config import MailSettings
from techacademy.core.errors import MailError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    sender: str
    recipient: str
    subject: str
    html: str


class SmtpMailTransport:
    """Sends one message per connection; every call is bounded by ``timeout``."""

    def __init__(self, settings: MailSettings):
        self.settings = settings

    def _build(self, message: MailMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = message.sender
        msg["To"] = message.recipient
        msg["Subject"] = message.subject
        msg.set_content("Esta mensagem requer um cliente de email com suporte a HTML.")
        msg.add_alternative(message.html, subtype="html")
        return msg

    async def send(self, message: MailMessage) -> None:
        s = self.settings
        try:
            msg = self._build(message)
        except ValueError as exc:
            # Header values with CR/LF are refused by the email package.
            raise MailError(f"invalid mail header: {exc}") from exc
        with_login = bool(s.username and s.password)
        try:
            await aiosmtplib.send(
                msg,
                hostname=s.host,
                port=s.port,
                username=s.username if with_login else None,
                password=s.password if with_login else None,
                start_tls=s.starttls,
                timeout=s.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailError(f"SMTP delivery to {s.host}:{s.port} failed: {exc}") from exc
        logger.info("Mail sent to %s: %s", message.recipient, message.subject)
