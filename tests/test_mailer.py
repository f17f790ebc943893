import asyncio

import aiosmtplib
import pytest

from techacademy.config import MailSettings
from techacademy.core.errors import MailError
from techacademy.infra import mailer
from techacademy.infra.mailer import MailMessage, SmtpMailTransport


@pytest.fixture()
def smtp_calls(monkeypatch):
    calls = []

    async def fake_send(message, **kwargs):
        calls.append((message, kwargs))

    monkeypatch.setattr(mailer.aiosmtplib, "send", fake_send)
    return calls


MESSAGE = MailMessage(
    sender="site@example.com",
    recipient="equipe@example.com",
    subject="Nova mensagem de Ana",
    html="<p>Oi</p>",
)


def deliver(settings, message=MESSAGE):
    asyncio.run(SmtpMailTransport(settings).send(message))


def test_send_uses_starttls_and_login(smtp_calls):
    settings = MailSettings(host="smtp.test", port=2525, timeout=5, username="site@example.com", password="pw")
    deliver(settings)

    msg, kwargs = smtp_calls[0]
    assert kwargs["hostname"] == "smtp.test"
    assert kwargs["port"] == 2525
    assert kwargs["timeout"] == 5
    assert kwargs["start_tls"] is True
    assert (kwargs["username"], kwargs["password"]) == ("site@example.com", "pw")
    assert msg["Subject"] == "Nova mensagem de Ana"
    assert msg["To"] == "equipe@example.com"
    assert msg.get_body(preferencelist=("html",)).get_content().strip() == "<p>Oi</p>"


def test_send_without_credentials_skips_login(smtp_calls):
    deliver(MailSettings(host="smtp.test", starttls=False, username="site@example.com"))
    _, kwargs = smtp_calls[0]
    assert kwargs["username"] is None
    assert kwargs["password"] is None
    assert kwargs["start_tls"] is False


def test_header_with_line_break_becomes_mail_error(smtp_calls):
    bad = MailMessage(
        sender="site@example.com",
        recipient="equipe@example.com",
        subject="Nova mensagem de Ana\nBcc: evil@example.com",
        html="<p>Oi</p>",
    )
    with pytest.raises(MailError):
        deliver(MailSettings(host="smtp.test"), bad)
    assert smtp_calls == []


def test_connection_errors_become_mail_error(monkeypatch):
    async def refuse(message, **kwargs):
        raise ConnectionRefusedError("no route")

    monkeypatch.setattr(mailer.aiosmtplib, "send", refuse)
    with pytest.raises(MailError):
        deliver(MailSettings(host="smtp.test"))


def test_auth_failure_becomes_mail_error(monkeypatch):
    async def bad_login(message, **kwargs):
        raise aiosmtplib.SMTPAuthenticationError(535, "bad credentials")

    monkeypatch.setattr(mailer.aiosmtplib, "send", bad_login)
    with pytest.raises(MailError):
        deliver(MailSettings(username="u", password="p"))
