import asyncio

import pytest

from techacademy.config import MailSettings
from techacademy.core.errors import InternalError, StoreError, StoreErrorKind, ValidationError
from techacademy.services.contact_service import ContactRelay, header_safe


@pytest.fixture()
def relay(contact_store, transport, settings):
    return ContactRelay(contact_store, transport, settings.mail)


def send(relay, *fields):
    return asyncio.run(relay.send(*fields))


def test_send_stores_then_mails(relay, contact_store, transport):
    send(relay, "Ana", "ana@example.com", "11 9999-0000", "Quero saber mais")
    assert contact_store.count() == 1
    assert len(transport.sent) == 1
    msg = transport.sent[0]
    assert msg.subject == "Nova mensagem de Ana"
    assert msg.sender == "site@example.com"
    assert msg.recipient == "site@example.com"
    assert "Quero saber mais" in msg.html
    assert "11 9999-0000" in msg.html


def test_missing_phone_renders_placeholder(relay, transport):
    send(relay, "Ana", "ana@example.com", None, "Oi")
    assert "Não informado" in transport.sent[0].html


def test_html_is_escaped(relay, transport):
    send(relay, "<b>Ana</b>", "ana@example.com", "", "<script>alert(1)</script>")
    html = transport.sent[0].html
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_line_breaks_in_name_stay_out_of_subject(relay, transport):
    send(relay, "Ana\r\nBcc: evil@example.com", "ana@example.com", None, "Oi")
    subject = transport.sent[0].subject
    assert "\n" not in subject and "\r" not in subject
    assert subject == "Nova mensagem de Ana Bcc: evil@example.com"


def test_header_safe():
    assert header_safe("Ana\nMaria\r\n") == "Ana Maria"
    assert header_safe("Ana") == "Ana"


@pytest.mark.parametrize(
    "fields",
    [
        ("", "ana@example.com", None, "Oi"),
        ("Ana", None, None, "Oi"),
        ("Ana", "ana@example.com", "123", ""),
    ],
)
def test_missing_required_field(relay, contact_store, transport, fields):
    with pytest.raises(ValidationError):
        send(relay, *fields)
    assert contact_store.count() == 0
    assert transport.sent == []


def test_mail_failure_keeps_row(relay, contact_store, transport):
    transport.fail = True
    with pytest.raises(InternalError):
        send(relay, "Ana", "ana@example.com", None, "Oi")
    assert contact_store.count() == 1


def test_store_failure_sends_nothing(relay, transport, monkeypatch):
    def boom(*args):
        raise StoreError(StoreErrorKind.UNAVAILABLE, "readonly database")

    monkeypatch.setattr(relay.store, "add", boom)
    with pytest.raises(InternalError):
        send(relay, "Ana", "ana@example.com", None, "Oi")
    assert transport.sent == []


def test_explicit_recipient(contact_store, transport):
    relay = ContactRelay(
        contact_store,
        transport,
        MailSettings(username="site@example.com", recipient="equipe@example.com"),
    )
    send(relay, "Ana", "ana@example.com", None, "Oi")
    assert transport.sent[0].recipient == "equipe@example.com"
