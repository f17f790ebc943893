import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from techacademy.app import create_app
from techacademy.auth.accounts import AccountService
from techacademy.auth.passwords import build_hasher
from techacademy.config import MailSettings, Settings
from techacademy.core.errors import MailError
from techacademy.infra.contact_store import ContactStore
from techacademy.infra.db import init_schema, make_engine, make_session_factory
from techacademy.infra.user_store import CredentialStore

ADMIN_TEST_PASSWORD = "admin-test-pw"

# Cheap argon2 parameters keep the suite fast.
FAST_TIME_COST = 1
FAST_MEMORY_COST = 1024


class RecordingTransport:
    """Mail transport double: keeps sent messages, optionally fails."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, message):
        if self.fail:
            raise MailError("smtp down")
        self.sent.append(message)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        db_path=tmp_path / "techacademy.db",
        admin_password=ADMIN_TEST_PASSWORD,
        hash_time_cost=FAST_TIME_COST,
        hash_memory_cost=FAST_MEMORY_COST,
        mail=MailSettings(username="site@example.com", password="x"),
    )


@pytest.fixture()
def sessions(settings: Settings):
    engine = make_engine(settings.db_path)
    init_schema(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def user_store(sessions) -> CredentialStore:
    return CredentialStore(sessions)


@pytest.fixture()
def contact_store(sessions) -> ContactStore:
    return ContactStore(sessions)


@pytest.fixture()
def accounts(user_store: CredentialStore) -> AccountService:
    return AccountService(user_store, hasher=build_hasher(FAST_TIME_COST, FAST_MEMORY_COST))


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def client(settings: Settings, transport: RecordingTransport):
    app = create_app(settings, transport=transport)
    with TestClient(app) as c:
        yield c
