import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from zenbatu.app import create_app
from zenbatu.auth.accounts import AccountManager
from zenbatu.auth.session import InMemorySessionStore
from zenbatu.auth.users import InMemoryCredentialStore
from zenbatu.config import Settings
from zenbatu.infra.accounts_repo import SqlCredentialStore
from zenbatu.infra.database import Database
from zenbatu.infra.inventory_repo import SqlInventoryGateway
from zenbatu.services.inventory_service import InventoryService


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def accounts(credentials) -> AccountManager:
    return AccountManager(credentials, InMemorySessionStore())


@pytest.fixture()
def db(tmp_path: Path) -> Database:
    d = Database(tmp_path / "data" / "zenbatu.db")
    d.initialize()
    return d


@pytest.fixture()
def sqlite_accounts(db) -> AccountManager:
    """AccountManager over the sqlite store, with 'alice' and 'bob' registered."""
    m = AccountManager(SqlCredentialStore(db))
    run(m.sign_up("alice", "Secr3t!"))
    run(m.sign_up("bob", "Hunter2#"))
    return m


@pytest.fixture()
def inventory(db, sqlite_accounts) -> InventoryService:
    return InventoryService(SqlInventoryGateway(db))


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        db_path=tmp_path / "data" / "app.db",
        secret_key="test-secret-key",
        session_salt="zenbatu.session.test",
        cookie_name="zenbatu_session",
        cookie_secure=False,
        session_max_age=0,
        log_level="WARNING",
        log_file=None,
        host="127.0.0.1",
        port=8089,
        reload=False,
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
