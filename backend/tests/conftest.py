from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Configure a disposable database and log directory before the app is imported.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="inventory-test-logs-"))

from database import Base, get_db  # noqa: E402
import models  # noqa: E402,F401
from config import EmailSettings, SettingsProvider, get_settings_provider  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings_provider(tmp_path):
    return SettingsProvider(
        settings_file=str(tmp_path / "settings.json"),
        environ={
            "PDF_OUTPUT_DIR": str(tmp_path / "purchase_orders"),
            "COMPANY_NAME": "Test Electric Co.",
            "COMPANY_PHONE": "02-123-4567",
        },
    )


@pytest.fixture()
def email_configured(settings_provider):
    settings_provider.update_email(
        EmailSettings(host="smtp.test.local", port=465, user="buyer@test.local", password="secret", use_ssl=True)
    )
    return settings_provider


@pytest.fixture()
def client(engine, settings_provider):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings_provider] = lambda: settings_provider
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def category(client):
    resp = client.post("/api/categories", json={"name": "케이블 종류", "description": "각종 케이블 자재"})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def make_item(client, category):
    def _make_item(name="UTP Cable", current_quantity=0, minimum_quantity=0, **fields):
        payload = {
            "name": name,
            "category_id": fields.pop("category_id", category["id"]),
            "current_quantity": current_quantity,
            "minimum_quantity": minimum_quantity,
            **fields,
        }
        resp = client.post("/api/items", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make_item


class FakeSMTP:
    """Stands in for smtplib.SMTP / SMTP_SSL and records what would be sent."""

    outbox: list = []
    fail_login = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def starttls(self):
        pass

    def login(self, user, password):
        import smtplib

        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"authentication failed")

    def sendmail(self, sender, recipients, message):
        FakeSMTP.outbox.append({"sender": sender, "recipients": recipients, "message": message})

    def quit(self):
        pass


@pytest.fixture()
def fake_smtp(monkeypatch):
    import smtplib

    FakeSMTP.outbox = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP
