import json
import os

import pytest

from config import EmailSettings, SettingsProvider


def test_defaults_come_from_environment(tmp_path):
    provider = SettingsProvider(
        settings_file=str(tmp_path / "settings.json"),
        environ={"EMAIL_USER": "buyer@corp.co.kr", "EMAIL_PORT": "587", "EMAIL_USE_SSL": "false", "COMPANY_NAME": "ACME"},
    )

    settings = provider.settings
    assert settings.email.host == "smtp.naver.com"
    assert settings.email.port == 587
    assert settings.email.use_ssl is False
    assert settings.email.configured is False
    assert settings.company.name == "ACME"


@pytest.mark.parametrize("raw,expected", [("off", False), ("No", False), ("1", True), ("yes", True)])
def test_use_ssl_flag_from_environment(tmp_path, raw, expected):
    provider = SettingsProvider(settings_file=str(tmp_path / "settings.json"), environ={"EMAIL_USE_SSL": raw})
    assert provider.settings.email.use_ssl is expected


def test_invalid_environment_falls_back_to_defaults(tmp_path):
    provider = SettingsProvider(
        settings_file=str(tmp_path / "settings.json"),
        environ={"EMAIL_PORT": "abc", "COMPANY_NAME": "Env Co."},
    )

    assert provider.settings.email.port == 465
    assert provider.settings.company.name == "Inventory Management"


def test_overlay_file_wins_over_environment(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"email": {"host": "smtp.overlay.kr", "user": "po@corp.co.kr"}}), encoding="utf-8")

    provider = SettingsProvider(settings_file=str(settings_file), environ={"EMAIL_HOST": "smtp.env.kr", "EMAIL_PASS": "pw"})

    assert provider.settings.email.host == "smtp.overlay.kr"
    assert provider.settings.email.password == "pw"
    assert provider.settings.email.configured is True


def test_update_email_persists_without_touching_environment(tmp_path, monkeypatch):
    monkeypatch.delenv("EMAIL_USER", raising=False)
    settings_file = tmp_path / "settings.json"
    provider = SettingsProvider(settings_file=str(settings_file), environ={})

    provider.update_email(EmailSettings(host="smtp.corp.kr", port=587, user="po@corp.co.kr", password="pw", use_ssl=False))

    assert json.loads(settings_file.read_text(encoding="utf-8"))["email"]["host"] == "smtp.corp.kr"
    assert "EMAIL_USER" not in os.environ
    assert SettingsProvider(settings_file=str(settings_file), environ={}).settings.email.user == "po@corp.co.kr"


def test_update_email_keeps_password_when_omitted(tmp_path):
    provider = SettingsProvider(settings_file=str(tmp_path / "settings.json"), environ={"EMAIL_PASS": "original"})

    provider.update_email(EmailSettings(host="smtp.corp.kr", user="po@corp.co.kr"))

    assert provider.settings.email.password == "original"


def test_reload_picks_up_file_changes(tmp_path):
    settings_file = tmp_path / "settings.json"
    provider = SettingsProvider(settings_file=str(settings_file), environ={})
    assert provider.settings.company.name == "Inventory Management"

    settings_file.write_text(json.dumps({"company": {"name": "Reloaded Co."}}), encoding="utf-8")

    assert provider.reload().company.name == "Reloaded Co."


def test_invalid_overlay_falls_back_to_environment(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"email": {"port": 70000}}), encoding="utf-8")

    provider = SettingsProvider(settings_file=str(settings_file), environ={"EMAIL_PORT": "587"})

    assert provider.settings.email.port == 587


def test_unreadable_overlay_is_ignored(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{not json", encoding="utf-8")

    provider = SettingsProvider(settings_file=str(settings_file), environ={"COMPANY_NAME": "Env Co."})

    assert provider.settings.company.name == "Env Co."


def test_email_config_endpoints_mask_password(client, email_configured):
    resp = client.get("/api/email/config")

    assert resp.status_code == 200
    body = resp.json()
    assert body["password"] == "********"
    assert body["user"] == "buyer@test.local"
    assert body["configured"] is True


def test_update_email_config_with_masked_password(client, email_configured):
    resp = client.put("/api/email/config", json={
        "host": "smtp.gmail.com", "port": 587, "user": "po@corp.co.kr", "password": "********", "use_ssl": False,
    })

    assert resp.status_code == 200
    assert resp.json()["host"] == "smtp.gmail.com"
    assert email_configured.settings.email.password == "secret"
    assert email_configured.settings.email.use_ssl is False


def test_update_email_config_validates_port(client):
    resp = client.put("/api/email/config", json={"host": "smtp.corp.kr", "port": 0, "user": "po@corp.co.kr"})
    assert resp.status_code == 400


def test_send_test_email(client, email_configured, fake_smtp):
    resp = client.post("/api/email/test", json={"email": "me@corp.co.kr"})

    assert resp.status_code == 200
    assert len(fake_smtp.outbox) == 1
    assert fake_smtp.outbox[0]["recipients"] == ["me@corp.co.kr"]
    assert fake_smtp.outbox[0]["sender"] == "buyer@test.local"


def test_test_email_requires_configuration(client, fake_smtp):
    resp = client.post("/api/email/test", json={"email": "me@corp.co.kr"})

    assert resp.status_code == 400
    assert fake_smtp.outbox == []


def test_test_email_failure(client, email_configured, fake_smtp):
    fake_smtp.fail_login = True

    resp = client.post("/api/email/test", json={"email": "me@corp.co.kr"})

    assert resp.status_code == 500


def test_company_info(client):
    resp = client.get("/api/company")

    assert resp.status_code == 200
    assert resp.json()["name"] == "Test Electric Co."
    assert resp.json()["phone"] == "02-123-4567"
