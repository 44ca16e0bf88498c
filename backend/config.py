"""
Runtime settings for outbound email, company details and file handling.

Values start from the environment (``.env`` is loaded with python-dotenv) and
an optional JSON file (``settings.json`` by default) is laid over them. The
overlay is what the settings endpoints write to; the process environment is
never modified at runtime. Call ``SettingsProvider.reload()`` to pick up
changes made to the file outside the API.
"""

import json
import logging
import os
import threading
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

load_dotenv()

logger = logging.getLogger("config")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_SETTINGS_FILE = os.path.join(BASE_DIR, "settings.json")
DEFAULT_PDF_OUTPUT_DIR = os.path.join(BASE_DIR, "uploads", "purchase_orders")
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class EmailSettings(BaseModel):
    host: str = "smtp.naver.com"
    port: int = Field(465, gt=0, le=65535)
    user: Optional[str] = None
    password: Optional[str] = None
    use_ssl: bool = True
    sender_name: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class CompanyInfo(BaseModel):
    name: str = "Inventory Management"
    representative: Optional[str] = None
    business_number: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[str] = None


class Settings(BaseModel):
    email: EmailSettings = EmailSettings()
    company: CompanyInfo = CompanyInfo()
    pdf_output_dir: str = DEFAULT_PDF_OUTPUT_DIR
    pdf_font_path: Optional[str] = None
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0)


def _drop_empty(values: dict) -> dict:
    return {key: value for key, value in values.items() if value not in (None, "")}


class SettingsProvider:
    """Holds the current ``Settings`` and knows how to rebuild them."""

    def __init__(self, settings_file: Optional[str] = None, environ=None):
        self._environ = os.environ if environ is None else environ
        self.settings_file = settings_file or self._environ.get("SETTINGS_FILE", DEFAULT_SETTINGS_FILE)
        self._lock = threading.Lock()
        self._settings = self._load()

    @property
    def settings(self) -> Settings:
        return self._settings

    def _from_env(self) -> dict:
        env = self._environ
        return {
            "email": _drop_empty({
                "host": env.get("EMAIL_HOST"),
                "port": env.get("EMAIL_PORT"),
                "user": env.get("EMAIL_USER"),
                "password": env.get("EMAIL_PASS"),
                "use_ssl": env.get("EMAIL_USE_SSL"),
                "sender_name": env.get("EMAIL_SENDER_NAME"),
            }),
            "company": _drop_empty({
                "name": env.get("COMPANY_NAME"),
                "representative": env.get("COMPANY_REPRESENTATIVE"),
                "business_number": env.get("COMPANY_BUSINESS_NUMBER"),
                "address": env.get("COMPANY_ADDRESS"),
                "phone": env.get("COMPANY_PHONE"),
                "fax": env.get("COMPANY_FAX"),
                "email": env.get("COMPANY_EMAIL"),
            }),
            **_drop_empty({
                "pdf_output_dir": env.get("PDF_OUTPUT_DIR"),
                "pdf_font_path": env.get("PDF_FONT_PATH"),
                "max_upload_bytes": env.get("MAX_UPLOAD_BYTES"),
            }),
        }

    def _read_overlay(self) -> dict:
        if not os.path.exists(self.settings_file):
            return {}
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                overlay = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.settings_file}: {e}")
            return {}
        if not isinstance(overlay, dict):
            logger.warning(f"Ignoring settings file {self.settings_file}: top level is not an object")
            return {}
        return overlay

    def _load(self) -> Settings:
        merged = self._from_env()
        overlay = self._read_overlay()
        for section in ("email", "company"):
            if isinstance(overlay.get(section), dict):
                merged[section] = {**merged[section], **_drop_empty(overlay[section])}
        try:
            return Settings.model_validate(merged)
        except ValidationError as e:
            logger.error(f"Invalid settings overlay in {self.settings_file}, using environment only: {e}")
        try:
            return Settings.model_validate(self._from_env())
        except ValidationError as e:
            logger.error(f"Invalid settings in the environment, using defaults: {e}")
            return Settings()

    def reload(self) -> Settings:
        with self._lock:
            self._settings = self._load()
        logger.info("Settings reloaded")
        return self._settings

    def update_email(self, email: EmailSettings) -> Settings:
        """Persist new SMTP settings to the overlay file and reload.

        A missing password keeps the one currently in effect, so the host or
        port can be changed without re-entering credentials.
        """
        data = email.model_dump()
        if not data.get("password"):
            data["password"] = self._settings.email.password
        with self._lock:
            overlay = self._read_overlay()
            overlay["email"] = data
            directory = os.path.dirname(os.path.abspath(self.settings_file))
            os.makedirs(directory, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(overlay, f, ensure_ascii=False, indent=2)
        logger.info(f"Email settings saved to {self.settings_file}")
        return self.reload()


_provider: Optional[SettingsProvider] = None


def get_settings_provider() -> SettingsProvider:
    """FastAPI dependency returning the process-wide provider."""
    global _provider
    if _provider is None:
        _provider = SettingsProvider()
    return _provider
