from fastapi import APIRouter, Depends, HTTPException
import logging
from html import escape

from config import CompanyInfo, EmailSettings, SettingsProvider, get_settings_provider
from schemas.settings import EmailConfig, EmailConfigUpdate, EmailTestRequest, MessageResponse
from utils.email_utils import EmailClient

router = APIRouter(tags=["Settings"])
logger = logging.getLogger("settings")

PASSWORD_MASK = "********"


def _email_config_out(email: EmailSettings) -> dict:
    return {
        "host": email.host,
        "port": email.port,
        "user": email.user,
        "password": PASSWORD_MASK if email.password else None,
        "use_ssl": email.use_ssl,
        "sender_name": email.sender_name,
        "configured": email.configured,
    }


@router.get("/email/config", response_model=EmailConfig)
def read_email_config(settings_provider: SettingsProvider = Depends(get_settings_provider)):
    return _email_config_out(settings_provider.settings.email)


@router.put("/email/config", response_model=EmailConfig)
def update_email_config(
    config: EmailConfigUpdate,
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """Save SMTP settings to the settings file; they apply immediately."""
    password = config.password if config.password and config.password != PASSWORD_MASK else None
    settings = settings_provider.update_email(EmailSettings(**config.model_dump(exclude={"password"}), password=password))
    logger.info(f"Email settings updated: {settings.email.user}@{settings.email.host}:{settings.email.port}")
    return _email_config_out(settings.email)


@router.post("/email/test", response_model=MessageResponse)
def send_test_email(
    request: EmailTestRequest,
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    settings = settings_provider.settings
    if not settings.email.configured:
        raise HTTPException(status_code=400, detail="Email settings are not configured")

    client = EmailClient.from_settings(settings.email)
    sent = client.send_email(
        [request.email],
        f"[{settings.company.name}] Test email",
        "This is a test message. Your email settings are working.",
        f"<p>This is a test message from <b>{escape(settings.company.name)}</b>.</p><p>Your email settings are working.</p>",
    )
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send test email")
    return {"message": f"Test email sent to {request.email}"}


@router.get("/company", response_model=CompanyInfo)
def read_company_info(settings_provider: SettingsProvider = Depends(get_settings_provider)):
    return settings_provider.settings.company
