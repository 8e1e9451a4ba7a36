from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: Literal["dev", "prod", "test"] = "prod"
    DEBUG: bool = False

    # App
    APP_NAME: str = "otp-relay"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    # SendGrid (transactional email)
    SENDGRID_API_KEY: str | None = None
    SENDGRID_API_URL: str = "https://api.sendgrid.com/v3/mail/send"

    # Verified sender identity used by every email template
    SENDER_EMAIL: str = "security@hydrosentinel.app"
    SENDER_NAME: str = "HydroSentinel Security"

    # Dynamic template ids
    DELETE_OTP_TEMPLATE_ID: str = "d-89daca278628413eb5c18a0a48150add"  # account deletion
    RISK_OTP_TEMPLATE_ID: str = "d-a065eb55121b44b2aead329f6b3513df"    # risk acceptance

    # Supabase Auth (identity provider)
    SUPABASE_URL: str | None = None                 # e.g., https://<project>.supabase.co
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Outbound calls
    PROVIDER_TIMEOUT_SEC: float = 10.0
    REDACT_PROVIDER_ERRORS: bool = False  # relay provider error text verbatim unless set

    # CORS
    CORS_ALLOW_ORIGIN: str = "*"
    CORS_ALLOW_HEADERS: str = "authorization, x-client-info, apikey, content-type"

    # Logging / Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True
    REQUEST_ID_HEADER: str = "X-Request-ID"


def get_settings() -> Settings:
    # slightly faster singleton
    global _SETTINGS_SINGLETON
    try:
        return _SETTINGS_SINGLETON  # type: ignore[name-defined]
    except NameError:
        _SETTINGS_SINGLETON = Settings()  # type: ignore[assignment]
        return _SETTINGS_SINGLETON
