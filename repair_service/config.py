from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./repair_service.db"

    # Branding used in customer emails
    APP_NAME: str = "Infinite Tech repair"
    PUBLIC_SITE_URL: str = "https://techrepair.vercel.app"
    LOGO_URL: str = "https://techrepair.vercel.app/logo.png"

    # --- MAIL TRANSPORT ---
    # Sender credentials. Leave EMAIL_USER empty to disable outbound mail.
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 10.0

    # How long shutdown waits for in-flight notifications
    NOTIFY_SHUTDOWN_TIMEOUT_SECONDS: float = 10.0

    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
