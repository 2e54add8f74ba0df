from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Telus Umrah API"
    # Comma-separated origins for CORS (e.g. https://telusumrah.com,https://admin.telusumrah.com). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    # Outbound mail. Credentials only ever come from the environment.
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "support@telusumrah.local"
    SMTP_FROM_NAME: str = "Telus Umrah"
    SMTP_STARTTLS: bool = False
    SMTP_TIMEOUT_SECONDS: int = 10

    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""

    API_PUBLIC_URL: str = "http://localhost:8000"  # base of the invoice download links sent to customers

    # Invoices
    INVOICE_AUTO_SEND: bool = True  # email the invoice right after a hotel/package booking is created
    INVOICE_LOGO_PATH: str = "./assets/telus-umrah-logo.png"

    # Printed on invoices, request forms and emails
    COMPANY_NAME: str = "Telus Umrah"
    COMPANY_ADDRESS_LINE1: str = "UG-14, Lucky center, 7-8 Jail Road"
    COMPANY_ADDRESS_LINE2: str = "Lahore, 54000 Pakistan"
    COMPANY_PHONE: str = "080033333"
    COMPANY_EMAIL: str = "support@telusumrah.com"


settings = Settings()
