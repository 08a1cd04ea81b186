"""Application configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "ReceiptDesk API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours
    ENCRYPTION_KEY: str  # Secret for the field cipher; any string, derived to a Fernet key

    # Database
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # Public links embedded in QR codes and emails
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Freelancer identity used as the FROM side of new receipts
    # WHY: Required so that no hard-coded identity ever reaches a document
    FREELANCER_NAME: str
    FREELANCER_EMAIL: str
    FREELANCER_PHONE: str
    FREELANCER_ADDRESS: str
    FREELANCER_WEBSITE: Optional[str] = None

    # QR codes
    QR_TIMEOUT_SECONDS: float = 5.0
    QR_STORAGE_ENABLED: bool = False

    # S3 / AWS (QR and PDF storage)
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "receiptdesk-documents"
    S3_ENDPOINT_URL: Optional[str] = None

    # Email
    EMAIL_PROVIDER: str = "mock"  # "resend" or "mock"
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM_ADDRESS: str = "noreply@receiptdesk.local"
    EMAIL_FROM_NAME: str = "ReceiptDesk"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # Scheduler
    SCHEDULER_ENABLED: bool = False
    OVERDUE_SWEEP_INTERVAL_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def freelancer_info(self) -> dict:
        """
        Configured freelancer contact block.

        WHY: Used both to seed the stored freelancer_info config entry and as
        the fallback identity when a legacy receipt envelope lacks one.
        """
        return {
            "name": self.FREELANCER_NAME,
            "email": self.FREELANCER_EMAIL,
            "phone": self.FREELANCER_PHONE,
            "address": self.FREELANCER_ADDRESS,
            "website": self.FREELANCER_WEBSITE or "",
        }

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        if self.DATABASE_URL.startswith("postgresql+asyncpg://"):
            return self.DATABASE_URL
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()
