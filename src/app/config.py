from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COMPANY_EMAIL = "lulyabdy@gmail.com"


class Settings(BaseSettings):
    """Central application configuration."""

    app_name: str = Field(default="StaffMa Demo Requests")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    port: int = Field(default=5001)

    # MongoDB
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI"),
    )
    mongo_database: str = Field(default="staffpesa")
    demo_requests_collection: str = Field(default="demorequests")
    mongo_timeout_ms: int = Field(default=5000)

    # Email
    mail_transport: Literal["smtp", "sendgrid"] = Field(default="smtp")
    smtp_host: str = Field(default="")
    smtp_port: int = Field(default=465)
    smtp_user: str = Field(default="")
    smtp_password: str = Field(default="")
    smtp_secure: bool = Field(default=True)
    smtp_starttls: bool = Field(default=False)
    smtp_timeout: float = Field(default=10.0)
    email_api_key: str = Field(default="")
    email_sender_email: str = Field(default="")

    # Notification content
    company_email: str = Field(default=DEFAULT_COMPANY_EMAIL)
    brand_name: str = Field(default="StaffMa")
    support_email: str = Field(default="info@staffma.com")

    allowed_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        validation_alias="ALLOWED_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def sender_address(self) -> str:
        return self.email_sender_email or self.smtp_user


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
