import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Load .env file automatically
load_dotenv()

SANDBOX_BASE = "https://api-m.sandbox.paypal.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # PayPal
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""
    PAYPAL_WEBHOOK_ID: str = ""
    PAYPAL_BASE: str = SANDBOX_BASE  # Change to https://api-m.paypal.com for live
    PAYPAL_HTTP_TIMEOUT: Optional[float] = None
    PAYPAL_RETURN_URL: str = "https://example.com/success"
    PAYPAL_CANCEL_URL: str = "https://example.com/cancel"

    # App settings
    APP_NAME: str = "PayPal Relay"
    PORT: int = 3000
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "test", "production"] = "development"

    # Observability (Optional)
    OTEL_SERVICE_NAME: str = "paypal-relay"
    DISABLE_TRACING: bool = False

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    def __init__(self, **kwargs):
        # Check for DATABASE_URL before calling parent constructor
        if "DATABASE_URL" not in kwargs and not os.getenv("DATABASE_URL"):
            raise RuntimeError(
                "DATABASE_URL not set; create .env or export the variable"
            )
        super().__init__(**kwargs)

    @property
    def is_sandbox(self) -> bool:
        return self.PAYPAL_BASE == SANDBOX_BASE
