from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):

    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    AWS_PROFILE: Optional[str] = None
    AWS_REGION: str = "eu-central-1"
    NOTIFICATION_QUEUE_URL: Optional[str] = None
    PAYMENT_QUEUE_URL: Optional[str] = None
    DYNAMODB_TABLE_NAME: str = "PetLoversHub"
    SES_FROM_EMAIL: Optional[str] = None

    API_ROOT_PATH: str = "/Prod"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "https://petlovershub-d9085.web.app",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()
