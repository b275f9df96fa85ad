import os
import logging
from dotenv import load_dotenv
from fastapi import Request
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings
from typing import ClassVar, List

# Load environment variables from .env file
load_dotenv(".env", override=False)
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Class to store all the settings of the pickup application."""

    # ------------------------------
    # Database
    # ------------------------------
    DATABASE_URL: str = Field(default="postgresql+asyncpg://localhost/pugdb", env="DATABASE_URL")
    TEST_DATABASE_URL: str = Field(default="sqlite+aiosqlite:///:memory:", env="TEST_DATABASE_URL")
    SQL_ECHO: bool = Field(False, env="SQL_ECHO")

    # ------------------------------
    # Auth
    # ------------------------------
    SECRET_KEY: str = Field(default="blackMamba24", env="SECRET_KEY")
    ALGORITHM: str = Field(default="HS256", env="ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, env="ACCESS_TOKEN_EXPIRE")
    AUTH_RATE_LIMIT: str = Field(default="30/minute", env="AUTH_RATE_LIMIT")

    # ------------------------------
    # Environment
    # ------------------------------
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    TESTING_MODE: bool = Field(False, env="TESTING_MODE")
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")
    CORS_ORIGINS: str = Field(default="http://localhost:3000", env="CORS_ORIGINS")

    # ------------------------------
    # Database models
    # ------------------------------
    DB_MODELS: ClassVar[List[str]] = [
        "app.models.user",
        "app.models.game",
        "app.models.follow",
        "app.models.invite",
        "app.models.messaging",
        "app.models.activity",
    ]

    # ------------------------------
    # Computed Fields
    # ------------------------------
    @computed_field
    @property
    def BCRYPT_ROUNDS(self) -> int:
        """Cheap hashing while testing, production strength otherwise."""
        return 4 if self.TESTING_MODE else 12

    @computed_field
    @property
    def ACTIVE_DATABASE_URL(self) -> str:
        return self.TEST_DATABASE_URL if self.TESTING_MODE else self.DATABASE_URL

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        """Configuration for the settings class."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings built at startup."""
    return request.app.state.settings
