# teamboard/config/settings.py
# Runtime configuration, read once from the environment (and .env if present)

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Width of the invitations.token column
INVITATION_TOKEN_MAX_LENGTH = 64


def _get_env(name: str, default: str = "") -> str:
    value = os.getenv(name, default)
    return value.strip() if isinstance(value, str) else value


def _get_bool(name: str, default: str) -> bool:
    return _get_env(name, default).lower() == "true"


class Settings:
    """Application settings"""

    # Database
    DATABASE_URL: str = _get_env("DATABASE_URL", "sqlite:///./teamboard.db")
    DB_SSLMODE: str = _get_env("DB_SSLMODE", "")

    # Authentication
    SECRET_KEY: str = _get_env("SECRET_KEY", "dev_secret_change_me")
    ALGORITHM: str = _get_env("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(_get_env("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    BCRYPT_ROUNDS: int = int(_get_env("BCRYPT_ROUNDS", "12"))

    # Links placed in outgoing emails
    APP_URL: str = _get_env("APP_URL", "http://localhost:3000")

    # Email delivery
    EMAIL_FROM: str = _get_env("EMAIL_FROM", "Project Management <onboarding@resend.dev>")
    RESEND_API_KEY: str = _get_env("RESEND_API_KEY", "")
    EMAIL_MAX_ATTEMPTS: int = int(_get_env("EMAIL_MAX_ATTEMPTS", "5"))
    EMAIL_RETRY_INTERVAL_MINUTES: int = int(_get_env("EMAIL_RETRY_INTERVAL_MINUTES", "5"))
    EMAIL_RETRY_GRACE_SECONDS: int = int(_get_env("EMAIL_RETRY_GRACE_SECONDS", "60"))
    EMAIL_CLAIM_TIMEOUT_SECONDS: int = int(_get_env("EMAIL_CLAIM_TIMEOUT_SECONDS", "300"))

    # Invitations
    INVITATION_TTL_HOURS: int = int(_get_env("INVITATION_TTL_HOURS", "24"))
    INVITATION_TOKEN_LENGTH: int = int(_get_env("INVITATION_TOKEN_LENGTH", "32"))

    # Background jobs
    SCHEDULER_ENABLED: bool = _get_bool("SCHEDULER_ENABLED", "true")

    # Server
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in _get_env("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]
    LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()
    HOST: str = _get_env("HOST", "0.0.0.0")
    PORT: int = int(_get_env("PORT", "8000"))
    RELOAD: bool = _get_bool("RELOAD", "true")

    def __init__(self):
        self.validate()

    def validate(self):
        """Reject values the schema cannot hold"""
        if not 1 <= self.INVITATION_TOKEN_LENGTH <= INVITATION_TOKEN_MAX_LENGTH:
            raise ValueError(
                f"INVITATION_TOKEN_LENGTH must be between 1 and {INVITATION_TOKEN_MAX_LENGTH}, "
                f"got {self.INVITATION_TOKEN_LENGTH}"
            )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
