import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from dotenv import load_dotenv

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:5174",
)


def _int_from_env(name: str, default: int) -> int:
    raw_value = os.getenv(name, str(default))
    try:
        return int(raw_value)
    except (TypeError, ValueError):
        return default


def _allowed_origins_from_env() -> List[str]:
    allowed_origins = list(DEFAULT_ALLOWED_ORIGINS)
    allowed_origins.append(os.getenv("FRONTEND_URL", "").strip())
    cors_extra = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if cors_extra:
        for origin in cors_extra.split(","):
            trimmed = origin.strip()
            if trimmed:
                allowed_origins.append(trimmed)
    return [origin for origin in allowed_origins if origin]


@dataclass
class Settings:
    """Process-wide configuration, read once at startup."""

    mongodb_uri: str = "mongodb://localhost:27017"
    database_name: str = "plantsDB"
    token_secret: str = "change-me-in-production"
    token_lifetime: timedelta = timedelta(days=365)
    token_cookie_name: str = "token"
    payment_secret_key: str = ""
    payment_currency: str = "usd"
    port: int = 3000
    environment: str = "development"
    allowed_origins: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    trusted_proxy_hops: int = 1
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        return cls(
            mongodb_uri=os.getenv("MONGODB_URI", cls.mongodb_uri),
            database_name=os.getenv("DATABASE_NAME", cls.database_name)
            or cls.database_name,
            token_secret=os.getenv("ACCESS_TOKEN_SECRET", cls.token_secret),
            token_lifetime=timedelta(
                days=_int_from_env("ACCESS_TOKEN_EXPIRES_DAYS", 365)
            ),
            payment_secret_key=(os.getenv("PAYMENT_SECRET_KEY") or "").strip(),
            payment_currency=(os.getenv("PAYMENT_CURRENCY") or "usd").strip().lower(),
            port=_int_from_env("PORT", cls.port),
            environment=(os.getenv("APP_ENV") or "development").strip().lower(),
            allowed_origins=_allowed_origins_from_env(),
            trusted_proxy_hops=max(0, _int_from_env("TRUSTED_PROXY_HOPS", 1)),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        )
