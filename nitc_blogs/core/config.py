"""
NITC Blogs — Configuration
All settings are read from environment variables (or .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "nitc-blogs"
    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # ── Session tokens (JWT) ─────────────────────────────────
    JWT_SECRET_KEY: str = "CHANGE_ME_IN_PRODUCTION"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24
    JWT_COOKIE_EXPIRE_DAYS: int = 1

    # ── One-time tokens ──────────────────────────────────────
    SIGNUP_TOKEN_TTL_MINUTES: int = 12 * 60
    PASSWORD_RESET_TOKEN_TTL_MINUTES: int = 10

    # ── Credentials ──────────────────────────────────────────
    BCRYPT_ROUNDS: int = 12
    EMAIL_DOMAIN: str = "nitc.ac.in"
    PASSWORD_MIN_LENGTH: int = 8

    # ── PostgreSQL ────────────────────────────────────────────
    DATABASE_URL: str = ""
    POSTGRES_HOST: str = "blogs-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "blogs_db"
    POSTGRES_USER: str = "blogs_user"
    POSTGRES_PASSWORD: str = "blogs_pass"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Email ─────────────────────────────────────────────────
    CLIENT_URL: str = "http://localhost:3000"
    EMAIL_FROM: str = "noreply@nitc.ac.in"
    EMAIL_FROM_NAME: str = "Blog App"
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 30.0

    # ── Redis ─────────────────────────────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Rate Limiting ─────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
