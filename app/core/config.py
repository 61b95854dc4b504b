import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "coupon-api")
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5001"))

    # Database components
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
    DB_NAME: str = os.getenv("DB_NAME", "coupon_service")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "5"))
    RUN_MIGRATIONS: bool = _env_flag("RUN_MIGRATIONS", "true")

    # Redis configuration
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_RETRY_COOLDOWN_SECONDS: int = int(os.getenv("REDIS_RETRY_COOLDOWN_SECONDS", "30"))

    # Rate limiting (fixed window per client IP)
    RATE_LIMIT_ENABLED: bool = _env_flag("RATE_LIMIT_ENABLED", "true")
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
    RATE_LIMIT_KEY_PREFIX: str = "rate_limit:"
    # Reverse proxies in front of the app; 0 keys clients by the socket peer
    TRUSTED_PROXY_HOPS: int = int(os.getenv("TRUSTED_PROXY_HOPS", "0"))

    # Mail relay
    MAIL_USER: str = os.getenv("MAIL_USER", "")
    MAIL_PASS: str = os.getenv("MAIL_PASS", "")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_TIMEOUT: int = int(os.getenv("SMTP_TIMEOUT", "30"))
    MAIL_FROM_NAME: str = os.getenv("MAIL_FROM_NAME", "Your Brand")

    # CORS
    DEFAULT_ALLOWED_ORIGINS: List[str] = [
        "https://jovial-snickerdoodle-7f8d91.netlify.app",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:4173",
    ]
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    # Coupon rules
    COUPON_PAGE_SIZE: int = 100
    COUPON_REDEMPTION_SHARE_PERCENT: float = 20
    COUPON_MAX_DISCOUNT: float = 500

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins(self) -> List[str]:
        extra = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return self.DEFAULT_ALLOWED_ORIGINS + [o for o in extra if o not in self.DEFAULT_ALLOWED_ORIGINS]

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def redis_url(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


# Global settings instance
settings = Settings()
