# nextai/config.py
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

# ======================
# Database (override with environment variables)
# ======================
MYSQL_CONFIG = {
    "host": os.getenv("MYSQL_HOST", "127.0.0.1"),
    "user": os.getenv("MYSQL_USER", "nextai"),
    "password": os.getenv("MYSQL_PASSWORD", ""),
    "database": os.getenv("MYSQL_DB", "nextai"),
    "charset": "utf8mb4",
}


def _default_database_url() -> str:
    return (
        f"mysql+pymysql://{MYSQL_CONFIG['user']}:{MYSQL_CONFIG['password']}"
        f"@{MYSQL_CONFIG['host']}/{MYSQL_CONFIG['database']}?charset={MYSQL_CONFIG['charset']}"
    )


# ======================
# Application settings (pydantic-settings v2)
# ======================
class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    DATABASE_URL: str = _default_database_url()

    # Signed session token
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60
    TOKEN_COOKIE_NAME: str = "token"

    # Verification codes
    SIGNUP_CODE_TTL_MINUTES: int = 15
    RESET_CODE_TTL_MINUTES: int = 10
    EXPOSE_VERIFICATION_CODES: bool = True

    PASSWORD_MIN_LENGTH: int = 8
    USERNAME_MIN_LENGTH: int = 3

    # Plans / credits
    FREE_PLAN_NAME: str = "free"
    DEFAULT_FREE_TRIES: int = 50
    UNLIMITED_TRIES: int = 999999

    # Generative AI (Gemini REST API)
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    LLM_TIMEOUT: int = 60
    CHAT_CONTEXT_MESSAGES: int = 20

    # Mail (Gmail SMTP)
    MAIL_ENABLED: bool = True
    GMAIL_SENDER_EMAIL: str | None = None
    GMAIL_SENDER_PASSWORD: str | None = None
    SITE_URL: str = "http://localhost:3000"

    # Seed data
    SUPER_ADMIN_USERNAME: str = "superadmin"
    SUPER_ADMIN_EMAIL: str = "admin@next-ai.local"
    SUPER_ADMIN_PASSWORD: str = "change-me-now"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"


settings = Settings()

# Gmail SMTP credentials
GMAIL_SMTP_CONFIG = {
    "sender_email": settings.GMAIL_SENDER_EMAIL,
    "sender_password": settings.GMAIL_SENDER_PASSWORD,
}
