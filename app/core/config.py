from typing import List

from pydantic_settings import BaseSettings

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    DATABASE_URL: str

    # Local Postgres usually runs without TLS; managed Atlas-style hosts need it
    DB_SSL: bool = True
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    PORT: int = 5000
    ENV: str = "dev"  # "dev" or "prod"

    # Comma separated, e.g. "https://app.example.com,http://localhost:5173"
    CORS_ORIGINS: str | None = None

    UPLOADS_DIR: str = "uploads"

    # --- CLEANUP SCHEDULER ---
    CLEANUP_ENABLED: bool = True
    CLEANUP_INTERVAL_MINUTES: int = 60
    NOTIFICATION_RETENTION_DAYS: int = 30
    LOG_RETENTION_DAYS: int = 90
    JOB_SECRET: str | None = None

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"

    @property
    def allowed_origins(self) -> List[str]:
        if not self.CORS_ORIGINS:
            return list(DEFAULT_CORS_ORIGINS)
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
