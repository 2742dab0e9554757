"""Конфигурация приложения."""
from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
    app_env: str = "development"
    secret_key: str = "dev-secret-change-in-production"
    debug: bool = True

    database_url: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "exotel_whatsapp"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"

    redis_host: str = "localhost"
    redis_port: int = 6379

    credential_encryption_key: str = ""  # min 32 chars; falls back to secret_key

    admin_default_email: str = "admin@example.com"
    admin_default_password: str = "changeme"
    default_tenant_name: str = "Demo Tenant"

    jwt_secret: str = "your-jwt-secret-min-32-chars"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 720

    exotel_region: str = "api.exotel.com"
    exotel_timeout_seconds: float = 30.0
    exotel_webhook_secret: str | None = None

    rq_send_queue_name: str = "send-messages"
    send_max_retries: int = 3
    send_retry_intervals: list[int] = [10, 60, 300]
    send_job_timeout_seconds: int = 120

    onboarding_link_ttl_hours: int = 24
    onboarding_link_max_uses: int = 5


@lru_cache
def get_settings() -> Settings:
    return Settings()
