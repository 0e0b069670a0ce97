from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    redis_url: str = "redis://redis:6379/0"
    smtp_base_url: str = "http://smtp-mock:8025"
    email_sender: str | None = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: int = 3
    http_timeout_seconds: float = 10.0

    # Provider options
    callback_url: str | None = None
    verification_email_subject: str = "Confirm your email address"

    # Security / policies (scrypt cost: N = 2**hash_log_n)
    hash_log_n: int = 15
    hash_block_size: int = 8
    hash_parallelism: int = 1
    state_ttl_seconds: int = 900
    session_ttl_seconds: int = 86400

    # Worker
    outbox_poll_interval_ms: int = 500
    outbox_batch_size: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
