from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(default="development", validation_alias="APP_ENV")

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )

    cors_allow_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ALLOW_ORIGINS")

    rq_queue_default: str = Field(default="qcm", validation_alias="RQ_QUEUE_DEFAULT")

    # Per-attempt exclusivity: a transition holds locks:attempt:<id> at most this long.
    attempt_lock_ttl_seconds: int = Field(default=10, validation_alias="ATTEMPT_LOCK_TTL_SECONDS")

    expiry_sweep_interval_minutes: int = Field(default=5, validation_alias="EXPIRY_SWEEP_INTERVAL_MINUTES")
    expiry_sweep_batch_size: int = Field(default=500, validation_alias="EXPIRY_SWEEP_BATCH_SIZE")

    cron_secret: str = Field(default="", validation_alias="CRON_SECRET")
    enable_inprocess_scheduler: bool = Field(default=False, validation_alias="ENABLE_INPROCESS_SCHEDULER")


settings = Settings()


def _is_prod() -> bool:
    return (settings.app_env or "").strip().lower() in {"prod", "production"}


if _is_prod():
    if settings.redis_url.strip() == "redis://localhost:6379/0":
        raise RuntimeError("REDIS_URL must be set in production")
    if not (settings.cron_secret or "").strip():
        raise RuntimeError("CRON_SECRET must be set in production")
