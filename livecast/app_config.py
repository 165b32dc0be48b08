from pydantic import BaseModel

from livecast.shared.config import config


class AppEnvironConfig(BaseModel):
    DEBUG: bool = config.get_bool("DEBUG", False)

    API_HOST: str = config.get("API_HOST", "0.0.0.0")
    API_PORT: int = config.get_int("API_PORT", 8000)
    API_WORKERS: int = config.get_int("API_WORKERS", 1)
    API_CORS_ORIGINS: list[str] = config.get_list("API_CORS_ORIGINS", "*")

    # Single-tenant deployments attribute every request to this principal
    DEFAULT_OWNER_ID: str = config.get("DEFAULT_OWNER_ID", "public")

    # Delivery / ingest endpoints of the media server
    DELIVERY_BASE_URL: str = config.get("DELIVERY_BASE_URL", "http://localhost:8000").rstrip("/")
    INGEST_RTMP_URL: str = config.get("INGEST_RTMP_URL", "rtmp://localhost:1935/live").rstrip("/")
    INGEST_WEBHOOK_SECRET: str | None = config.get("INGEST_WEBHOOK_SECRET")
    INGEST_WEBHOOK_TOLERANCE_SECONDS: int = config.get_int("INGEST_WEBHOOK_TOLERANCE_SECONDS", 300)

    # Background jobs
    SWEEP_INTERVAL_SECONDS: float = config.get_float("SWEEP_INTERVAL_SECONDS", 3600)
    STALLED_CHECK_INTERVAL_SECONDS: float = config.get_float("STALLED_CHECK_INTERVAL_SECONDS", 30)
    # processing sessions without a first segment after this long move to error
    INGEST_GRACE_SECONDS: float = config.get_float("INGEST_GRACE_SECONDS", 120)

    # Playback reconnect policy
    PLAYBACK_MAX_RETRIES: int = config.get_int("PLAYBACK_MAX_RETRIES", 5)
    PLAYBACK_RETRY_COOLDOWN_SECONDS: float = config.get_float("PLAYBACK_RETRY_COOLDOWN_SECONDS", 5)
    PLAYBACK_RETRY_DELAY_SECONDS: float = config.get_float("PLAYBACK_RETRY_DELAY_SECONDS", 3)


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
