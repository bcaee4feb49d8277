from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Upstream API
    api_base_url: str = "https://api.controld.com"
    request_timeout_seconds: float = 30.0
    resource_timeout_seconds: float = 60.0

    # Credential policy
    api_key_prefix: str = "api."
    api_key_min_length: int = 20
    api_key_max_length: int = 100
    secret_key_name: str = "controld-api-key"

    # Toggle
    selected_profile_id: str = ""
    profile_disable_duration_seconds: int = 3600
    verify_after_toggle: bool = True
    retry_preset: str = "default"

    # Cache
    cache_default_ttl_seconds: float = 300.0
    profiles_cache_ttl_seconds: float = 300.0
    cache_sweep_interval_seconds: float = 300.0
    cache_max_entries: int = 50

    # Refresh
    refresh_interval_seconds: float = 60.0
    refresh_debounce_seconds: float = 0.5
    manual_refresh_interval_seconds: float = 5.0

    # Infra
    redis_url: str = "redis://redis:6379/0"
    database_url: str = "postgresql://app:app@db:5432/app"
    audit_enabled: bool = True
    notify_webhook_url: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
