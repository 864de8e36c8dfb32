from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Environment
    environment: str = "development"  # "development" or "production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/devices.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    debug: bool = False

    # Race schedule (Jolpica / Ergast-compatible)
    schedule_api_base_url: str = "https://api.jolpi.ca/ergast/f1"
    season: str = "current"  # "current" follows the running season upstream
    schedule_api_timeout: float = 10.0
    display_timezone: str = "Europe/Lisbon"

    # Scheduler
    scheduler_timezone: str = "Europe/Lisbon"
    session_check_interval_minutes: int = 5
    heartbeat_interval_minutes: int = 2

    # Notifications
    firebase_service_account: str = ""  # JSON document or path to a JSON file
    notification_enabled: bool = True

    # CORS (comma-separated origins, empty means the companion web app only)
    cors_origins: str = ""

    # Admin
    admin_api_key: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def schedule_url(self) -> str:
        return f"{self.schedule_api_base_url.rstrip('/')}/{self.season}/next.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
