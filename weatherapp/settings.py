from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables (prefixed with WEATHERAPP_)
    - .env file (if present)

    The server and the CLI views read the same settings object; each side
    only looks at the fields it needs.
    """
    model_config = SettingsConfigDict(env_file=".env", env_prefix="WEATHERAPP_", extra="ignore")

    # WeatherAPI.com key. Optional so the server boots without it;
    # /api/weather reports the missing key per request.
    weather_api_key: Optional[str] = None

    app_name: str = "Weather"

    # Saved-city store
    database_url: str = "sqlite:///weatherapp.sqlite3"

    # Upstream HTTP behaviour
    http_timeout_s: float = 10.0
    weather_cache_ttl_s: int = 600
    weather_cache_max_entries: int = 256

    # Client side (views / CLI)
    api_base_url: str = "http://127.0.0.1:8000"
    state_dir: str = ".weatherapp"
    default_city: str = "New York"

    # Where the client "is". Unset means geolocation is unsupported.
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    log_level: str = "INFO"
    log_format: str = "console"


settings = Settings()
