from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, EXCHANGE_RATE_PROVIDER, DEFAULT_DISPLAY_CURRENCY).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Tracker"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "expense_tracker.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Currencies
    base_currency: str = "USD"
    default_display_currency: str = "USD"

    # Exchange rates
    # Allowed: 'static' (built-in offline table), 'external-http' (live fetch)
    exchange_rate_provider: str = "static"
    exchange_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    http_timeout_seconds: float = 5.0
    http_retries: int = 2
    rates_cache_ttl_seconds: int = 3600  # 1 hour
    refresh_rates_on_startup: bool = False

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.data_dir.mkdir(parents=True, exist_ok=True)
        allowed = {"static", "external-http"}
        if self.exchange_rate_provider not in allowed:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {allowed}"
            )
        self.base_currency = self.base_currency.upper()
        self.default_display_currency = self.default_display_currency.upper()


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
