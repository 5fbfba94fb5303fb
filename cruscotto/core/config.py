"""
Configuration helpers for the dashboard.

Settings are read once from environment variables (data directory, Airtable
credentials, sync behaviour, logging level) so that routers/services do not
fetch os.environ directly.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
import os

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_DATA_DIR = REPO_ROOT / "data"
DEFAULT_AIRTABLE_URL = "https://api.airtable.com/v0"


class ConfigurationError(Exception):
    """Raised when a required setting is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    airtable_api_key: str
    airtable_base_id: str
    airtable_api_url: str
    airtable_page_size: int
    airtable_timeout: int
    sync_fail_fast: bool
    log_level: str
    today_override: date | None

    def require_airtable(self) -> None:
        missing = []
        if not self.airtable_api_key:
            missing.append("AIRTABLE_API_KEY")
        if not self.airtable_base_id:
            missing.append("AIRTABLE_BASE_ID")
        if missing:
            raise ConfigurationError(f"Variabili mancanti: {', '.join(missing)}")

    def today(self) -> date:
        return self.today_override or date.today()


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    def _date(value: str | None) -> date | None:
        if not value:
            return None
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None

    page_size = _int(os.getenv("AIRTABLE_PAGE_SIZE", "100"), 100)
    data_dir = (os.getenv("DATA_DIR") or "").strip()
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        airtable_api_key=(os.getenv("AIRTABLE_API_KEY") or "").strip(),
        airtable_base_id=(os.getenv("AIRTABLE_BASE_ID") or "").strip(),
        airtable_api_url=(os.getenv("AIRTABLE_API_URL") or DEFAULT_AIRTABLE_URL).rstrip("/"),
        # Airtable rejects pageSize above 100
        airtable_page_size=min(max(page_size, 1), 100),
        airtable_timeout=_int(os.getenv("AIRTABLE_TIMEOUT", "30"), 30),
        sync_fail_fast=_bool(os.getenv("SYNC_FAIL_FAST"), False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        today_override=_date(os.getenv("DASHBOARD_TODAY")),
    )
