"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self):
        self.data_base_url: str = os.getenv(
            "DATA_BASE_URL",
            "https://raw.githubusercontent.com/CJohnson0228/georgia-2026-election-data/main",
        ).rstrip("/")
        self.fec_api_key: str = os.getenv("FEC_API_KEY", "DEMO_KEY")
        self.rss_proxy_url: str = os.getenv(
            "RSS_PROXY_URL", "http://127.0.0.1:8000/api/fetch-rss"
        )
        self.database_url: str = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./election_cache.db"
        )
        self.home_state: str = os.getenv("HOME_STATE", "GA")
        self.election_cycle: int = int(os.getenv("ELECTION_CYCLE", "2026"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def fec_api_base_url(self) -> str:
        return "https://api.open.fec.gov/v1"

    def data_url(self, path: str) -> str:
        """Full URL for a dataset document, e.g. ``races/index.json``."""
        return f"{self.data_base_url}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
