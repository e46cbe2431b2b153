# carcheck/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./carcheck.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── DVLA Vehicle Enquiry Service ──────────────────────────────────────
    DVLA_API_KEY: Optional[str] = None
    DVLA_API_URL: str = "https://driver-vehicle-licensing.api.gov.uk/vehicle-enquiry/v1/vehicles"
    DVLA_TEST_API_URL: str = "https://uat.driver-vehicle-licensing.api.gov.uk/vehicle-enquiry/v1/vehicles"
    DVLA_USE_TEST: bool = False
    DVLA_TIMEOUT_SECONDS: float = 10.0
    DVLA_OFFLINE_DEMO: bool = False   # Serve the demo payload instead of calling DVLA

    # ── Demo data / tiers ─────────────────────────────────────────────────
    DEMO_VRM: str = "WA67YSB"
    DEFAULT_TIER: str = "silver"      # Fallback when no valid tier is stored
    TIER_STORAGE_KEY: str = "userTier"
    DUE_SOON_DAYS: int = 30

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    @property
    def DVLA_ENDPOINT(self) -> str:
        return self.DVLA_TEST_API_URL if self.DVLA_USE_TEST else self.DVLA_API_URL

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
