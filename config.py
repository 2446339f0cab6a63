"""
MacroPulse - Centralized Configuration

All environment variables, constants, and settings in one place.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # API Keys
    fred_api_key: Optional[str] = None

    # Upstream
    fred_base_url: str = "https://api.stlouisfed.org/fred"
    fred_timeout: float = 15.0

    # Cache settings
    macro_cache_ttl: int = 900         # 15 minutes

    # Metrics
    expected_inflation: float = 3.0

    # Runtime
    environment: str = "production"
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            fred_api_key=os.environ.get('FRED_API_KEY') or None,
            fred_base_url=os.environ.get('FRED_BASE_URL', cls.fred_base_url),
            fred_timeout=float(os.environ.get('FRED_TIMEOUT', cls.fred_timeout)),
            macro_cache_ttl=int(os.environ.get('MACRO_CACHE_TTL', cls.macro_cache_ttl)),
            expected_inflation=float(os.environ.get('EXPECTED_INFLATION', cls.expected_inflation)),
            environment=os.environ.get('ENVIRONMENT', cls.environment),
            log_level=os.environ.get('LOG_LEVEL', cls.log_level).upper(),
        )


# Global config instance
config = Config.from_env()
