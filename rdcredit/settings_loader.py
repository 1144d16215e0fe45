"""
Settings Loader

Provides cached access to service settings for the API layer.
Values come from environment variables (optionally via a .env file) layered
over DEFAULT_SETTINGS. The calculation engine never reads these directly;
routes pass what it needs as arguments.
"""

import os
import logging
from functools import lru_cache
from typing import Any, Dict, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

load_dotenv()

# Default settings (conservative fallbacks)
DEFAULT_SETTINGS: Dict[str, Any] = {
    "environment": "development",
    "log_level": "INFO",
    "cors_origins": [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    "corporate_tax_rate": 0.21,
}


class EngineSettings(BaseModel):
    environment: str = DEFAULT_SETTINGS["environment"]
    log_level: str = DEFAULT_SETTINGS["log_level"]
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_SETTINGS["cors_origins"]))
    corporate_tax_rate: float = Field(default=DEFAULT_SETTINGS["corporate_tax_rate"], gt=0, lt=1)


def _env_corporate_tax_rate() -> float:
    raw = os.environ.get("RD_CORPORATE_TAX_RATE")
    default = DEFAULT_SETTINGS["corporate_tax_rate"]
    if not raw:
        return default
    try:
        rate = float(raw)
    except ValueError:
        logger.warning(f"Invalid RD_CORPORATE_TAX_RATE={raw!r}; using {default}")
        return default
    if 1 < rate <= 100:
        rate = rate / 100
    if not 0 < rate < 1:
        logger.warning(f"RD_CORPORATE_TAX_RATE={raw!r} out of range; using {default}")
        return default
    return rate


@lru_cache()
def get_engine_settings() -> EngineSettings:
    """
    Get service settings.

    Cached for the life of the process; call get_engine_settings.cache_clear()
    after changing the environment (tests do this).
    """
    origins = list(DEFAULT_SETTINGS["cors_origins"])
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        origins.extend([o.strip() for o in extra_origins.split(",") if o.strip()])

    settings = EngineSettings(
        environment=os.environ.get("ENVIRONMENT", DEFAULT_SETTINGS["environment"]),
        log_level=os.environ.get("LOG_LEVEL", DEFAULT_SETTINGS["log_level"]).upper(),
        cors_origins=origins,
        corporate_tax_rate=_env_corporate_tax_rate(),
    )
    logger.info(f"Settings loaded: environment={settings.environment}, corporate_tax_rate={settings.corporate_tax_rate}")
    return settings
