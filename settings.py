"""
MyPocket Insights Configuration Settings

Django-style settings module that consolidates all configuration.
Loads from a single .env file at the project root.

Usage:
    from settings import settings
    print(settings.DATABASE_PATH)
"""

import os
from pathlib import Path

import pytz
from dotenv import load_dotenv

# ==============================================================================
# Base Configuration
# ==============================================================================

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent

# Load environment variables from .env
ENV_FILE = BASE_DIR / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


# ==============================================================================
# Core System Settings
# ==============================================================================

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# ==============================================================================
# Paths Configuration
# ==============================================================================

PATHS = {
    "root": Path(os.getenv("PATHS_ROOT", BASE_DIR)),
    "data": Path(os.getenv("PATHS_DATA", BASE_DIR / "data")),
    "config": Path(os.getenv("PATHS_CONFIG", BASE_DIR / "config")),
}


# ==============================================================================
# User Configuration
# ==============================================================================

USER = {
    "id": os.getenv("MYPOCKET_USER_ID", ""),
    "timezone": os.getenv("USER_TIMEZONE", "Asia/Kolkata"),
}

# Timezone object, used for the "current month" budget window
TIMEZONE = pytz.timezone(USER["timezone"])

# Symbol used in generated insight messages (amounts are in the base currency)
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")


# ==============================================================================
# Storage Configuration
# ==============================================================================

DATABASE_PATH = Path(os.getenv("MYPOCKET_DB_PATH", PATHS["data"] / "mypocket.db"))

# sqlite3 busy timeout for the insight batch write (seconds)
DB_TIMEOUT_SECONDS = float(os.getenv("MYPOCKET_DB_TIMEOUT", "5.0"))


# ==============================================================================
# ARVS Insight Engine
# ==============================================================================

ARVS_CONFIG_FILE = Path(os.getenv("ARVS_CONFIG_FILE", PATHS["config"] / "arvs.json"))


# ==============================================================================
# Settings Class for Easy Access
# ==============================================================================


class Settings:
    """
    Settings accessor class similar to Django's settings.
    Provides attribute-style access to all configuration values.
    """

    def __init__(self):
        # Copy all module-level variables to this instance
        current_module = __import__(__name__)
        for key in dir(current_module):
            if key.isupper() or key in ["TIMEZONE", "BASE_DIR"]:
                setattr(self, key, getattr(current_module, key))

    def __repr__(self):
        return f"<Settings module>"


# Create singleton settings instance
settings = Settings()
