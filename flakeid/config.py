"""Manages configuration variables.

This module provides:
- Config: a base class for pulling environment variables
- DevelopmentConfig: a dev config class for local runs
- ProductionConfig: a config class for production
- TestingConfig: a config class for unit tests, logs to console only
- config: a dict for getting configuration depending on environment
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _optional_int(name):
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


class Config:
    """Base class for pulling environment variables."""

    # None derives the worker ID from the host's IPv4 address
    WORKER_ID = _optional_int("WORKER_ID")

    EPOCH = int(os.getenv("EPOCH", "0"))

    MAX_BATCH = int(os.getenv("MAX_BATCH", "1024"))

    LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")
    LOG_REQUESTS = os.getenv("LOG_REQUESTS", "False").lower() == "true"


class DevelopmentConfig(Config):
    """Config class with DEBUG on."""

    DEBUG = True


class ProductionConfig(Config):
    """Config class with DEBUG off."""

    DEBUG = False


class TestingConfig(Config):
    """Config class for tests: a fixed worker and no log file."""

    DEBUG = False
    TESTING = True
    WORKER_ID = 123
    EPOCH = 0
    MAX_BATCH = 64
    LOG_FILE = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
