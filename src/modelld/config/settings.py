"""Library defaults loaded from environment variables."""

from __future__ import annotations

import os


class Config:
    """Default configuration for patch transport and saving."""

    # Seconds before a PATCH request is abandoned
    PATCH_TIMEOUT = float(os.getenv("MODELLD_PATCH_TIMEOUT", "30"))

    # Attempts per resource for 429/5xx and network errors
    PATCH_MAX_RETRIES = int(os.getenv("MODELLD_PATCH_MAX_RETRIES", "3"))

    # Exponential backoff bounds, in seconds
    PATCH_INITIAL_BACKOFF = float(os.getenv("MODELLD_PATCH_BACKOFF", "1.0"))
    PATCH_MAX_BACKOFF = float(os.getenv("MODELLD_PATCH_MAX_BACKOFF", "30.0"))

    # Concurrent patch requests per save (0 = one per resource)
    SAVE_MAX_WORKERS = int(os.getenv("MODELLD_SAVE_MAX_WORKERS", "0"))


class TestConfig(Config):
    """Configuration overrides for testing."""

    __test__ = False

    PATCH_TIMEOUT = 1.0
    PATCH_MAX_RETRIES = 2
    PATCH_INITIAL_BACKOFF = 0.0
    PATCH_MAX_BACKOFF = 0.0
    SAVE_MAX_WORKERS = 2
