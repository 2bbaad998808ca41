#!/usr/bin/env python3
"""
Configuration access for the web application.
"""

import os
from functools import lru_cache

from core.config_loader import AppConfig, load_config


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads from the YAML file named by CONFIG_PATH (default config.yaml)
    and applies environment variable overrides. Result is cached.

    Returns:
        AppConfig: The application configuration.
    """
    return load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
