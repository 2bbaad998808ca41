"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from core.config_loader import AppConfig
from database.database import Database
from database.store import EntityStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def database(tmp_path):
    """File-backed SQLite database with all tables created."""
    db = Database(f"sqlite:///{tmp_path / 'companion_test.db'}")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    return EntityStore(database)


@pytest.fixture
def app_config():
    """Default configuration with the response cache disabled."""
    config = AppConfig()
    config.cache.enabled = False
    return config
