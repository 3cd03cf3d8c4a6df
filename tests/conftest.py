"""
Backoffice Test Configuration

Shared fixtures for all tests.
"""
from datetime import date
from pathlib import Path

import pytest
import yaml

from common.auth import Session
from common.config import DEFAULT_FIXTURE
from common.models.base import UserRole
from common.storage import FixtureDataSource


# Demo fixture dates sit in early April 2025
TODAY = date(2025, 4, 3)


# =============================================================================
# FIXTURES: Sample Data
# =============================================================================

@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def demo_data() -> dict:
    """Raw rows of the bundled demo fixture."""
    with open(Path(DEFAULT_FIXTURE)) as f:
        return yaml.safe_load(f)


@pytest.fixture
def source(demo_data) -> FixtureDataSource:
    """In-memory data source seeded with the demo fixture."""
    return FixtureDataSource(demo_data)


@pytest.fixture
def empty_source() -> FixtureDataSource:
    return FixtureDataSource()


# =============================================================================
# FIXTURES: Sessions
# =============================================================================

@pytest.fixture
def admin_session() -> Session:
    return Session(user_id="u-admin", name="Ana Admin", email="ana@backoffice.example", role=UserRole.MASTER_ADMIN)


@pytest.fixture
def bruno_session() -> Session:
    return Session(
        user_id="u-bruno",
        name="Bruno Lima",
        email="bruno@backoffice.example",
        role=UserRole.CONSULTANT,
        consultant_id="c-bruno",
    )


@pytest.fixture
def viewer_session() -> Session:
    return Session(user_id="u-viewer", name="Vera Viewer", email="vera@backoffice.example", role=UserRole.VIEW)
