"""
Shared pytest fixtures for all tests.
"""

import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.filters.filter_config import FilterConfig
from src.filters.pipeline import FilterPipeline
from src.filters.sink import RecordingSink


# =============================================================================
# Preference Fixtures
# =============================================================================

@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the preference store at a temporary config directory."""
    home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


# =============================================================================
# Pipeline Fixtures
# =============================================================================

@pytest.fixture
def pipeline():
    """Pipeline with every optional stage off."""
    return FilterPipeline(FilterConfig())


@pytest.fixture
def grouping_pipeline():
    """Pipeline grouping both attributes and resistances."""
    return FilterPipeline(FilterConfig(group_attributes=True, group_resistances=True))


@pytest.fixture
def recording_sink():
    """Sink that keeps delivered messages in memory."""
    return RecordingSink()


@pytest.fixture
def failing_sink():
    """Sink whose every delivery fails."""
    return RecordingSink(fail_with="Tab closed")


# =============================================================================
# Item Text Fixtures
# =============================================================================

@pytest.fixture
def dagger_text():
    from tests.fixtures.items import DAGGER_TEXT
    return DAGGER_TEXT


@pytest.fixture
def ring_text():
    from tests.fixtures.items import RING_TEXT
    return RING_TEXT
