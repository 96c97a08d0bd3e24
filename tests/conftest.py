"""
Shared pytest fixtures for round robin tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (skips the large roster sweeps)
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from roundrobin.models import Team


def make_teams(count, prefix="Team"):
    """Build count real teams named Team 1, Team 2, ..."""
    return [Team(name=f"{prefix} {i + 1}") for i in range(count)]


@pytest.fixture
def client():
    """Create a Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's tournament file at a temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(data_dir / "tournaments.yaml"))
    return str(data_dir)


@pytest.fixture
def three_teams():
    return [Team(name="Team A"), Team(name="Team B"), Team(name="Team C")]


@pytest.fixture
def four_teams():
    return make_teams(4)


@pytest.fixture
def five_teams():
    return make_teams(5)
