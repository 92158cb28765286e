from datetime import datetime, timezone

import pytest
from factories import make_record


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Points HOME at a temp dir and clears LEETSYNC_* so local config never leaks in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in ("USERNAME", "API_URL", "HOST_URL", "BUSY_POLICY", "MAX_CHALLENGE_ATTEMPTS"):
        monkeypatch.delenv(f"LEETSYNC_{key}", raising=False)
    return home
