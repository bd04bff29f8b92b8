import sys
from pathlib import Path

import pytest

# Add the project's "src" directory to the Python path so tests can import hedgesim.*
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_DIR))

from hedgesim.scenarios import ScenarioKind  # noqa: E402
from hedgesim.scores import MemoryScoreStore  # noqa: E402
from hedgesim.session import start_session  # noqa: E402


@pytest.fixture
def store():
    return MemoryScoreStore()


@pytest.fixture
def active_session(store):
    """Naked-call session, market open, nothing traded yet (price = 100)."""
    session = start_session(store=store, seed=7, scenario=ScenarioKind.NAKED_CALL)
    session.advance_to_active()
    return session
