"""
Shared fixtures. The database path is pointed at a temp file before the
application modules are imported.
"""
import os
import tempfile

os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(), "test_book_cricket.db"))

import pytest

from bookcricket.engine.outcomes import categorize
from bookcricket.engine.match_engine import MatchController, MatchConfig, MatchMode
from bookcricket.engine.history import SessionHistory


class ScriptedGenerator:
    """Outcome generator that flips the digits it is given, in order"""

    def __init__(self, digits):
        self.digits = list(digits)
        self.calls = []

    def resolve(self, final_over: bool, free_hit_active: bool):
        self.calls.append((final_over, free_hit_active))
        return categorize(self.digits.pop(0), free_hit_active)


@pytest.fixture
def history():
    return SessionHistory()


@pytest.fixture
def make_controller(history):
    def _make(digits):
        return MatchController(generator=ScriptedGenerator(digits), history=history)
    return _make


@pytest.fixture
def solo_config():
    return MatchConfig(mode=MatchMode.SOLO, overs=1, total_wickets=1, p1_name="Asha")


@pytest.fixture
def dual_config():
    return MatchConfig(mode=MatchMode.DUAL, overs=1, total_wickets=1, p1_name="Asha", p2_name="Ben")
