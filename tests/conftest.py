import os
import sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from conciliador.models import AppState, QuestorRecord, SeniorRecord, GesttaRecord


@pytest.fixture
def make_state():
    """Builds an AppState from plain export-style rows."""
    def _make(questor=(), senior=(), gestta=(), overrides=None, exclusions=()):
        return AppState(
            questor=tuple(QuestorRecord.from_row(r) for r in questor),
            senior=tuple(SeniorRecord.from_row(r) for r in senior),
            gestta=tuple(GesttaRecord.from_row(r) for r in gestta),
            payer_overrides=dict(overrides or {}),
            matrix_exclusions=frozenset(exclusions),
        )
    return _make


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "conciliador_test.db")
