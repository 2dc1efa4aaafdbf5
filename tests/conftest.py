"""
Pytest configuration for the test suite.

Adds the project root to sys.path so that imports like
``from contactscan.extraction import ...`` and ``import main`` work without
an installed package.
"""

import sys
from pathlib import Path

import pytest

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)


@pytest.fixture
def progress_log():
    """A progress callback that records every percentage it receives."""
    calls = []

    def record(percent):
        calls.append(percent)

    record.calls = calls
    return record
