"""pytest fixture plugin.

Usage::

    # conftest.py
    pytest_plugins = ["treenorm._pytest_plugin"]

This makes the ``recording_action`` and ``memory_tree`` fixtures
automatically available::

    def test_something(recording_action):
        NormalizingCopyAction(recording_action).execute(stream)
        assert recording_action.paths == ["a", "a/b.txt"]
"""

import pytest

from ._stream import RecordingAction
from ._tree import MemoryTreeAction


@pytest.fixture
def recording_action() -> RecordingAction:
    """A :class:`RecordingAction` that keeps forwarded entries in order."""
    return RecordingAction()


@pytest.fixture
def memory_tree() -> MemoryTreeAction:
    """A strict :class:`MemoryTreeAction` with no node limit.

    Provides an independent instance per test (function scope).
    """
    return MemoryTreeAction()
