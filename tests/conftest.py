import pytest
from treenorm import CopyPolicy
from treenorm._pytest_plugin import memory_tree, recording_action  # noqa: F401


@pytest.fixture
def keep_empty() -> CopyPolicy:
    return CopyPolicy(include_empty_dirs=True)


@pytest.fixture
def drop_empty() -> CopyPolicy:
    return CopyPolicy(include_empty_dirs=False)
