from ._entry import CopyPolicy, Entry, StubDirectoryEntry, TreeEntry
from ._exceptions import TNNodeLimitExceededError, TNOrderingError, TNStubOperationError
from ._normalize import NormalizingCopyAction, normalize_entries
from ._path import RelativePath
from ._stream import (
    CallbackAction,
    CopyAction,
    CopyActionProcessingStream,
    IterableStream,
    RecordingAction,
    WorkResult,
)
from ._tree import MemoryTreeAction
from ._typing import PassStats, TreeStats

__all__ = [
    "RelativePath",
    "CopyPolicy",
    "Entry",
    "TreeEntry",
    "StubDirectoryEntry",
    "CopyAction",
    "CopyActionProcessingStream",
    "WorkResult",
    "IterableStream",
    "CallbackAction",
    "RecordingAction",
    "NormalizingCopyAction",
    "normalize_entries",
    "MemoryTreeAction",
    "PassStats",
    "TreeStats",
    "TNStubOperationError",
    "TNOrderingError",
    "TNNodeLimitExceededError",
]
__version__ = "0.1.0"
