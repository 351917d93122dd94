"""Stream normalization for copy actions.

:class:`NormalizingCopyAction` sits between an entry producer and a
downstream :class:`CopyAction` and cleans the tree as it is visited:

* duplicate directories are dropped (the first one supplied wins),
* missing ancestor directories are synthesized as stub entries,
* every entry is preceded by all of its ancestor directories,
* directories without descendants are only forwarded when their policy
  sets ``include_empty_dirs``.

All bookkeeping lives in a :class:`_NormalizingPass` created per
``process`` call and discarded afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from ._entry import CopyPolicy, Entry, StubDirectoryEntry
from ._index import PendingIndex, VisitedSet
from ._path import RelativePath
from ._stream import CopyAction, CopyActionProcessingStream, EntryAction, WorkResult
from ._typing import PassStats

logger = logging.getLogger(__name__)


class _NormalizingPass:
    """State of one normalization pass over one producer stream."""

    def __init__(self, forward: EntryAction) -> None:
        self._forward = forward
        self.visited = VisitedSet()
        self.pending = PendingIndex()
        self.stats = PassStats(
            files_forwarded=0,
            dirs_forwarded=0,
            stubs_synthesized=0,
            duplicates_dropped=0,
            empty_dirs_suppressed=0,
        )

    def accept(self, entry: Entry) -> None:
        path = entry.relative_path
        if entry.is_directory:
            if path in self.visited:
                self.stats["duplicates_dropped"] += 1
            else:
                self.pending.put(path, entry)
        else:
            self.maybe_visit(path.parent(), entry.policy)
            self.stats["files_forwarded"] += 1
            self._forward(entry)

    def maybe_visit(self, path: RelativePath | None, policy: CopyPolicy) -> None:
        # Claim the unvisited part of the chain bottom-up, then forward top-down.
        chain: list[RelativePath] = []
        while path is not None:
            parent = path.parent()
            if parent is None or not self.visited.add(path):
                break
            chain.append(path)
            path = parent

        for dir_path in reversed(chain):
            buffered = self.pending.remove_all(dir_path)
            if buffered:
                dir_entry = buffered[0]
                self.stats["duplicates_dropped"] += len(buffered) - 1
            else:
                dir_entry = StubDirectoryEntry(dir_path, policy)
                self.stats["stubs_synthesized"] += 1
                logger.debug("Synthesized stub directory '%s'", dir_path)
            self.stats["dirs_forwarded"] += 1
            self._forward(dir_entry)

    def finish(self) -> None:
        for path in self.pending.keys():
            for entry in self.pending.get(path):
                if entry.policy.include_empty_dirs:
                    self.maybe_visit(path, entry.policy)

        self.stats["empty_dirs_suppressed"] = len(self.pending)
        logger.debug(
            "Normalized pass: %d files, %d dirs (%d stubs), %d duplicates dropped, "
            "%d empty dirs suppressed",
            self.stats["files_forwarded"],
            self.stats["dirs_forwarded"],
            self.stats["stubs_synthesized"],
            self.stats["duplicates_dropped"],
            self.stats["empty_dirs_suppressed"],
        )
        self.visited.clear()
        self.pending.clear()


class _NormalizingStream(CopyActionProcessingStream):
    def __init__(self, source: CopyActionProcessingStream, owner: NormalizingCopyAction) -> None:
        self._source = source
        self._owner = owner

    def process(self, action: EntryAction) -> None:
        normalizing_pass = _NormalizingPass(action)
        self._source.process(normalizing_pass.accept)
        normalizing_pass.finish()
        self._owner._last_stats = normalizing_pass.stats


class NormalizingCopyAction(CopyAction):
    """A :class:`CopyAction` which normalizes the entry stream for its delegate."""

    def __init__(self, delegate: CopyAction) -> None:
        self._delegate = delegate
        self._last_stats: PassStats | None = None

    @property
    def delegate(self) -> CopyAction:
        return self._delegate

    @property
    def last_stats(self) -> PassStats | None:
        """Counters of the most recently completed pass, if any."""
        if self._last_stats is None:
            return None
        return PassStats(**self._last_stats)

    def execute(self, stream: CopyActionProcessingStream) -> WorkResult:
        return self._delegate.execute(_NormalizingStream(stream, self))


def normalize_entries(entries: Iterable[Entry]) -> Iterator[Entry]:
    """Lazily yield *entries* in normalized order.

    Entries are pulled from *entries* one at a time; the empty-directory
    pass runs once the input is exhausted.
    """
    out: list[Entry] = []
    normalizing_pass = _NormalizingPass(out.append)
    for entry in entries:
        normalizing_pass.accept(entry)
        yield from out
        out.clear()
    normalizing_pass.finish()
    yield from out
