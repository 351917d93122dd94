from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._entry import Entry

EntryAction = Callable[["Entry"], None]


class WorkResult:
    __slots__ = ("_did_work",)

    DID_WORK: WorkResult
    NO_WORK: WorkResult

    def __init__(self, did_work: bool) -> None:
        self._did_work: bool = bool(did_work)

    @classmethod
    def of(cls, did_work: bool) -> WorkResult:
        return cls.DID_WORK if did_work else cls.NO_WORK

    @property
    def did_work(self) -> bool:
        return self._did_work

    def __repr__(self) -> str:
        return f"WorkResult(did_work={self._did_work!r})"


WorkResult.DID_WORK = WorkResult(True)
WorkResult.NO_WORK = WorkResult(False)


class CopyActionProcessingStream(ABC):
    """Push-style entry source: calls *action* once per entry, then returns."""

    @abstractmethod
    def process(self, action: EntryAction) -> None: ...


class CopyAction(ABC):
    """Consumer of one entry stream."""

    @abstractmethod
    def execute(self, stream: CopyActionProcessingStream) -> WorkResult: ...


class IterableStream(CopyActionProcessingStream):
    """Stream over an iterable of entries.

    Replayable when backed by a collection; a consumed iterator cannot be
    processed twice.
    """

    def __init__(self, entries: Iterable[Entry]) -> None:
        self._entries = entries
        self._one_shot: bool = iter(entries) is entries
        self._consumed: bool = False

    def process(self, action: EntryAction) -> None:
        if self._one_shot and self._consumed:
            raise RuntimeError("Stream over an iterator has already been processed.")
        self._consumed = True
        for entry in self._entries:
            action(entry)


class CallbackAction(CopyAction):
    """Adapts a plain callable into a :class:`CopyAction`."""

    def __init__(self, fn: EntryAction) -> None:
        self._fn = fn

    def execute(self, stream: CopyActionProcessingStream) -> WorkResult:
        seen = False

        def _visit(entry: Entry) -> None:
            nonlocal seen
            seen = True
            self._fn(entry)

        stream.process(_visit)
        return WorkResult.of(seen)


class RecordingAction(CopyAction):
    """Copy action that keeps every entry it receives, in order."""

    def __init__(self, result: WorkResult | None = None) -> None:
        self.entries: list[Entry] = []
        self._result = result

    def execute(self, stream: CopyActionProcessingStream) -> WorkResult:
        self.entries.clear()
        stream.process(self.entries.append)
        if self._result is not None:
            return self._result
        return WorkResult.of(bool(self.entries))

    @property
    def paths(self) -> list[str]:
        return [entry.relative_path.path_string for entry in self.entries]
