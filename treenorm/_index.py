from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._entry import Entry
    from ._path import RelativePath


class PendingIndex:
    """Directory entries buffered per path, in arrival order.

    Keys iterate in first-insertion order. A key exists only while it has
    at least one buffered entry.
    """

    def __init__(self) -> None:
        self._buckets: dict[RelativePath, list[Entry]] = {}
        self._entry_count: int = 0

    def put(self, path: RelativePath, entry: Entry) -> None:
        bucket = self._buckets.get(path)
        if bucket is None:
            self._buckets[path] = [entry]
        else:
            bucket.append(entry)
        self._entry_count += 1

    def remove_all(self, path: RelativePath) -> list[Entry]:
        bucket = self._buckets.pop(path, None)
        if bucket is None:
            return []
        self._entry_count -= len(bucket)
        return bucket

    def get(self, path: RelativePath) -> list[Entry]:
        return list(self._buckets.get(path, ()))

    def keys(self) -> list[RelativePath]:
        return list(self._buckets)

    @property
    def entry_count(self) -> int:
        return self._entry_count

    def clear(self) -> None:
        self._buckets.clear()
        self._entry_count = 0

    def __contains__(self, path: object) -> bool:
        return path in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)


class VisitedSet:
    """Directory paths already forwarded during the current pass."""

    def __init__(self) -> None:
        self._paths: set[RelativePath] = set()

    def add(self, path: RelativePath) -> bool:
        if path in self._paths:
            return False
        self._paths.add(path)
        return True

    def clear(self) -> None:
        self._paths.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)
