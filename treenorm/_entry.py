from __future__ import annotations

import io
import string
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from ._exceptions import TNStubOperationError
from ._path import RelativePath

DUPLICATES_STRATEGIES = ("include", "exclude", "warn", "fail", "inherit")

DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755


def _check_strategy(strategy: str) -> str:
    if strategy not in DUPLICATES_STRATEGIES:
        raise ValueError(
            f"Invalid duplicates_strategy value: {strategy!r}. "
            f"Expected one of {DUPLICATES_STRATEGIES}."
        )
    return strategy


def _check_mode(name: str, mode: int | None) -> int | None:
    if mode is None:
        return None
    if isinstance(mode, bool) or not isinstance(mode, int) or not 0 <= mode <= 0o7777:
        raise ValueError(f"Invalid {name} value: {mode!r}. Expected None or 0..0o7777.")
    return mode


# ---------------------------------------------------------------------------
#  CopyPolicy
# ---------------------------------------------------------------------------


class CopyPolicy:
    """Per-entry copy configuration shared by the entries of one copy rule.

    The normalizer only reads :attr:`include_empty_dirs`; the remaining
    fields are consumed by downstream actions such as
    :class:`~treenorm.MemoryTreeAction`.
    """

    __slots__ = ("_include_empty_dirs", "_duplicates_strategy", "_file_mode", "_dir_mode")

    _FIELDS = ("include_empty_dirs", "duplicates_strategy", "file_mode", "dir_mode")

    def __init__(
        self,
        include_empty_dirs: bool = True,
        duplicates_strategy: str = "include",
        file_mode: int | None = None,
        dir_mode: int | None = None,
    ) -> None:
        self._include_empty_dirs: bool = bool(include_empty_dirs)
        self._duplicates_strategy: str = _check_strategy(duplicates_strategy)
        self._file_mode: int | None = _check_mode("file_mode", file_mode)
        self._dir_mode: int | None = _check_mode("dir_mode", dir_mode)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> CopyPolicy:
        unknown = sorted(set(options) - set(cls._FIELDS))
        if unknown:
            raise ValueError(
                f"Unknown copy policy option(s): {unknown}. Expected any of {cls._FIELDS}."
            )
        return cls(**options)

    def with_options(self, **changes: Any) -> CopyPolicy:
        options = {name: getattr(self, name) for name in self._FIELDS}
        options.update(changes)
        return self.from_mapping(options)

    @property
    def include_empty_dirs(self) -> bool:
        return self._include_empty_dirs

    @property
    def duplicates_strategy(self) -> str:
        return self._duplicates_strategy

    @property
    def file_mode(self) -> int | None:
        return self._file_mode

    @property
    def dir_mode(self) -> int | None:
        return self._dir_mode

    def __repr__(self) -> str:
        return (
            f"CopyPolicy(include_empty_dirs={self._include_empty_dirs!r}, "
            f"duplicates_strategy={self._duplicates_strategy!r}, "
            f"file_mode={self._file_mode!r}, dir_mode={self._dir_mode!r})"
        )


DEFAULT_POLICY = CopyPolicy()


# ---------------------------------------------------------------------------
#  Entry abstraction
# ---------------------------------------------------------------------------


class Entry(ABC):
    """One file or directory item flowing from a producer to a copy action."""

    @property
    @abstractmethod
    def relative_path(self) -> RelativePath: ...

    @property
    @abstractmethod
    def policy(self) -> CopyPolicy: ...

    @property
    @abstractmethod
    def last_modified(self) -> float: ...

    @property
    def is_directory(self) -> bool:
        return not self.relative_path.is_file

    @property
    def display_name(self) -> str:
        return self.relative_path.path_string

    @property
    def is_stub(self) -> bool:
        return False

    @property
    def excluded(self) -> bool:
        return False

    @property
    @abstractmethod
    def size(self) -> int: ...

    @property
    @abstractmethod
    def mode(self) -> int: ...

    @property
    @abstractmethod
    def duplicates_strategy(self) -> str: ...

    @abstractmethod
    def open(self) -> io.BytesIO: ...

    @abstractmethod
    def read_bytes(self) -> bytes: ...

    @abstractmethod
    def set_relative_path(self, path: RelativePath) -> None: ...

    @abstractmethod
    def set_path(self, path: str) -> None: ...

    @abstractmethod
    def set_name(self, name: str) -> None: ...

    @abstractmethod
    def set_mode(self, mode: int) -> None: ...

    @abstractmethod
    def set_duplicates_strategy(self, strategy: str) -> None: ...

    @abstractmethod
    def exclude(self) -> None: ...

    @abstractmethod
    def filter(self, transform: Callable[[bytes], bytes]) -> Entry: ...

    @abstractmethod
    def expand(self, properties: Mapping[str, object]) -> Entry: ...

    def __repr__(self) -> str:
        kind = "dir" if self.is_directory else "file"
        return f"{type(self).__name__}({self.display_name!r}, {kind})"


def _coerce_path(path: str | RelativePath, is_file: bool) -> RelativePath:
    if isinstance(path, RelativePath):
        if path.is_file != is_file:
            return RelativePath(path.segments, is_file)
        return path
    return RelativePath.parse(path, is_file)


class TreeEntry(Entry):
    """A producer-supplied entry whose file content lives in memory."""

    def __init__(
        self,
        relative_path: RelativePath,
        data: bytes | None = None,
        policy: CopyPolicy | None = None,
        last_modified: float | None = None,
    ) -> None:
        if relative_path.is_file:
            if data is None:
                data = b""
        elif data:
            raise IsADirectoryError(f"Directory entry cannot carry content: '{relative_path}'")
        else:
            data = None
        self._path: RelativePath = relative_path
        self._data: bytes | None = data
        self._policy: CopyPolicy = policy if policy is not None else DEFAULT_POLICY
        self._last_modified: float = (
            last_modified if last_modified is not None else time.time()
        )
        self._mode: int | None = None
        self._duplicates_strategy: str | None = None
        self._excluded: bool = False
        self._transforms: list[Callable[[bytes], bytes]] = []

    @classmethod
    def file(
        cls,
        path: str | RelativePath,
        data: bytes = b"",
        policy: CopyPolicy | None = None,
        last_modified: float | None = None,
    ) -> TreeEntry:
        return cls(_coerce_path(path, True), data, policy, last_modified)

    @classmethod
    def directory(
        cls,
        path: str | RelativePath,
        policy: CopyPolicy | None = None,
        last_modified: float | None = None,
    ) -> TreeEntry:
        return cls(_coerce_path(path, False), None, policy, last_modified)

    @property
    def relative_path(self) -> RelativePath:
        return self._path

    @property
    def policy(self) -> CopyPolicy:
        return self._policy

    @property
    def last_modified(self) -> float:
        return self._last_modified

    @property
    def excluded(self) -> bool:
        return self._excluded

    @property
    def size(self) -> int:
        return len(self._data) if self._data is not None else 0

    @property
    def mode(self) -> int:
        if self._mode is not None:
            return self._mode
        if self.is_directory:
            return self._policy.dir_mode if self._policy.dir_mode is not None else DEFAULT_DIR_MODE
        return self._policy.file_mode if self._policy.file_mode is not None else DEFAULT_FILE_MODE

    @property
    def duplicates_strategy(self) -> str:
        if self._duplicates_strategy is not None:
            return self._duplicates_strategy
        return self._policy.duplicates_strategy

    def read_bytes(self) -> bytes:
        if self._data is None:
            raise IsADirectoryError(f"Is a directory: '{self._path}'")
        data = self._data
        for transform in self._transforms:
            data = transform(data)
        return data

    def open(self) -> io.BytesIO:
        return io.BytesIO(self.read_bytes())

    def set_relative_path(self, path: RelativePath) -> None:
        self._path = path

    def set_path(self, path: str) -> None:
        self._path = RelativePath.parse(path, self._path.is_file)

    def set_name(self, name: str) -> None:
        parent = self._path.parent()
        if parent is None:
            raise ValueError("Cannot rename the root entry.")
        self._path = parent.append(self._path.is_file, name)

    def set_mode(self, mode: int) -> None:
        self._mode = _check_mode("mode", mode)

    def set_duplicates_strategy(self, strategy: str) -> None:
        self._duplicates_strategy = _check_strategy(strategy)

    def exclude(self) -> None:
        self._excluded = True

    def filter(self, transform: Callable[[bytes], bytes]) -> TreeEntry:
        if self.is_directory:
            raise IsADirectoryError(f"Is a directory: '{self._path}'")
        self._transforms.append(transform)
        return self

    def expand(self, properties: Mapping[str, object]) -> TreeEntry:
        values = dict(properties)

        def _expand(data: bytes) -> bytes:
            text = data.decode("utf-8")
            return string.Template(text).substitute(values).encode("utf-8")

        return self.filter(_expand)


# ---------------------------------------------------------------------------
#  Stub directory entry
# ---------------------------------------------------------------------------


class StubDirectoryEntry(Entry):
    """Placeholder for a directory that was required but never produced.

    Only path, kind, policy and timestamp queries are supported. Content
    and mutation operations raise :class:`TNStubOperationError`, since a
    stub has no backing file.
    """

    __slots__ = ("_path", "_policy", "_last_modified")

    def __init__(self, relative_path: RelativePath, policy: CopyPolicy) -> None:
        self._path: RelativePath = relative_path
        self._policy: CopyPolicy = policy
        self._last_modified: float = time.time()

    def _unsupported(self, operation: str) -> TNStubOperationError:
        return TNStubOperationError(operation, self._path.path_string)

    @property
    def relative_path(self) -> RelativePath:
        return self._path

    @property
    def policy(self) -> CopyPolicy:
        return self._policy

    @property
    def last_modified(self) -> float:
        return self._last_modified

    @property
    def is_stub(self) -> bool:
        return True

    @property
    def size(self) -> int:
        raise self._unsupported("size")

    @property
    def mode(self) -> int:
        raise self._unsupported("mode")

    @property
    def duplicates_strategy(self) -> str:
        raise self._unsupported("duplicates_strategy")

    def open(self) -> io.BytesIO:
        raise self._unsupported("open")

    def read_bytes(self) -> bytes:
        raise self._unsupported("read_bytes")

    def set_relative_path(self, path: RelativePath) -> None:
        raise self._unsupported("set_relative_path")

    def set_path(self, path: str) -> None:
        raise self._unsupported("set_path")

    def set_name(self, name: str) -> None:
        raise self._unsupported("set_name")

    def set_mode(self, mode: int) -> None:
        raise self._unsupported("set_mode")

    def set_duplicates_strategy(self, strategy: str) -> None:
        raise self._unsupported("set_duplicates_strategy")

    def exclude(self) -> None:
        raise self._unsupported("exclude")

    def filter(self, transform: Callable[[bytes], bytes]) -> Entry:
        raise self._unsupported("filter")

    def expand(self, properties: Mapping[str, object]) -> Entry:
        raise self._unsupported("expand")
