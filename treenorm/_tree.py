from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator

from ._entry import Entry
from ._exceptions import TNNodeLimitExceededError, TNOrderingError
from ._path import RelativePath
from ._stream import CopyAction, CopyActionProcessingStream, WorkResult
from ._typing import TreeStats

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
#  Directory Index Layer
# ---------------------------------------------------------------------------


class DirNode:
    __slots__ = ("node_id", "children", "mode", "created_at", "modified_at")

    def __init__(self, node_id: int, mode: int | None = None) -> None:
        self.node_id: int = node_id
        self.children: dict[str, int] = {}
        self.mode: int | None = mode
        now = time.time()
        self.created_at: float = now
        self.modified_at: float = now


class FileNode:
    __slots__ = ("node_id", "data", "mode", "generation", "created_at", "modified_at")

    def __init__(self, node_id: int, data: bytes, mode: int | None = None) -> None:
        self.node_id: int = node_id
        self.data: bytes = data
        self.mode: int | None = mode
        self.generation: int = 0
        now = time.time()
        self.created_at: float = now
        self.modified_at: float = now


Node = DirNode | FileNode


# ---------------------------------------------------------------------------
#  MemoryTreeAction
# ---------------------------------------------------------------------------


class MemoryTreeAction(CopyAction):
    """Copy action that materializes entries into an in-memory tree.

    Every entry's parent directory must already exist when the entry
    arrives, so feeding it an unnormalized stream fails with
    :class:`TNOrderingError` just like creating files on a real disk would.
    """

    def __init__(self, max_nodes: int | None = None, strict: bool = True) -> None:
        if max_nodes is not None and max_nodes < 1:
            raise ValueError(f"Invalid max_nodes value: {max_nodes!r}. Expected None or >= 1.")
        self._max_nodes: int | None = max_nodes
        self._strict: bool = strict
        self._global_lock = threading.RLock()
        self._nodes: dict[int, Node] = {}
        self._next_node_id: int = 0
        # Root directory
        self._root = self._alloc_dir()

    # -- node allocation helpers --

    def _check_node_limit(self) -> None:
        if self._max_nodes is not None and len(self._nodes) >= self._max_nodes:
            raise TNNodeLimitExceededError(len(self._nodes), self._max_nodes)

    def _alloc_dir(self, mode: int | None = None) -> DirNode:
        self._check_node_limit()
        nid = self._next_node_id
        self._next_node_id += 1
        node = DirNode(nid, mode)
        self._nodes[nid] = node
        return node

    def _alloc_file(self, data: bytes, mode: int | None = None) -> FileNode:
        self._check_node_limit()
        nid = self._next_node_id
        self._next_node_id += 1
        node = FileNode(nid, data, mode)
        self._nodes[nid] = node
        return node

    # -- path helpers --

    def _resolve_segments(self, segments: tuple[str, ...]) -> Node | None:
        current: Node = self._root
        for part in segments:
            if not isinstance(current, DirNode):
                return None
            child_id = current.children.get(part)
            if child_id is None:
                return None
            current = self._nodes[child_id]
        return current

    def _resolve_path(self, path: str) -> Node | None:
        return self._resolve_segments(RelativePath.parse(path, False).segments)

    # -- copy action --

    def execute(self, stream: CopyActionProcessingStream) -> WorkResult:
        created = False

        def _visit(entry: Entry) -> None:
            nonlocal created
            if entry.excluded:
                return
            with self._global_lock:
                if self._materialize(entry):
                    created = True

        stream.process(_visit)
        return WorkResult.of(created)

    def _materialize(self, entry: Entry) -> bool:
        path = entry.relative_path
        parent_path = path.parent()
        if parent_path is None:
            if entry.is_directory:
                return False
            raise ValueError("A file entry needs at least one path segment.")

        parent = self._resolve_segments(parent_path.segments)
        if parent is None:
            raise TNOrderingError(path.path_string, parent_path.path_string)
        if not isinstance(parent, DirNode):
            raise NotADirectoryError(f"Not a directory: '{parent_path}'")

        name = path.name
        child_id = parent.children.get(name)
        existing = self._nodes[child_id] if child_id is not None else None

        if entry.is_directory:
            if existing is not None:
                if self._strict or isinstance(existing, FileNode):
                    raise FileExistsError(f"Already exists: '{path}'")
                return False
            mode = None if entry.is_stub else entry.mode
            node = self._alloc_dir(mode)
            node.modified_at = entry.last_modified
            parent.children[name] = node.node_id
            return True

        if isinstance(existing, DirNode):
            raise IsADirectoryError(f"Is a directory: '{path}'")
        data = entry.read_bytes()
        if existing is not None:
            strategy = entry.duplicates_strategy
            if strategy == "exclude":
                return False
            if strategy == "fail":
                raise FileExistsError(f"Duplicate file: '{path}'")
            if strategy == "warn":
                logger.warning("Overwriting duplicate file '%s'", path)
            existing.data = data
            existing.mode = entry.mode
            existing.generation += 1
            existing.modified_at = entry.last_modified
            return True
        fnode = self._alloc_file(data, entry.mode)
        fnode.modified_at = entry.last_modified
        parent.children[name] = fnode.node_id
        return True

    # -- public query API --

    def exists(self, path: str) -> bool:
        try:
            with self._global_lock:
                return self._resolve_path(path) is not None
        except ValueError:
            return False

    def is_dir(self, path: str) -> bool:
        try:
            with self._global_lock:
                return isinstance(self._resolve_path(path), DirNode)
        except ValueError:
            return False

    def is_file(self, path: str) -> bool:
        try:
            with self._global_lock:
                return isinstance(self._resolve_path(path), FileNode)
        except ValueError:
            return False

    def listdir(self, path: str = "/") -> list[str]:
        with self._global_lock:
            node = self._resolve_path(path)
            if node is None:
                raise FileNotFoundError(f"No such directory: '{path}'")
            if not isinstance(node, DirNode):
                raise NotADirectoryError(f"Not a directory: '{path}'")
            return list(node.children.keys())

    def read_bytes(self, path: str) -> bytes:
        with self._global_lock:
            node = self._resolve_path(path)
            if node is None:
                raise FileNotFoundError(f"No such file: '{path}'")
            if isinstance(node, DirNode):
                raise IsADirectoryError(f"Is a directory: '{path}'")
            return node.data

    def get_mode(self, path: str) -> int | None:
        with self._global_lock:
            node = self._resolve_path(path)
            if node is None:
                raise FileNotFoundError(f"No such file or directory: '{path}'")
            return node.mode

    def stats(self) -> TreeStats:
        with self._global_lock:
            file_count = 0
            dir_count = 0
            total_bytes = 0
            for node in self._nodes.values():
                if isinstance(node, DirNode):
                    if node is not self._root:
                        dir_count += 1
                else:
                    file_count += 1
                    total_bytes += len(node.data)
        return TreeStats(file_count=file_count, dir_count=dir_count, total_bytes=total_bytes)

    def export_tree(self, prefix: str = "/") -> dict[str, bytes]:
        with self._global_lock:
            nprefix = "/" + RelativePath.parse(prefix, False).path_string
            result: list[tuple[str, FileNode]] = []
            self._collect_files(self._resolve_path(prefix), nprefix, result)
            return {fpath: fnode.data for fpath, fnode in result}

    def _collect_files(
        self, node: Node | None, current_path: str, result: list[tuple[str, FileNode]]
    ) -> None:
        if node is None:
            return
        if isinstance(node, FileNode):
            result.append((current_path, node))
        else:
            for name, child_id in node.children.items():
                child_path = current_path.rstrip("/") + "/" + name
                self._collect_files(self._nodes[child_id], child_path, result)

    def walk(self, path: str = "/") -> Iterator[tuple[str, list[str], list[str]]]:
        """Recursively walk the materialized tree (top-down)."""
        with self._global_lock:
            node = self._resolve_path(path)
            if node is None:
                raise FileNotFoundError(f"No such directory: '{path}'")
            if not isinstance(node, DirNode):
                raise NotADirectoryError(f"Not a directory: '{path}'")
        npath = "/" + RelativePath.parse(path, False).path_string
        yield from self._walk_dir(npath, node)

    def _walk_dir(
        self, dir_path: str, dir_node: DirNode
    ) -> Iterator[tuple[str, list[str], list[str]]]:
        dirnames: list[str] = []
        filenames: list[str] = []
        child_dirs: list[tuple[str, DirNode]] = []
        with self._global_lock:
            snapshot = list(dir_node.children.items())
        for name, child_id in snapshot:
            child = self._nodes.get(child_id)
            if child is None:
                continue
            if isinstance(child, DirNode):
                dirnames.append(name)
                child_dirs.append((dir_path.rstrip("/") + "/" + name, child))
            else:
                filenames.append(name)
        yield dir_path, dirnames, filenames
        for child_path, child_dir in child_dirs:
            yield from self._walk_dir(child_path, child_dir)
