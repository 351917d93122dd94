from __future__ import annotations


def _split_segments(path: str) -> tuple[str, ...]:
    converted = path.replace("\\", "/")
    segments: list[str] = []
    for part in converted.split("/"):
        if part == "..":
            if not segments:
                raise ValueError(f"Path traversal attempt detected: '{path}'")
            segments.pop()
        elif part and part != ".":
            segments.append(part)
    return tuple(segments)


class RelativePath:
    """Position of an entry in the tree: path segments plus a file/dir flag.

    The empty path (no segments) is the tree root; its ``parent()`` is
    ``None``.
    """

    __slots__ = ("_segments", "_is_file", "_hash")

    def __init__(self, segments: tuple[str, ...] | list[str], is_file: bool) -> None:
        segs = tuple(segments)
        for seg in segs:
            if not seg or "/" in seg or seg in (".", ".."):
                raise ValueError(f"Invalid path segment: {seg!r}")
        self._segments: tuple[str, ...] = segs
        self._is_file: bool = bool(is_file)
        self._hash: int = hash((segs, self._is_file))

    @classmethod
    def parse(cls, path: str, is_file: bool) -> RelativePath:
        return cls(_split_segments(path), is_file)

    @property
    def segments(self) -> tuple[str, ...]:
        return self._segments

    @property
    def is_file(self) -> bool:
        return self._is_file

    @property
    def name(self) -> str:
        return self._segments[-1] if self._segments else ""

    @property
    def depth(self) -> int:
        return len(self._segments)

    @property
    def path_string(self) -> str:
        return "/".join(self._segments)

    def parent(self) -> RelativePath | None:
        if not self._segments:
            return None
        return RelativePath(self._segments[:-1], False)

    def append(self, is_file: bool, *segments: str) -> RelativePath:
        extra: list[str] = []
        for seg in segments:
            extra.extend(_split_segments(seg))
        return RelativePath(self._segments + tuple(extra), is_file)

    def ancestors(self) -> list[RelativePath]:
        """Proper ancestors below the root, nearest-root first."""
        return [
            RelativePath(self._segments[:i], False)
            for i in range(1, len(self._segments))
        ]

    def is_ancestor_of(self, other: RelativePath) -> bool:
        n = len(self._segments)
        return (
            not self._is_file
            and n < len(other._segments)
            and other._segments[:n] == self._segments
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RelativePath):
            return NotImplemented
        return self._is_file == other._is_file and self._segments == other._segments

    def __hash__(self) -> int:
        return self._hash

    def __str__(self) -> str:
        return self.path_string

    def __repr__(self) -> str:
        kind = "file" if self._is_file else "dir"
        return f"RelativePath({self.path_string!r}, {kind})"
