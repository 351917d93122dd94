from typing import TypedDict


class PassStats(TypedDict):
    files_forwarded: int
    dirs_forwarded: int
    stubs_synthesized: int
    duplicates_dropped: int
    empty_dirs_suppressed: int


class TreeStats(TypedDict):
    file_count: int
    dir_count: int
    total_bytes: int
