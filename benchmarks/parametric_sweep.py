"""Parametric benchmark sweep: vary file count, directory depth, and duplicate ratio."""
from __future__ import annotations

import argparse
import gc
import random
import time
import tracemalloc
from typing import Callable

from treenorm import (
    CopyPolicy,
    IterableStream,
    MemoryTreeAction,
    NormalizingCopyAction,
    RecordingAction,
    TreeEntry,
    normalize_entries,
)

KEEP = CopyPolicy(include_empty_dirs=True)
DROP = CopyPolicy(include_empty_dirs=False)


def _measure(fn: Callable[[], None]) -> tuple[float, float]:
    """Run fn once, return (elapsed_sec, peak_kib)."""
    gc.collect()
    tracemalloc.start()
    t0 = time.perf_counter()
    fn()
    elapsed = time.perf_counter() - t0
    _, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    gc.collect()
    return elapsed, peak / 1024.0


# ---------------------------------------------------------------------------
#  Entry generators
# ---------------------------------------------------------------------------

def _wide_entries(count: int) -> list[TreeEntry]:
    entries: list[TreeEntry] = []
    for i in range(count):
        bucket = f"d{i % 100:03d}"
        entries.append(TreeEntry.file(f"{bucket}/f{i:06d}.bin", b"w", policy=DROP))
    return entries


def _deep_entries(depth: int) -> list[TreeEntry]:
    parts = [f"d{i}" for i in range(depth)]
    return [TreeEntry.file("/".join(parts) + "/file.bin", b"d", policy=DROP)]


def _noisy_entries(count: int, dup_ratio: float) -> list[TreeEntry]:
    gen = random.Random(42)
    dirs = [f"a{i % 10}/b{i % 37}" for i in range(count)]
    entries: list[TreeEntry] = []
    for i, dpath in enumerate(dirs):
        entries.append(TreeEntry.directory(dpath, policy=KEEP if i % 3 else DROP))
        if gen.random() < dup_ratio:
            entries.append(TreeEntry.directory(dpath, policy=DROP))
        if i % 2:
            entries.append(TreeEntry.file(f"{dpath}/f{i}.txt", b"n", policy=DROP))
    return entries


# ---------------------------------------------------------------------------
#  Runners
# ---------------------------------------------------------------------------

def _run_recording(entries: list[TreeEntry]) -> None:
    NormalizingCopyAction(RecordingAction()).execute(IterableStream(entries))


def _run_memory_tree(entries: list[TreeEntry]) -> None:
    NormalizingCopyAction(MemoryTreeAction()).execute(IterableStream(entries))


def _run_lazy(entries: list[TreeEntry]) -> None:
    for _ in normalize_entries(entries):
        pass


RUNNERS: dict[str, Callable[[list[TreeEntry]], None]] = {
    "recording": _run_recording,
    "memory_tree": _run_memory_tree,
    "lazy": _run_lazy,
}


def _sweep(label: str, params: list[int], build: Callable[[int], list[TreeEntry]]) -> None:
    print(f"\n== {label}")
    print(f"{'param':>10} " + " ".join(f"{name:>22}" for name in RUNNERS))
    for param in params:
        entries = build(param)
        cells = []
        for runner in RUNNERS.values():
            elapsed, peak = _measure(lambda: runner(entries))
            cells.append(f"{elapsed * 1000:9.2f}ms {peak:8.1f}KiB")
        print(f"{param:>10} " + " ".join(f"{c:>22}" for c in cells))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--quick", action="store_true", help="smaller parameter grid")
    args = parser.parse_args()

    counts = [1_000, 10_000] if args.quick else [1_000, 10_000, 100_000]
    depths = [10, 100] if args.quick else [10, 100, 1_000, 5_000]

    _sweep("wide tree (file count)", counts, _wide_entries)
    _sweep("deep tree (depth)", depths, _deep_entries)
    _sweep("noisy listing (entries, 30% duplicates)", counts, lambda n: _noisy_entries(n, 0.3))


if __name__ == "__main__":
    main()
