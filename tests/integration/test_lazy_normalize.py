import pytest
from treenorm import CopyPolicy, normalize_entries

from tests.helpers.asserts import assert_canonical
from tests.helpers.streams import d, f, forwarded, run_normalized


def _sample():
    keep = CopyPolicy(include_empty_dirs=True)
    drop = CopyPolicy(include_empty_dirs=False)
    return [
        d("y", drop),
        d("y", drop),
        f("y/f.txt"),
        f("p/q/r.txt"),
        d("p", keep),
        d("empty", drop),
        d("kept/inner", keep),
        f("top.txt"),
    ]


def test_same_sequence_as_push_style():
    entries = _sample()
    lazy = list(normalize_entries(entries))
    pushed = run_normalized(entries)
    assert forwarded(lazy) == forwarded(pushed)
    assert [e for e in lazy if not e.is_stub] == [e for e in pushed if not e.is_stub]


def test_sequence_is_canonical():
    out = list(normalize_entries(_sample()))
    assert_canonical(out)
    assert forwarded(out)[-2:] == [("kept", "stub"), ("kept/inner", "dir")]


def test_pulls_input_lazily():
    pulled = []

    def produce():
        for entry in [f("a/1.txt"), f("b/2.txt")]:
            pulled.append(entry.relative_path.path_string)
            yield entry

    it = normalize_entries(produce())
    first = next(it)
    assert first.relative_path.path_string == "a"
    assert pulled == ["a/1.txt"]


def test_trailing_pass_after_exhaustion():
    keep = CopyPolicy(include_empty_dirs=True)
    it = normalize_entries(iter([d("x", keep)]))
    assert [e.relative_path.path_string for e in it] == ["x"]


def test_empty_input():
    assert list(normalize_entries([])) == []


def test_producer_error_propagates():
    def produce():
        yield f("a.txt")
        raise ValueError("bad entry")

    it = normalize_entries(produce())
    assert next(it).relative_path.path_string == "a.txt"
    with pytest.raises(ValueError, match="bad entry"):
        next(it)
