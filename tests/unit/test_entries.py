import io
import time
from unittest.mock import patch

import pytest
from treenorm import CopyPolicy, RelativePath, StubDirectoryEntry, TNStubOperationError, TreeEntry


# -------------------------------------------------------------------
# TreeEntry
# -------------------------------------------------------------------


def test_file_entry_basics():
    entry = TreeEntry.file("a/b.txt", b"hello")
    assert entry.is_directory is False
    assert entry.relative_path == RelativePath.parse("a/b.txt", True)
    assert entry.size == 5
    assert entry.read_bytes() == b"hello"
    assert entry.display_name == "a/b.txt"
    assert entry.is_stub is False


def test_open_returns_bytesio():
    entry = TreeEntry.file("f.bin", b"data")
    stream = entry.open()
    assert isinstance(stream, io.BytesIO)
    assert stream.read() == b"data"


def test_directory_entry_has_no_content():
    entry = TreeEntry.directory("a")
    assert entry.is_directory is True
    assert entry.size == 0
    with pytest.raises(IsADirectoryError):
        entry.read_bytes()


def test_directory_with_content_rejected():
    with pytest.raises(IsADirectoryError):
        TreeEntry(RelativePath.parse("a", False), b"x")


def test_constructor_coerces_path_kind():
    entry = TreeEntry.directory(RelativePath.parse("a", True))
    assert entry.relative_path.is_file is False


def test_default_policy_is_shared():
    assert TreeEntry.file("a").policy is TreeEntry.file("b").policy


def test_mode_defaults_from_policy():
    policy = CopyPolicy(file_mode=0o600, dir_mode=0o700)
    assert TreeEntry.file("f", policy=policy).mode == 0o600
    assert TreeEntry.directory("d", policy=policy).mode == 0o700
    assert TreeEntry.file("f").mode == 0o644
    assert TreeEntry.directory("d").mode == 0o755


def test_set_mode_overrides_policy():
    entry = TreeEntry.file("f", policy=CopyPolicy(file_mode=0o600))
    entry.set_mode(0o640)
    assert entry.mode == 0o640
    with pytest.raises(ValueError):
        entry.set_mode(0o77777)


def test_duplicates_strategy_override():
    entry = TreeEntry.file("f", policy=CopyPolicy(duplicates_strategy="fail"))
    assert entry.duplicates_strategy == "fail"
    entry.set_duplicates_strategy("exclude")
    assert entry.duplicates_strategy == "exclude"
    with pytest.raises(ValueError):
        entry.set_duplicates_strategy("nope")


def test_set_path_keeps_kind():
    entry = TreeEntry.file("a/b.txt")
    entry.set_path("x/y.txt")
    assert entry.relative_path == RelativePath.parse("x/y.txt", True)


def test_set_name_replaces_last_segment():
    entry = TreeEntry.file("a/b.txt")
    entry.set_name("c.txt")
    assert entry.relative_path.path_string == "a/c.txt"


def test_set_relative_path():
    entry = TreeEntry.directory("a")
    entry.set_relative_path(RelativePath.parse("z", False))
    assert entry.relative_path.path_string == "z"


def test_exclude_marks_entry():
    entry = TreeEntry.file("f")
    assert entry.excluded is False
    entry.exclude()
    assert entry.excluded is True


def test_filter_applied_on_read_in_order():
    entry = TreeEntry.file("f", b"abc")
    entry.filter(bytes.upper).filter(lambda b: b + b"!")
    assert entry.read_bytes() == b"ABC!"
    assert entry.size == 3


def test_expand_substitutes_properties():
    entry = TreeEntry.file("f", b"version=${version}")
    entry.expand({"version": "1.2"})
    assert entry.read_bytes() == b"version=1.2"


def test_expand_missing_property_raises():
    entry = TreeEntry.file("f", b"${missing}").expand({})
    with pytest.raises(KeyError):
        entry.read_bytes()


def test_filter_on_directory_raises():
    with pytest.raises(IsADirectoryError):
        TreeEntry.directory("d").filter(bytes.upper)


# -------------------------------------------------------------------
# StubDirectoryEntry
# -------------------------------------------------------------------


@pytest.fixture
def stub():
    return StubDirectoryEntry(RelativePath.parse("a/b", False), CopyPolicy(include_empty_dirs=False))


def test_stub_supported_queries(stub):
    assert stub.is_directory is True
    assert stub.is_stub is True
    assert stub.relative_path.path_string == "a/b"
    assert stub.policy.include_empty_dirs is False
    assert stub.display_name == "a/b"
    assert stub.excluded is False


def test_stub_timestamp_captured_at_synthesis():
    with patch("time.time", return_value=1234.5):
        stub = StubDirectoryEntry(RelativePath.parse("a", False), CopyPolicy())
    assert stub.last_modified == 1234.5


def test_stub_timestamp_is_current():
    before = time.time()
    stub = StubDirectoryEntry(RelativePath.parse("a", False), CopyPolicy())
    after = time.time()
    assert before <= stub.last_modified <= after


def test_stub_of_file_path_reports_not_directory():
    stub = StubDirectoryEntry(RelativePath.parse("a", True), CopyPolicy())
    assert stub.is_directory is False


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.size,
        lambda s: s.mode,
        lambda s: s.duplicates_strategy,
        lambda s: s.open(),
        lambda s: s.read_bytes(),
        lambda s: s.set_relative_path(RelativePath.parse("x", False)),
        lambda s: s.set_path("x"),
        lambda s: s.set_name("x"),
        lambda s: s.set_mode(0o755),
        lambda s: s.set_duplicates_strategy("include"),
        lambda s: s.exclude(),
        lambda s: s.filter(bytes.upper),
        lambda s: s.expand({}),
    ],
)
def test_stub_unsupported_operations_raise(stub, call):
    with pytest.raises(TNStubOperationError) as excinfo:
        call(stub)
    assert excinfo.value.path == "a/b"


def test_stub_error_is_unsupported_operation(stub):
    with pytest.raises(io.UnsupportedOperation, match="open"):
        stub.open()
    with pytest.raises(OSError):
        stub.read_bytes()


def test_stub_path_unchanged_after_failed_mutation(stub):
    with pytest.raises(TNStubOperationError):
        stub.set_path("elsewhere")
    assert stub.relative_path.path_string == "a/b"
