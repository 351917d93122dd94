"""Template expansion use case: filtered files under synthesized directories."""
from treenorm import CopyPolicy, IterableStream, MemoryTreeAction, NormalizingCopyAction, TreeEntry


def test_expand_templates_into_nested_config():
    policy = CopyPolicy(include_empty_dirs=False, file_mode=0o640)
    entries = [
        TreeEntry.file("etc/app/app.conf", b"port=${port}\nhost=${host}\n", policy=policy)
        .expand({"port": 8080, "host": "localhost"}),
        TreeEntry.file("etc/app/motd", b"welcome", policy=policy).filter(bytes.upper),
    ]
    tree = MemoryTreeAction()
    NormalizingCopyAction(tree).execute(IterableStream(entries))
    assert tree.read_bytes("/etc/app/app.conf") == b"port=8080\nhost=localhost\n"
    assert tree.read_bytes("/etc/app/motd") == b"WELCOME"
    assert tree.get_mode("/etc/app/motd") == 0o640


def test_renamed_entry_lands_at_new_path():
    entry = TreeEntry.file("tmpl/index.html.in", b"<html/>")
    entry.set_path("site/index.html")
    tree = MemoryTreeAction()
    NormalizingCopyAction(tree).execute(IterableStream([entry]))
    assert tree.listdir("/") == ["site"]
    assert tree.read_bytes("/site/index.html") == b"<html/>"
