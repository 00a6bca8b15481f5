import threading
from datetime import datetime, timezone

import pytest

from filekeeper.core.errors import NotFound
from filekeeper.services.metadata import FileMetadata


def _record(**custom):
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return FileMetadata(size=3, created=now, modified=now, type="txt",
                        original_name="a.txt", custom_metadata=custom)


def test_put_get(store):
    store.put("1-a.txt", _record(tag="x"))
    got = store.get("1-a.txt")
    assert got.custom_metadata == {"tag": "x"}
    assert store.get("missing") is None


def test_get_returns_copy(store):
    store.put("1-a.txt", _record(tag="x"))
    store.get("1-a.txt").custom_metadata["tag"] = "changed"
    assert store.get("1-a.txt").custom_metadata["tag"] == "x"


def test_merge_is_shallow(store):
    store.put("1-a.txt", _record(tag="x", keep={"n": 1}))
    updated = store.merge("1-a.txt", {"tag": "y", "new": True})
    assert updated.custom_metadata == {"tag": "y", "keep": {"n": 1}, "new": True}
    assert updated.size == 3
    assert updated.original_name == "a.txt"


def test_merge_missing(store):
    with pytest.raises(NotFound):
        store.merge("nope", {"a": 1})


def test_delete_is_noop_when_absent(store):
    store.delete("nope")
    store.put("1-a.txt", _record())
    store.delete("1-a.txt")
    assert "1-a.txt" not in store
    assert len(store) == 0


def test_all_snapshot(store):
    store.put("1-a.txt", _record())
    snap = store.all()
    store.put("2-b.txt", _record())
    assert list(snap) == ["1-a.txt"]


def test_json_uses_wire_names():
    data = _record(tag="x").to_json()
    assert data["originalName"] == "a.txt"
    assert data["customMetadata"] == {"tag": "x"}
    assert data["created"].startswith("2024-05-01T12:00:00")


def test_concurrent_merges_keep_every_key(store):
    store.put("1-a.txt", _record())

    def worker(i):
        store.merge("1-a.txt", {f"k{i}": i})

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.get("1-a.txt").custom_metadata) == 50
