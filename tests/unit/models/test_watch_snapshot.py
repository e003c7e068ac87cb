from autoschema.models.snapshot import ChangeSet, WatchSnapshot


def test_snapshot_normalizes_hashes() -> None:
    snapshot = WatchSnapshot(hashes={"/a.py": "ABCDEF"})

    assert snapshot.hashes["/a.py"] == "abcdef"
    assert "/a.py" in snapshot
    assert len(snapshot) == 1


def test_empty_change_set_has_no_changes() -> None:
    changes = ChangeSet()

    assert not changes.has_changes
    assert changes.items() == []


def test_change_set_items_skip_empty_groups() -> None:
    changes = ChangeSet(added=["/b.py"], deleted=["/c.py"])

    assert changes.has_changes
    assert changes.items() == [("added", ["/b.py"]), ("deleted", ["/c.py"])]
