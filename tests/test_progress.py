"""
Unit tests for the progress store.
"""

import json

import pytest

from staffacademy.progress import ProgressRecord, ProgressStore, merge_progress


@pytest.mark.parametrize("content", [
    "",
    "{not json",
    "[1, 2, 3]",
    "42",
    "null",
    '"text"',
])
def test_load_malformed_returns_empty(tmp_path, content):
    path = tmp_path / "progress.json"
    path.write_text(content, encoding="utf-8")
    assert ProgressStore(str(path)).load() == {}


def test_load_missing_file_returns_empty(tmp_path):
    assert ProgressStore(str(tmp_path / "missing.json")).load() == {}


def test_load_drops_non_object_records(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"a": {"playedSeconds": 3}, "b": 7}), encoding="utf-8")
    assert ProgressStore(str(path)).load() == {"a": {"playedSeconds": 3}}


def test_update_persists_full_map(tmp_path):
    path = tmp_path / "progress.json"
    store = ProgressStore(str(path))
    store.load()

    store.update("v1", {"playedSeconds": 10, "duration": 100, "lastSeen": 1})
    store.update("v2", {"playedSeconds": 5, "duration": 50, "lastSeen": 2})

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved == {
        "v1": {"playedSeconds": 10, "duration": 100, "lastSeen": 1},
        "v2": {"playedSeconds": 5, "duration": 50, "lastSeen": 2},
    }
    assert ProgressStore(str(path)).load() == saved


def test_save_failure_is_swallowed(tmp_path):
    # the target is a directory, so opening it for writing fails
    store = ProgressStore(str(tmp_path))
    store.save({"v1": {"playedSeconds": 1}})


def test_save_unserializable_is_swallowed(tmp_path):
    path = tmp_path / "progress.json"
    ProgressStore(str(path)).save({"v1": {"playedSeconds": object()}})
    assert not path.exists()


def test_merge_leaves_other_entries_untouched():
    original = {"a": {"playedSeconds": 1, "duration": 10}, "b": {"playedSeconds": 2}}
    merged = merge_progress(original, "a", {"playedSeconds": 4})

    assert merged["a"] == {"playedSeconds": 4, "duration": 10}
    assert merged["b"] is original["b"]
    # input not mutated
    assert original["a"] == {"playedSeconds": 1, "duration": 10}


def test_merge_is_idempotent():
    partial = {"playedSeconds": 12.5, "lastSeen": 99}
    once = merge_progress({}, "x", partial)
    twice = merge_progress(once, "x", partial)
    assert once == twice


def test_merge_creates_missing_record():
    assert merge_progress({}, "new", {"duration": 30}) == {"new": {"duration": 30}}


def test_record_from_dict_tolerates_bad_fields():
    record = ProgressRecord.from_dict({"playedSeconds": "abc", "duration": None})
    assert record == ProgressRecord(0, 0, 0)
    assert ProgressRecord.from_dict("junk") == ProgressRecord()


def test_record_round_trip_keys():
    record = ProgressRecord(played_seconds=3.0, duration=9.0, last_seen=5)
    assert record.to_dict() == {"playedSeconds": 3.0, "duration": 9.0, "lastSeen": 5}


def test_non_finite_numbers_load_as_zero(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(
        '{"fire-101": {"playedSeconds": Infinity, "duration": 1e400, "lastSeen": NaN}}',
        encoding="utf-8",
    )
    progress = ProgressStore(str(path)).load()
    assert ProgressRecord.from_dict(progress["fire-101"]) == ProgressRecord(0, 0, 0)


def test_non_finite_progress_renders_in_continue_watching(tmp_path, catalog):
    from staffacademy.library import continue_watching

    path = tmp_path / "progress.json"
    path.write_text(
        '{"fire-101": {"playedSeconds": Infinity, "duration": 10, "lastSeen": NaN},'
        ' "lift-2": {"playedSeconds": -Infinity, "duration": NaN, "lastSeen": 5}}',
        encoding="utf-8",
    )
    entries = continue_watching(ProgressStore(str(path)).load(), catalog)
    assert [e.video.id for e in entries] == ["lift-2", "fire-101"]
    assert [e.percent for e in entries] == [0, 0]


@pytest.mark.parametrize("value", [10 ** 400, "inf", "nan"])
def test_record_rejects_unrepresentable_numbers(value):
    assert ProgressRecord.from_dict({"playedSeconds": value}).played_seconds == 0
