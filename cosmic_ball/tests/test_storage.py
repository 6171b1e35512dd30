# cosmic_ball/tests/test_storage.py
"""
High-score persistence tests.

Usage (from repo root):
  python -m cosmic_ball.tests.test_storage
"""
from __future__ import annotations
import json
import tempfile
from pathlib import Path
from cosmic_ball.game.config import HIGHSCORE_KEY
from cosmic_ball.game.storage import HighScoreStore, MemoryStore


def test_missing_file_reads_zero():
    with tempfile.TemporaryDirectory() as d:
        store = HighScoreStore(Path(d) / "none.json")
        assert store.get(HIGHSCORE_KEY) == 0


def test_round_trip_through_disk():
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "sub" / "scores.json"
        HighScoreStore(path).set(HIGHSCORE_KEY, 420)
        assert json.loads(path.read_text(encoding="utf-8")) == {HIGHSCORE_KEY: 420}
        assert HighScoreStore(path).get(HIGHSCORE_KEY) == 420


def test_other_keys_are_preserved():
    with tempfile.TemporaryDirectory() as d:
        path = Path(d) / "scores.json"
        path.write_text(json.dumps({"otherGame": 7}), encoding="utf-8")
        HighScoreStore(path).set(HIGHSCORE_KEY, 10)
        assert json.loads(path.read_text(encoding="utf-8")) == {"otherGame": 7, HIGHSCORE_KEY: 10}


def test_bad_contents_read_zero():
    for text in ("{not json", "[1, 2, 3]", json.dumps({HIGHSCORE_KEY: -5}),
                 json.dumps({HIGHSCORE_KEY: "lots"})):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "scores.json"
            path.write_text(text, encoding="utf-8")
            assert HighScoreStore(path).get(HIGHSCORE_KEY) == 0, text


def test_write_failure_does_not_raise():
    with tempfile.TemporaryDirectory() as d:
        # the path is a directory: both read and write fail
        store = HighScoreStore(d)
        store.set(HIGHSCORE_KEY, 99)
        assert store.get(HIGHSCORE_KEY) == 99


def test_memory_store():
    store = MemoryStore({HIGHSCORE_KEY: 12})
    assert store.get() == 12
    store.set(HIGHSCORE_KEY, -3)
    assert store.get() == 0


def main():
    test_missing_file_reads_zero()
    test_round_trip_through_disk()
    test_other_keys_are_preserved()
    test_bad_contents_read_zero()
    test_write_failure_does_not_raise()
    test_memory_store()
    print("✓ storage tests passed")


if __name__ == "__main__":
    main()
