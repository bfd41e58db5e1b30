"""
Unit tests for local storage of the schedule and the pair history.

Storage contract:
- Missing/invalid file -> empty list, never an exception
- Invalid records are skipped, valid ones kept
- The pair history never grows beyond HISTORY_WINDOW records (oldest evicted)
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from classgrid import storage
from classgrid.groups import HISTORY_WINDOW
from classgrid.model import new_entry


class TestScheduleStorage(unittest.TestCase):
    def test_load_missing_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(storage.load_entries(Path(d) / "missing.json"), [])

    def test_load_corrupt_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(storage.load_entries(p), [])
            p.write_text('{"classes": []}', encoding="utf-8")
            self.assertEqual(storage.load_entries(p), [])

    def test_save_and_load_roundtrip(self) -> None:
        entries = [
            new_entry("Calculus II", ["Mon", "Wed"], "09:00", "10:15", "Blue", instructor="Dr. Ng"),
            new_entry("Chemie", ["Fri"], "13:00", "15:00", "Amber", location="Hörsaal 3"),
        ]
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "schedule.json"
            storage.save_entries(entries, p)
            self.assertEqual(storage.load_entries(p), entries)

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data[0]["startTime"], "09:00")
            self.assertEqual(data[1]["location"], "Hörsaal 3")

    def test_invalid_and_duplicate_entries_are_skipped(self) -> None:
        good = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal").to_dict()
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.json"
            p.write_text(json.dumps([good, {"id": "x", "name": "Bad"}, good, 42]), encoding="utf-8")
            loaded = storage.load_entries(p)
            self.assertEqual([e.id for e in loaded], [good["id"]])

    def test_entries_with_unparseable_fields_are_skipped(self) -> None:
        good = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal").to_dict()
        bad_time = {**good, "id": "x", "startTime": "\u00b2:00"}
        bad_color = {**good, "id": "y", "color": "#ff0000"}
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.json"
            p.write_text(json.dumps([bad_time, bad_color]), encoding="utf-8")
            self.assertEqual(storage.load_entries(p), [])


class TestHistoryStorage(unittest.TestCase):
    def test_missing_history_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(storage.load_history(Path(d) / "pair_history.json"), [])

    def test_history_roundtrip_and_bound(self) -> None:
        history = [[[f"P{i}", f"Q{i}"]] for i in range(HISTORY_WINDOW + 5)]
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "pair_history.json"
            storage.save_history(history, p)
            loaded = storage.load_history(p)
            self.assertEqual(len(loaded), HISTORY_WINDOW)
            self.assertEqual(loaded[0], [["P5", "Q5"]])
            self.assertEqual(loaded[-1], history[-1])

    def test_malformed_pairs_are_dropped(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "pair_history.json"
            p.write_text(json.dumps([[["A", "B"], ["C"], [1, 2]], "junk"]), encoding="utf-8")
            self.assertEqual(storage.load_history(p), [[["A", "B"]]])

    def test_clear_history(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "pair_history.json"
            storage.save_history([[["A", "B"]]], p)
            storage.clear_history(p)
            self.assertFalse(p.exists())
            # clearing twice is fine
            storage.clear_history(p)


class TestDataDir(unittest.TestCase):
    def tearDown(self) -> None:
        storage.set_data_dir(None)

    def test_env_variable(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with mock.patch.dict(os.environ, {storage.ENV_DATA_DIR: d}):
                storage.set_data_dir(None)
                self.assertEqual(storage.default_data_dir(), Path(d))
                storage.save_entries([new_entry("Math", ["Tue"], "08:00", "09:00", "Teal")])
                self.assertTrue((Path(d) / storage.SCHEDULE_FILE).exists())

    def test_override_wins(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with mock.patch.dict(os.environ, {storage.ENV_DATA_DIR: "/nonexistent"}):
                storage.set_data_dir(d)
                self.assertEqual(storage.default_data_dir(), Path(d))


if __name__ == "__main__":
    unittest.main()
