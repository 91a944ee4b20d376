from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path

from dayplan.errors import DocumentFormatError, DocumentIOError
from dayplan.model import Activity
from dayplan.schedule import Schedule
from dayplan.store import (
    dated_document_path,
    find_documents,
    is_valid_document,
    load_schedule,
    named_document_path,
    save_schedule,
    schedule_from_document,
    schedule_to_document,
)
from dayplan.util.clock import FixedClock

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURES = REPO_ROOT / "tests" / "fixtures"


class TestStoreContract(unittest.TestCase):
    def test_load_fixture_recomputes(self) -> None:
        res = load_schedule(FIXTURES / "plan_anchored_day.json", clock=FixedClock.at("08:00"))
        s = res.schedule
        self.assertEqual(res.date, "2024-01-15")
        self.assertEqual(res.warnings, [])
        self.assertEqual([a.name for a in s], ["A", "B", "C", "D"])
        self.assertEqual(s.get(0).actual, 210)
        self.assertEqual(s.get(2).start_str, "13:54")

    def test_document_shape(self) -> None:
        s = Schedule(300, clock=FixedClock.at("08:00"), activities=[Activity.fixed_at("A", "10:00", 30, rigid=True), Activity("B", 20)])
        s.recompute()
        doc = schedule_to_document(s)
        self.assertEqual(doc["date"], "2024-01-15")
        self.assertEqual(doc["dayLength"], 300)
        self.assertEqual(
            doc["tasks"][0],
            {"name": "A", "startTime": "10:00", "length": 30, "rigid": True, "fixed": True},
        )
        self.assertFalse(doc["tasks"][1]["fixed"])

    def test_save_and_load_roundtrip(self) -> None:
        s = load_schedule(FIXTURES / "plan_anchored_day.json").schedule
        with tempfile.TemporaryDirectory() as td:
            out = Path(td) / "nested" / "plan.json"
            save_schedule(s, out, date="2024-01-15")
            text = out.read_text(encoding="utf-8")
            self.assertTrue(text.startswith('{\n  "date": "2024-01-15"'), text[:40])
            again = load_schedule(out).schedule
        self.assertEqual([a.snapshot() for a in again], [a.snapshot() for a in s])
        self.assertEqual([a.actual for a in again], [a.actual for a in s])

    def test_malformed_task_is_skipped_with_warning(self) -> None:
        doc = {
            "dayLength": 420,
            "tasks": [
                {"name": "ok", "length": 30, "rigid": False, "fixed": False},
                {"name": "", "length": 30, "rigid": False, "fixed": False},
                {"name": "nostart", "length": 30, "rigid": False, "fixed": True},
                {"name": "badstart", "startTime": "25:00", "length": 30, "rigid": False, "fixed": True},
                {"name": "neg", "length": -5, "rigid": False, "fixed": False},
                "nope",
            ],
        }
        res = schedule_from_document(doc, clock=FixedClock.at("08:00"))
        self.assertEqual([a.name for a in res.schedule], ["ok"])
        self.assertEqual(len(res.warnings), 5)
        self.assertIsNone(res.date)

    def test_malformed_document_is_rejected(self) -> None:
        for doc in ([], {"tasks": []}, {"dayLength": 420}, {"dayLength": "7", "tasks": []}, {"dayLength": 420, "tasks": {}}):
            with self.assertRaises(DocumentFormatError, msg=repr(doc)):
                schedule_from_document(doc)

    def test_load_errors(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            td = Path(td)
            with self.assertRaises(DocumentIOError):
                load_schedule(td / "missing.json")
            bad = td / "bad.json"
            bad.write_text("{not json", encoding="utf-8")
            with self.assertRaises(DocumentFormatError):
                load_schedule(bad)

    def test_document_naming(self) -> None:
        self.assertEqual(dated_document_path("data", "2024-01-15"), Path("data") / "tasks_2024-01-15.json")
        self.assertEqual(named_document_path("data", "work"), Path("data") / "work.json")
        self.assertEqual(named_document_path("data", "work.json"), Path("data") / "work.json")
        self.assertEqual(named_document_path("data", "other/day.json"), Path("other") / "day.json")
        self.assertEqual(dated_document_path("d", "2024-01-15", ".plan"), Path("d") / "tasks_2024-01-15.plan")

    def test_find_documents_newest_first(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            td = Path(td)
            older = td / "tasks_2024-01-14.json"
            newer = td / "tasks_2024-01-15.json"
            doc = {"dayLength": 420, "tasks": []}
            older.write_text(json.dumps(doc), encoding="utf-8")
            newer.write_text(json.dumps(doc), encoding="utf-8")
            os.utime(older, (1_700_000_000, 1_700_000_000))
            os.utime(newer, (1_700_000_100, 1_700_000_100))
            (td / "notes.json").write_text('{"hello": 1}', encoding="utf-8")
            (td / "readme.txt").write_text("x", encoding="utf-8")

            self.assertTrue(is_valid_document(newer))
            self.assertFalse(is_valid_document(td / "notes.json"))
            self.assertEqual(find_documents(td), [newer, older])
        self.assertEqual(find_documents(td / "gone"), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
