from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from typing import List

REPO_ROOT = Path(__file__).resolve().parents[1]
FIXTURES = REPO_ROOT / "tests" / "fixtures"


def _py() -> str:
    return os.environ.get("PYTHON", "python3")


class TestCliContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)
        self.data = self.td / "data"
        self.data.mkdir()
        shutil.copy(FIXTURES / "plan_flex_day.json", self.data / "tasks_2024-01-15.json")
        shutil.copy(FIXTURES / "plan_anchored_day.json", self.data / "work.json")
        self.session = self.td / ".task_session"

    def tearDown(self) -> None:
        self._td.cleanup()

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd: List[str] = [
            _py(),
            "-m",
            "dayplan",
            "--config",
            str(self.td / "plan.conf"),
            "--data-dir",
            str(self.data),
            "--session-file",
            str(self.session),
            *args,
        ]
        env = dict(os.environ)
        env.pop("DAYPLAN_OBS_LOG", None)
        return subprocess.run(cmd, cwd=str(REPO_ROOT), text=True, capture_output=True, env=env)

    def test_list_dated_document(self) -> None:
        p = self._run("list", "2024-01-15")
        self.assertEqual(p.returncode, 0, p.stderr)
        lines = p.stdout.splitlines()
        self.assertEqual(lines[:2], ["Today's Tasks:", "============="])
        self.assertEqual(lines[2], "1. A [FLEX] (09:00 - 11:20, 140 min)")
        self.assertEqual(lines[4], "3. C [FLEX] (13:40 - 16:00, 140 min)")

    def test_single_date_argument_lists(self) -> None:
        p = self._run("2024-01-15")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertIn("2. B [FLEX] (11:20 - 13:40, 140 min)", p.stdout)

    def test_named_document(self) -> None:
        p = self._run("list", "work")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertIn("1. A [FIXED] (10:00 - 13:30, 210 min)", p.stdout)
        self.assertIn("3. C [FLEX] (13:54 - 16:22, 148 min)", p.stdout)

    def test_now_and_next(self) -> None:
        p = self._run("now", "2024-01-15", "--at", "11:30")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertEqual(p.stdout.strip(), "B (ends at 13:40, 130 min remaining)")

        p = self._run("next", "2024-01-15", "--at", "11:30")
        self.assertEqual(p.stdout.strip(), "C (starts at 13:40, in 130 minutes)")

        p = self._run("now", "2024-01-15", "--at", "08:00")
        self.assertEqual(p.stdout.strip(), "No active task at current time (08:00)")

        p = self._run("next", "2024-01-15", "--at", "23:00")
        self.assertEqual(p.stdout.strip(), "No upcoming tasks today")

    def test_unknown_command(self) -> None:
        p = self._run("bogus", "2024-01-15")
        self.assertEqual(p.returncode, 1)
        self.assertIn("Unknown command: bogus", p.stderr)
        self.assertIn("Usage: dayplan", p.stderr)

    def test_help(self) -> None:
        for args in (("help",), ("--help",), ("-h",)):
            p = self._run(*args)
            self.assertEqual(p.returncode, 0, args)
            self.assertIn("Usage: dayplan", p.stdout)

    def test_session_remembers_last_document(self) -> None:
        p = self._run("list", "work")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertEqual(Path(self.session.read_text(encoding="utf-8").strip()), self.data / "work.json")

        p = self._run()
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertIn("2. B [FIXED] (13:30 - 13:54, 24 min)", p.stdout)

    def test_missing_document_is_empty(self) -> None:
        p = self._run("list", "2030-01-01")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertEqual(p.stdout.splitlines(), ["Today's Tasks:", "============="])
        self.assertFalse(self.session.exists())

    def test_files_lists_documents(self) -> None:
        (self.data / "junk.json").write_text("[]", encoding="utf-8")
        p = self._run("files")
        self.assertEqual(p.returncode, 0, p.stderr)
        listed = sorted(Path(line).name for line in p.stdout.splitlines())
        self.assertEqual(listed, ["tasks_2024-01-15.json", "work.json"])

    def test_invalid_document_fails(self) -> None:
        (self.data / "broken.json").write_text('{"tasks": []}', encoding="utf-8")
        p = self._run("list", "broken")
        self.assertEqual(p.returncode, 2)
        self.assertIn("[dayplan] ERROR:", p.stderr)

    def test_conflict_warning_on_stderr(self) -> None:
        (self.data / "clash.json").write_text(
            '{"dayLength": 420, "tasks": ['
            '{"name": "A", "startTime": "11:00", "length": 60, "rigid": false, "fixed": true},'
            '{"name": "B", "startTime": "10:00", "length": 30, "rigid": false, "fixed": true}]}',
            encoding="utf-8",
        )
        p = self._run("list", "clash")
        self.assertEqual(p.returncode, 0, p.stderr)
        self.assertIn("A (starts 11:00) conflicts with B (starts 10:00)", p.stderr)

    def test_invalid_at_value(self) -> None:
        p = self._run("now", "--at", "99:99")
        self.assertEqual(p.returncode, 2)
        self.assertIn("Invalid --at value", p.stderr)


if __name__ == "__main__":
    unittest.main(verbosity=2)
