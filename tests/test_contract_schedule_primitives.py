from __future__ import annotations

import unittest

from dayplan.errors import ValidationError
from dayplan.model import Activity
from dayplan.schedule import EDITABLE_FIELDS, Schedule, clean_length, parse_yes_no
from dayplan.util.clock import FixedClock


def _names(s: Schedule) -> list:
    return [a.name for a in s]


def _abcd() -> Schedule:
    return Schedule(420, clock=FixedClock.at("10:15"), activities=[Activity(n, 30) for n in "ABCD"])


class TestSchedulePrimitivesContract(unittest.TestCase):
    def test_insert_and_delete_bounds(self) -> None:
        s = _abcd()
        self.assertTrue(s.insert_at(4, Activity("E", 10)))
        self.assertFalse(s.insert_at(6, Activity("F", 10)))
        self.assertFalse(s.insert_at(-1, Activity("F", 10)))
        self.assertEqual(_names(s), ["A", "B", "C", "D", "E"])

        self.assertTrue(s.delete_at(0))
        self.assertFalse(s.delete_at(4))
        self.assertEqual(_names(s), ["B", "C", "D", "E"])

    def test_move_adjacent_swaps_and_is_its_own_inverse(self) -> None:
        s = _abcd()
        self.assertTrue(s.move(1, 2))
        self.assertEqual(_names(s), ["A", "C", "B", "D"])
        self.assertTrue(s.move(2, 1))
        self.assertEqual(_names(s), ["A", "B", "C", "D"])

    def test_move_non_adjacent_adjusts_for_removal(self) -> None:
        s = _abcd()
        self.assertTrue(s.move(0, 3))
        self.assertEqual(_names(s), ["B", "C", "A", "D"])
        self.assertTrue(s.move(3, 0))
        self.assertEqual(_names(s), ["D", "B", "C", "A"])

    def test_move_rejects_noop_and_out_of_range(self) -> None:
        s = _abcd()
        self.assertFalse(s.move(1, 1))
        self.assertFalse(s.move(0, 4))
        self.assertFalse(s.move_up(0))
        self.assertFalse(s.move_down(3))
        self.assertEqual(_names(s), ["A", "B", "C", "D"])

    def test_move_keeps_fixed_flag(self) -> None:
        s = Schedule(420, activities=[Activity.fixed_at("A", "10:00", 30), Activity("B", 30)])
        self.assertTrue(s.move_down(0))
        self.assertTrue(s.get(1).fixed)

    def test_update_field(self) -> None:
        s = _abcd()
        s.update_field(0, "name", "  Alpha ")
        s.update_field(0, "length", "45")
        s.update_field(0, "start", "07:30")
        s.update_field(0, "rigid", "yes")
        a = s.get(0)
        self.assertEqual((a.name, a.length, a.start_abs, a.fixed, a.rigid), ("Alpha", 45, 450, True, True))

        s.update_field(0, "start", "")
        self.assertFalse(a.fixed)
        s.update_field(0, "fixed", "1")
        self.assertTrue(a.fixed)

    def test_update_field_rejects_without_mutating(self) -> None:
        s = _abcd()
        before = s.get(1).snapshot()
        for field, value in (("name", "  "), ("length", "0"), ("length", "ten"), ("start", "25:00"), ("rigid", "maybe")):
            with self.assertRaises(ValidationError, msg=f"{field}={value!r}"):
                s.update_field(1, field, value)
        with self.assertRaises(ValidationError):
            s.update_field(1, "actual", 5)
        with self.assertRaises(ValidationError):
            s.update_field(9, "name", "X")
        self.assertEqual(s.get(1).snapshot(), before)

    def test_update_field_accepts_only_editable_fields(self) -> None:
        s = _abcd()
        values = {"name": "Z", "length": "25", "start": "16:00", "rigid": "yes", "fixed": "no"}
        self.assertEqual(set(values), set(EDITABLE_FIELDS))
        for field in EDITABLE_FIELDS:
            s.update_field(1, field, values[field])
        b = s.get(1)
        self.assertEqual((b.name, b.length, b.start_abs, b.rigid, b.fixed), ("Z", 25, 960, True, False))
        with self.assertRaisesRegex(ValidationError, "Field not editable: 'frozen'"):
            s.update_field(9, "frozen", True)

    def test_anchor_now_uses_clock(self) -> None:
        s = _abcd()
        s.anchor_now(2)
        self.assertTrue(s.get(2).fixed)
        self.assertEqual(s.get(2).start_str, "10:15")

    def test_day_length_and_clear(self) -> None:
        s = _abcd()
        with self.assertRaises(ValidationError):
            s.set_day_length(0)
        s.set_day_length(480)
        self.assertEqual(s.day_length_hours, 8.0)
        s.clear()
        self.assertEqual(len(s), 0)
        with self.assertRaises(ValidationError):
            Schedule(-5)

    def test_validators(self) -> None:
        self.assertEqual(clean_length(" 15 "), 15)
        with self.assertRaises(ValidationError):
            clean_length(-3)
        self.assertTrue(parse_yes_no("Y"))
        self.assertFalse(parse_yes_no("off"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
