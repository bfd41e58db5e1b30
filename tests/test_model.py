import unittest

from classgrid.model import (
    CLASS_COLORS,
    ClassEntry,
    ValidationError,
    color_by_name,
    format_time,
    minutes_to_time,
    new_entry,
    next_color,
    normalize_days,
    time_to_minutes,
)


class TestTimes(unittest.TestCase):
    def test_time_to_minutes(self) -> None:
        self.assertEqual(time_to_minutes("00:00"), 0)
        self.assertEqual(time_to_minutes("09:30"), 570)
        self.assertEqual(time_to_minutes("23:59"), 1439)

    def test_invalid_times_rejected(self) -> None:
        # two ASCII digits on each side, nothing else
        odd = ("\u00b2:00", "9:5", "009:00", "9:00", "\uff10\uff19:\uff10\uff10")
        for bad in ("24:00", "12:60", "noon", "10", "", "-1:00") + odd:
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    time_to_minutes(bad)

    def test_minutes_to_time(self) -> None:
        self.assertEqual(minutes_to_time(545), "09:05")

    def test_format_time(self) -> None:
        self.assertEqual(format_time("13:05"), "1:05 PM")
        self.assertEqual(format_time("00:00"), "12:00 AM")
        self.assertEqual(format_time("12:30"), "12:30 PM")


class TestEntry(unittest.TestCase):
    def test_days_have_set_semantics(self) -> None:
        self.assertEqual(normalize_days(["wed", "Mon", "mon"]), ["Mon", "Wed"])
        with self.assertRaises(ValidationError):
            normalize_days(["Funday"])

    def test_new_entry_trims_and_assigns_id(self) -> None:
        e = new_entry("  Calculus II ", ["Fri", "Mon"], "09:00", "10:15", "rose", instructor="  ", location=" B12 ")
        self.assertEqual(e.name, "Calculus II")
        self.assertEqual(e.days, ["Mon", "Fri"])
        self.assertEqual(e.color, "350 80% 55%")
        self.assertIsNone(e.instructor)
        self.assertEqual(e.location, "B12")
        self.assertTrue(e.id)

    def test_ids_are_unique(self) -> None:
        ids = {new_entry("X", ["Mon"], "09:00", "10:00", "Blue").id for _ in range(50)}
        self.assertEqual(len(ids), 50)

    def test_validation(self) -> None:
        with self.assertRaises(ValidationError):
            new_entry("   ", ["Mon"], "09:00", "10:00", "Blue")
        with self.assertRaises(ValidationError):
            new_entry("Math", [], "09:00", "10:00", "Blue")
        with self.assertRaises(ValidationError):
            new_entry("Math", ["Mon"], "9am", "10:00", "Blue")
        with self.assertRaises(ValidationError):
            new_entry("Math", ["Mon"], "09:00", "10:00", "Plaid")

    def test_end_before_start_is_not_rejected(self) -> None:
        e = new_entry("Late", ["Mon"], "22:00", "08:00", "Blue")
        self.assertEqual(e.end_minutes, 480)

    def test_dict_form(self) -> None:
        e = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal")
        d = e.to_dict()
        self.assertEqual(d["startTime"], "08:00")
        self.assertEqual(d["endTime"], "09:00")
        self.assertNotIn("instructor", d)
        self.assertEqual(ClassEntry.from_dict(d), e)

    def test_from_dict_rejects_malformed(self) -> None:
        good = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal").to_dict()
        for key, value in (("id", ""), ("days", "Tue"), ("startTime", "8"), ("color", None), ("name", "")):
            with self.subTest(key=key):
                with self.assertRaises(ValidationError):
                    ClassEntry.from_dict({**good, key: value})
        with self.assertRaises(ValidationError):
            ClassEntry.from_dict(["not", "a", "dict"])

    def test_from_dict_requires_palette_color(self) -> None:
        good = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal").to_dict()
        with self.assertRaises(ValidationError):
            ClassEntry.from_dict({**good, "color": "#ff0000"})
        self.assertEqual(ClassEntry.from_dict({**good, "color": "blue"}).color, "220 90% 56%")

    def test_with_changes_keeps_id(self) -> None:
        e = new_entry("Math", ["Tue"], "08:00", "09:00", "Teal")
        changed = e.with_changes(name=" Physics ", days=["thu"])
        self.assertEqual(changed.id, e.id)
        self.assertEqual(changed.name, "Physics")
        self.assertEqual(changed.days, ["Thu"])
        with self.assertRaises(ValidationError):
            e.with_changes(id="other")


class TestColors(unittest.TestCase):
    def test_color_by_name_and_value(self) -> None:
        self.assertEqual(color_by_name("blue"), "220 90% 56%")
        self.assertEqual(color_by_name("220 90% 56%"), "220 90% 56%")

    def test_next_color(self) -> None:
        values = [v for _, v in CLASS_COLORS]
        self.assertEqual(next_color([]), values[0])
        self.assertEqual(next_color(values[:3]), values[3])
        self.assertEqual(next_color(values), values[0])


if __name__ == "__main__":
    unittest.main()
