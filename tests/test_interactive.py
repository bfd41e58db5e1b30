"""
Tests for the interactive menu.

Input is scripted by patching `_prompt`; output goes to an in-memory console.
User text containing rich markup (e.g. '[/]') must print literally.
"""

import io
import tempfile
import unittest
from unittest import mock

from rich.console import Console

from classgrid import interactive, storage


class TestInteractive(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        storage.set_data_dir(self._tmp.name)
        self.out = io.StringIO()
        self._console = mock.patch.object(interactive, "console", Console(file=self.out, width=200))
        self._console.start()

    def tearDown(self) -> None:
        self._console.stop()
        storage.set_data_dir(None)
        self._tmp.cleanup()

    def run_script(self, *answers: str) -> str:
        with mock.patch.object(interactive, "_prompt", side_effect=list(answers)):
            interactive.run_interactive()
        return self.out.getvalue()

    def test_invalid_time_with_markup_is_reported(self) -> None:
        # name, instructor, location, days, start, end, color, then exit
        out = self.run_script("1", "Calc", "", "", "Mon", "[/]", "10:00", "", "0")
        self.assertIn("Invalid time format: '[/]'", out)
        self.assertEqual(storage.load_entries(), [])

    def test_names_with_markup_are_added_and_removed(self) -> None:
        out = self.run_script(
            "1", "[/]Calc [bold]", "", "", "Mon", "09:00", "10:00", "",
            "3", "1",
            "0",
        )
        self.assertIn("Class added", out)
        self.assertIn("Class removed: [/]Calc [bold]", out)
        self.assertEqual(storage.load_entries(), [])

    def test_broken_share_link_keeps_session(self) -> None:
        out = self.run_script("7", "https://classgrid.app/builder?s=[/]", "0")
        self.assertIn("Could not read the shared schedule.", out)
        self.assertIn("Bye.", out)

    def test_group_names_with_markup_print_literally(self) -> None:
        with mock.patch.object(interactive, "copy_to_clipboard", return_value=False):
            out = self.run_script(
                "9", "A[/]", "B", "C", "",
                "1", "2",
                "3", "0",
                "0",
            )
        self.assertIn("3 names detected", out)
        self.assertIn("Clipboard not available", out)
        self.assertIn("A[/]", out)
        self.assertEqual(len(storage.load_history()), 1)


class TestPrompt(unittest.TestCase):
    def test_prompt_text_is_not_markup(self) -> None:
        out = io.StringIO()
        with mock.patch.object(interactive, "console", Console(file=out, width=200)):
            with mock.patch("builtins.input", return_value="y"):
                answer = interactive._prompt("Remove ALL classes? [y/N]: ")
        self.assertEqual(answer, "y")
        self.assertIn("[y/N]", out.getvalue())


if __name__ == "__main__":
    unittest.main()
