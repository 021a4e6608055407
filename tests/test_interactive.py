"""
Smoke tests for the interactive screens, driven by scripted prompt answers.
"""

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

import lecturehub.interactive as interactive
from lecturehub.chat import CANNED_REPLY, DoubtsChat
from lecturehub.config import Settings
from lecturehub.session import Session


LECTURES = [
    {"id": "a", "class": "10", "subject": "Math", "title": "Algebra Basics"},
    {"id": "p", "class": "10", "subject": "Science", "title": "Physics"},
]


class TestInteractive(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        (self.data_dir / "FreeLecture.json").write_text(json.dumps(LECTURES), encoding="utf-8")
        self.settings = Settings(backend="local", data_dir=self.data_dir)
        self.out = io.StringIO()
        patcher = mock.patch.object(interactive, "console", Console(file=self.out, width=120))
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _answers(self, *answers: str):
        return mock.patch.object(interactive, "_prompt", side_effect=list(answers))

    def test_subject_search_then_show(self) -> None:
        with self._answers("2", "sci", "1", "", "0"):
            interactive.run_interactive(self.settings, Session(selected_standard="10", name="Asha"))
        text = self.out.getvalue()
        self.assertIn("Hi Asha | lectures=2 | showing=2", text)
        self.assertIn("showing=1", text)
        self.assertIn("Physics", text)
        self.assertIn("Bye.", text)

    def test_empty_list_message(self) -> None:
        with self._answers("1", "0"):
            interactive.run_interactive(self.settings, Session(selected_standard="12"))
        self.assertIn("No lectures available for 12", self.out.getvalue())

    def test_error_then_retry(self) -> None:
        path = self.data_dir / "FreeLecture.json"
        path.rename(self.data_dir / "hidden.json")

        answers = iter(["r", "0"])

        def answer(msg: str) -> str:
            if not path.exists():
                (self.data_dir / "hidden.json").rename(path)
            return next(answers)

        with mock.patch.object(interactive, "_prompt", side_effect=answer):
            interactive.run_interactive(self.settings, Session(selected_standard="10"))
        text = self.out.getvalue()
        self.assertIn("Failed to load lectures", text)
        self.assertIn("lectures=2", text)

    def test_error_exit(self) -> None:
        (self.data_dir / "FreeLecture.json").unlink()
        with self._answers("0"):
            interactive.run_interactive(self.settings, Session(selected_standard="10"))
        text = self.out.getvalue()
        self.assertIn("Failed to load lectures", text)
        self.assertIn("Bye.", text)

    def test_doubts_chat(self) -> None:
        with mock.patch.object(interactive, "DoubtsChat", lambda: DoubtsChat(reply_delay=0)):
            with self._answers("What is gravity?", ""):
                interactive.run_doubts(Session(name="Asha"))
        text = self.out.getvalue()
        self.assertIn("Hello! How can I help you today?", text)
        self.assertIn("What is gravity?", text)
        self.assertIn(CANNED_REPLY, text)

    def test_doubts_use_standard_color(self) -> None:
        out = io.StringIO()
        colored = Console(file=out, width=120, force_terminal=True, color_system="standard")
        with mock.patch.object(interactive, "console", colored):
            with mock.patch.object(interactive, "DoubtsChat", lambda: DoubtsChat(reply_delay=0)):
                with self._answers(""):
                    interactive.run_doubts(Session(name="Asha", standard_color="magenta"))
        text = out.getvalue()
        self.assertIn("Doubts (Asha)", text)
        self.assertIn("\x1b[1;35m", text)
        self.assertNotIn("\x1b[1;36m", text)


class TestStandardStyle(unittest.TestCase):
    def test_known_color(self) -> None:
        self.assertEqual(interactive._standard_style(Session(standard_color="magenta")), "magenta")
        self.assertEqual(interactive._standard_style(Session(standard_color=" #ff8800 ")), "#ff8800")

    def test_empty_or_unknown_uses_default(self) -> None:
        self.assertEqual(interactive._standard_style(Session()), interactive.DEFAULT_STANDARD_COLOR)
        self.assertEqual(
            interactive._standard_style(Session(standard_color="not-a-color")), interactive.DEFAULT_STANDARD_COLOR
        )


if __name__ == "__main__":
    unittest.main()
