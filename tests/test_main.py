import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from floorsketch.features.editing.draw import BuilderState, PathBuilder
from floorsketch.main import ScriptError, main, parse_line, parse_script, replay

SQUARE_SCRIPT = """\
# a 10 ft room
activate
start 100 100
move 10 0
move 10 90
move 10 180
move 10 270   # back to p0
"""


class ParseTests(unittest.TestCase):
    def test_comments_and_blank_lines(self):
        self.assertIsNone(parse_line("   # nothing", 1))
        self.assertIsNone(parse_line("", 2))
        self.assertEqual(len(parse_script(SQUARE_SCRIPT.splitlines())), 6)

    def test_arguments(self):
        cmd = parse_line("MOVE 12.5 45", 3)
        self.assertEqual((cmd.name, cmd.args, cmd.line_no), ("move", (12.5, 45.0), 3))
        self.assertEqual(parse_line("resume 2 1", 1).args, (2, 1))

    def test_errors(self):
        for line in ("jump 1 2", "move 5", "move five 0", "undo 1", "resume 1.5"):
            with self.subTest(line=line):
                with self.assertRaises(ScriptError):
                    parse_line(line, 1)


class ReplayTests(unittest.TestCase):
    def test_square(self):
        builder = PathBuilder()
        failures = replay(builder, parse_script(SQUARE_SCRIPT.splitlines()))
        self.assertEqual(failures, 0)
        self.assertEqual(len(builder.polygons), 1)
        self.assertEqual(builder.state, BuilderState.CLOSED)

    def test_state_errors_are_counted(self):
        builder = PathBuilder()
        failures = replay(builder, parse_script(["move 10 0", "resume 5"]))
        self.assertEqual(failures, 2)

    def test_resume_polygon(self):
        builder = PathBuilder()
        lines = SQUARE_SCRIPT.splitlines() + ["resume 2 1", "undo"]
        self.assertEqual(replay(builder, parse_script(lines)), 0)
        self.assertEqual(builder.polygons, ())
        self.assertEqual(len(builder.open_path), 2)


class MainTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.script = os.path.join(self.tmp.name, "room.txt")

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text):
        with open(self.script, "w", encoding="utf-8") as f:
            f.write(text)

    def test_summary_and_csv(self):
        self.write(SQUARE_SCRIPT)
        out_csv = os.path.join(self.tmp.name, "rooms.csv")
        buffer = io.StringIO()
        with redirect_stdout(buffer), self.assertLogs("floorsketch", level="INFO"):
            code = main([self.script, "--csv", out_csv])
        self.assertEqual(code, 0)
        self.assertIn("1 polygon(s), total area 100.00 sq ft", buffer.getvalue())
        self.assertTrue(os.path.exists(out_csv))

    def test_parse_error_exit_code(self):
        self.write("start 0 0\nfly away\n")
        with self.assertLogs("floorsketch", level="ERROR"):
            self.assertEqual(main([self.script]), 2)

    def test_missing_script(self):
        with self.assertLogs("floorsketch", level="ERROR"):
            self.assertEqual(main([os.path.join(self.tmp.name, "missing.txt")]), 2)

    def test_engine_errors_give_non_zero_exit(self):
        self.write("move 10 0\n")
        with redirect_stdout(io.StringIO()), self.assertLogs("floorsketch", level="ERROR"):
            self.assertEqual(main([self.script]), 1)


if __name__ == "__main__":
    unittest.main()
