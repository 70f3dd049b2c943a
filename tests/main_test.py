import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from kotoba.main import build_parser, main


class MainTestCase(unittest.TestCase):

    def write(self, source):
        file = tempfile.NamedTemporaryFile("w", suffix=".kt", delete=False)
        with file:
            file.write(source)
        self.addCleanup(os.remove, file.name)
        return file.name

    def run_main(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            main(argv)
        return out.getvalue()

    def test_args(self):
        args = build_parser().parse_args(["prog.kt", "--short-circuit"])
        self.assertEqual("prog.kt", args.file)
        self.assertTrue(args.short_circuit)
        self.assertFalse(args.ast)

        args = build_parser().parse_args([])
        self.assertIsNone(args.file)

    def test_file(self):
        path = self.write("println(\"hello\"),\n2 * 3 + 4\n")
        self.assertEqual("hello\n10\n", self.run_main([path]))

    def test_short_circuit(self):
        path = self.write("false and println(\"rhs\") == nil")
        self.assertEqual("rhs\nfalse\n", self.run_main([path]))
        self.assertEqual("false\n", self.run_main([path, "--short-circuit"]))

    def test_exit_code(self):
        should_fail = {
            "-true": 2,
            "1 + true": 3,
            "x": 4,
            "while 1 : ;": 5,
        }
        for case, code in should_fail.items():
            path = self.write(case)
            with self.assertRaises(SystemExit, msg=case) as context:
                self.run_main([path])
            self.assertEqual(code, context.exception.code, case)

    def test_parse_error_not_fatal(self):
        path = self.write("(1 + 2")
        out = self.run_main([path])
        self.assertIn("unclosed grouping", out)
        self.assertTrue(out.endswith("nil\n"))


if __name__ == '__main__':
    unittest.main()
