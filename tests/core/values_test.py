import math
import unittest

from kotoba.core.values import NIL, Boolean, Nil, Number, String, format_number


class ValueTestCase(unittest.TestCase):

    def test_display(self):
        should_pass = {
            Number(5.0): "5",
            Number(-5.0): "-5",
            Number(2.5): "2.5",
            Number(-0.0): "-0",
            Number(1e21): "1000000000000000000000",
            Number(1e23): "100000000000000000000000",
            Number(-1e22): "-10000000000000000000000",
            Number(1e16): "10000000000000000",
            Number(1e-7): "0.0000001",
            Number(math.inf): "inf",
            Number(-math.inf): "-inf",
            Number(math.nan): "NaN",
            Boolean(True): "true",
            Boolean(False): "false",
            String("hi there"): "\"hi there\"",
            String("a\"b"): "\"a\"b\"",
            Nil(): "nil",
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, str(case), repr(case))

    def test_raw(self):
        self.assertEqual("hi", String("hi").raw)
        self.assertEqual("2.5", Number(2.5).raw)
        self.assertEqual("nil", NIL.raw)

    def test_equality(self):
        should_pass = [
            (Number(1.0), Number(1.0)),
            (String("a"), String("a")),
            (Boolean(False), Boolean(False)),
            (Nil(), NIL),
        ]
        for lhs, rhs in should_pass:
            self.assertEqual(lhs, rhs)

        should_fail = [
            (Number(1.0), Boolean(True)),
            (Number(0.0), Boolean(False)),
            (Number(0.0), NIL),
            (String(""), NIL),
            (String("1"), Number(1.0)),
            (Number(1.0), Number(2.0)),
            (Number(math.nan), Number(math.nan)),
        ]
        for lhs, rhs in should_fail:
            self.assertNotEqual(lhs, rhs)
            self.assertNotEqual(rhs, lhs)

    def test_format_number(self):
        self.assertEqual("14", format_number(14.0))
        self.assertEqual(str(18 / (3 * 4.5)), format_number(18 / (3 * 4.5)))


if __name__ == '__main__':
    unittest.main()
