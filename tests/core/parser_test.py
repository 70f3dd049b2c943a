import io
import unittest

from kotoba.core.lexical import TokenKind
from kotoba.core.parser import Parser, parse
from kotoba.core.syntax import (
    Assignment,
    BinaryExpr,
    BooleanLiteral,
    FnCall,
    FnStmt,
    Grouping,
    Identifier,
    IfStmt,
    NilLiteral,
    NumberLiteral,
    Program,
    ProgramRoot,
    RetStmt,
    StringLiteral,
    UnaryExpr,
    WhileStmt,
)
from kotoba.lang.error import ErrorHandler, ParseError, ParseErrorKind


def root(*statements):
    return ProgramRoot(tuple(statements))


def body(*statements):
    return Program(tuple(statements))


def num(value):
    return NumberLiteral(float(value))


def binary(operator, lhs, rhs):
    return BinaryExpr(operator, lhs, rhs)


def quiet_parser(source):
    return Parser(source, ErrorHandler(fatal=False, stream=io.StringIO()))


class ParserTestCase(unittest.TestCase):

    def test_literals(self):
        should_pass = {
            "1": num(1),
            "123.123": num(123.123),
            "true": BooleanLiteral(True),
            "false": BooleanLiteral(False),
            "\"hi\"": StringLiteral("hi"),
            "nil": NilLiteral(),
            "x": Identifier("x"),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_empty(self):
        self.assertEqual(root(), parse(""))
        self.assertEqual(root(), parse("   \n "))

    def test_precedence(self):
        should_pass = {
            "2 + 3 * 4": binary(TokenKind.PLUS, num(2), binary(TokenKind.STAR, num(3), num(4))),
            "2 * 3 + 4": binary(TokenKind.PLUS, binary(TokenKind.STAR, num(2), num(3)), num(4)),
            "1 + 5 % 3": binary(TokenKind.PERCENT, binary(TokenKind.PLUS, num(1), num(5)), num(3)),
            "1 < 2 == true": binary(TokenKind.EQUAL_EQUAL, binary(TokenKind.LESS, num(1), num(2)), BooleanLiteral(True)),
            "a or b and c": binary(TokenKind.OR, Identifier("a"),
                                   binary(TokenKind.AND, Identifier("b"), Identifier("c"))),
            "!false and true": binary(TokenKind.AND, UnaryExpr(TokenKind.BANG, BooleanLiteral(False)),
                                      BooleanLiteral(True)),
            "-1 * 2": binary(TokenKind.STAR, UnaryExpr(TokenKind.MINUS, num(1)), num(2)),
            "(2 + 3) * 4": binary(TokenKind.STAR, Grouping(binary(TokenKind.PLUS, num(2), num(3))), num(4)),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_left_associativity(self):
        should_pass = {
            "2 - 3 - 4": binary(TokenKind.MINUS, binary(TokenKind.MINUS, num(2), num(3)), num(4)),
            "2 / 3 * 4": binary(TokenKind.STAR, binary(TokenKind.SLASH, num(2), num(3)), num(4)),
            "7 % 4 % 2": binary(TokenKind.PERCENT, binary(TokenKind.PERCENT, num(7), num(4)), num(2)),
            "a or b or c": binary(TokenKind.OR, binary(TokenKind.OR, Identifier("a"), Identifier("b")),
                                  Identifier("c")),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_non_associative(self):
        should_fail = ["1 == 2 == 3", "1 < 2 < 3", "1 != 2 == 3"]
        for case in should_fail:
            parser = quiet_parser(case)
            self.assertEqual(NilLiteral(), parser.parse(), case)
            self.assertIs(ParseErrorKind.UNEXPECTED_TOKEN, parser.errors[0].kind, case)

    def test_unary(self):
        should_pass = {
            "--5": UnaryExpr(TokenKind.MINUS, UnaryExpr(TokenKind.MINUS, num(5))),
            "!!!true": UnaryExpr(TokenKind.BANG, UnaryExpr(TokenKind.BANG, UnaryExpr(TokenKind.BANG,
                                                                                     BooleanLiteral(True)))),
            "-(1)": UnaryExpr(TokenKind.MINUS, Grouping(num(1))),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_identifier_forms(self):
        should_pass = {
            "f()": FnCall("f"),
            "f(1, x, g(2))": FnCall("f", (num(1), Identifier("x"), FnCall("g", (num(2),)))),
            "x = 1 + 2": Assignment("x", binary(TokenKind.PLUS, num(1), num(2))),
            "nonlocal x = 1": Assignment("x", num(1), True),
            "ret x": RetStmt(Identifier("x")),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_sequences(self):
        should_pass = {
            "x = 5, x + 1": root(Assignment("x", num(5)), binary(TokenKind.PLUS, Identifier("x"), num(1))),
            "if x : 1 ; 2": root(IfStmt(Identifier("x"), body(num(1))), num(2)),
            "if x : 1 ;, 2": root(IfStmt(Identifier("x"), body(num(1))), num(2)),
            "while x : ; if y : ;": root(WhileStmt(Identifier("x"), body()), IfStmt(Identifier("y"), body())),
        }
        for case, expected in should_pass.items():
            self.assertEqual(expected, parse(case), case)

    def test_control(self):
        should_pass = {
            "if 1 > 2 : \"a\" else \"b\" ;": IfStmt(
                binary(TokenKind.GREATER, num(1), num(2)), body(StringLiteral("a")), body(StringLiteral("b"))
            ),
            "while i < 3 : i = i + 1, println(i) ;": WhileStmt(
                binary(TokenKind.LESS, Identifier("i"), num(3)),
                body(Assignment("i", binary(TokenKind.PLUS, Identifier("i"), num(1))),
                     FnCall("println", (Identifier("i"),))),
            ),
            "fn add(a, b) : ret a + b ;": FnStmt(
                "add", ("a", "b"), body(RetStmt(binary(TokenKind.PLUS, Identifier("a"), Identifier("b"))))
            ),
            "fn f() : ;": FnStmt("f", (), body()),
            "if a : if b : 1 ; else 2 ;": IfStmt(
                Identifier("a"), body(IfStmt(Identifier("b"), body(num(1)))), body(num(2))
            ),
        }
        for case, expected in should_pass.items():
            self.assertEqual(root(expected), parse(case), case)

    def test_errors(self):
        should_fail = {
            "(1 + 2": ParseErrorKind.UNCLOSED_GROUPING,
            "(1 + 2 3": ParseErrorKind.UNCLOSED_GROUPING,
            "1 +": ParseErrorKind.UNEXPECTED_END_OF_INPUT,
            "1 2": ParseErrorKind.UNEXPECTED_TOKEN,
            ")": ParseErrorKind.UNEXPECTED_TOKEN,
            "x = ;": ParseErrorKind.UNEXPECTED_TOKEN,
            "if true 1 ;": ParseErrorKind.MISSING_COLON,
            "while true 1 ;": ParseErrorKind.MISSING_COLON,
            "if true : 1": ParseErrorKind.MISSING_SEMICOLON,
            "if true : 1 else 2": ParseErrorKind.MISSING_SEMICOLON,
            "while true : 1": ParseErrorKind.MISSING_SEMICOLON,
            "fn (a) : 1 ;": ParseErrorKind.MISSING_IDENTIFIER,
            "fn f(a, 1) : 1 ;": ParseErrorKind.MISSING_IDENTIFIER,
            "fn f a : 1 ;": ParseErrorKind.MISSING_PAREN,
            "fn f(a : 1 ;": ParseErrorKind.MISSING_PAREN,
            "fn f() 1 ;": ParseErrorKind.MISSING_COLON,
            "f(1, 2": ParseErrorKind.FN_CALL_MISSING_CLOSE_PAREN,
            "nonlocal = 1": ParseErrorKind.ASSIGNMENT_MISSING_IDENTIFIER,
            "nonlocal x 1": ParseErrorKind.ASSIGNMENT_MISSING_EQUAL,
            "\"abc": ParseErrorKind.UNTERMINATED_STRING,
        }
        for case, kind in should_fail.items():
            parser = quiet_parser(case)
            self.assertEqual(NilLiteral(), parser.parse(), case)
            self.assertEqual(1, len(parser.errors), case)
            self.assertIs(kind, parser.errors[0].kind, case)

    def test_error_token(self):
        parser = quiet_parser("if true 1 ;")
        self.assertRaises(ParseError, parser.parse_root)

        parser = quiet_parser("x +\n  )")
        parser.parse()
        error = parser.errors[0]
        self.assertIs(TokenKind.CLOSE_PAREN, error.token.kind)
        self.assertEqual(2, error.position.line)
        self.assertEqual(3, error.position.column)

        parser = quiet_parser("(1")
        parser.parse()
        self.assertIsNone(parser.errors[0].token)

    def test_nesting_too_deep(self):
        should_fail = [
            "(" * 1000 + "1" + ")" * 1000,
            "-" * 5000 + "5",
            "if true : " * 1000 + "1" + " ;" * 1000,
        ]
        for case in should_fail:
            parser = quiet_parser(case)
            self.assertEqual(NilLiteral(), parser.parse(), case[:10])
            self.assertIs(ParseErrorKind.NESTING_TOO_DEEP, parser.errors[0].kind, case[:10])

        parser = quiet_parser("(" * 20 + "1" + ")" * 20)
        self.assertIsInstance(parser.parse(), ProgramRoot)
        self.assertFalse(parser.errors)

    def test_error_reported(self):
        stream = io.StringIO()
        Parser("(1 + 2", ErrorHandler(fatal=False, stream=stream)).parse()
        self.assertIn("unclosed grouping", stream.getvalue())

    def test_display(self):
        expected = ("ProgramRoot(nodes=[\n"
                    "    BinaryExpr(operator='+', nodes=[\n"
                    "        NumberLiteral(value=1.0),\n"
                    "        Identifier(name='x')\n"
                    "    ])\n"
                    "])")
        self.assertEqual(expected, parse("1 + x").display())


if __name__ == '__main__':
    unittest.main()
