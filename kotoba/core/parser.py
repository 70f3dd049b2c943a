"""Recursive descent parser for the kotoba language, one method per grammar production. Binary operators are parsed
by precedence climbing over BINARY_LEVELS.

Grammar, from lowest to highest binding:

```
<root>       ::= <statements>                       ; must consume all input
<statements> ::= (<control> ","? | <simple> ("," | end))*
<control>    ::= "if" <expr> ":" <statements> ("else" <statements>)? ";"
               | "while" <expr> ":" <statements> ";"
               | "fn" <identifier> "(" (<identifier> ("," <identifier>)*)? ")" ":" <statements> ";"
<simple>     ::= "ret" <expr>
               | "nonlocal" <identifier> "=" <expr>
               | <expr>
<expr>       ::= <disjunction>
<disjunction> ::= <conjunction> ("or" <conjunction>)*
<conjunction> ::= <equality> ("and" <equality>)*
<equality>   ::= <comparison> (("==" | "!=") <comparison>)?
<comparison> ::= <modulo> ((">" | ">=" | "<" | "<=") <modulo>)?
<modulo>     ::= <additive> ("%" <additive>)*
<additive>   ::= <multiplicative> (("+" | "-") <multiplicative>)*
<multiplicative> ::= <unary> (("*" | "/") <unary>)*
<unary>      ::= ("!" | "-") <unary> | <primary>
<primary>    ::= <number> | <boolean> | <string> | "nil"
               | <identifier> "(" (<expr> ("," <expr>)*)? ")"    ; function call
               | <identifier> "=" <expr>                          ; assignment
               | <identifier>
               | "(" <expr> ")"
```
"""

from kotoba.core.lexical import Lexer, TokenKind
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


# (operators, whether or not the level repeats). Levels that do not repeat allow a single application only.
BINARY_LEVELS = [
    ((TokenKind.OR,), True),
    ((TokenKind.AND,), True),
    ((TokenKind.EQUAL_EQUAL, TokenKind.BANG_EQUAL), False),
    ((TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL), False),
    ((TokenKind.PERCENT,), True),
    ((TokenKind.PLUS, TokenKind.MINUS), True),
    ((TokenKind.STAR, TokenKind.SLASH), True),
]

UNARY = (TokenKind.BANG, TokenKind.MINUS)
CONTROL = (TokenKind.IF, TokenKind.WHILE, TokenKind.FN)
TERMINATORS = (TokenKind.ELSE, TokenKind.SEMICOLON)


class Parser:
    """Parses a single source text. Like the Lexer it wraps, a Parser is consumed by parse and is not restartable."""

    def __init__(self, source, error_handler=None):
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)
        self.lexer = Lexer(source, self.error_handler)
        self.errors = []

    def parse(self):
        """Parses the whole source into a ProgramRoot. Parse errors are reported through the error handler and
        recorded in self.errors, and a neutral NilLiteral program is returned instead. Input nested deeper than the
        Python stack allows is reported as a NESTING_TOO_DEEP error.
        """
        try:
            return self.parse_root()
        except ParseError as error:
            return self._recover(error)
        except RecursionError:
            return self._recover(ParseError(ParseErrorKind.NESTING_TOO_DEEP, position=self.lexer.end_position()))

    def _recover(self, error):
        self.errors.append(error)
        self.error_handler.report(error)
        return NilLiteral()

    def parse_root(self):
        """Like parse, but raises ParseErrors."""
        statements = self.parse_statements()

        leftover = self.lexer.peek()
        if leftover is not None:
            raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, leftover)

        position = statements[0].position if statements else None
        return ProgramRoot(tuple(statements), position)

    def parse_statements(self):
        """Parses statements until end of input, a terminator, or an expression without a trailing ','."""
        statements = []

        while True:
            token = self.lexer.peek()
            if token is None or token.kind in TERMINATORS:
                break

            elif token.kind in CONTROL:
                statements.append(self.parse_control())
                self.lexer.expect(TokenKind.COMMA)  # optional after a closing ";"

            else:
                statements.append(self.parse_simple())
                if not self.lexer.expect(TokenKind.COMMA):
                    break

        return statements

    def parse_body(self):
        """Parses a nested statement sequence."""
        position = self.lexer.peek().position if self.lexer.peek() is not None else None
        return Program(tuple(self.parse_statements()), position)

    def parse_control(self):
        token = self.lexer.next()

        if token.kind is TokenKind.IF:
            return self.parse_if(token)
        elif token.kind is TokenKind.WHILE:
            return self.parse_while(token)
        return self.parse_fn(token)

    def parse_if(self, token):
        condition = self.parse_expression()
        self._require(TokenKind.COLON, ParseErrorKind.MISSING_COLON)
        then_body = self.parse_body()

        else_body = None
        if self.lexer.expect(TokenKind.ELSE):
            else_body = self.parse_body()

        self._require(TokenKind.SEMICOLON, ParseErrorKind.MISSING_SEMICOLON)
        return IfStmt(condition, then_body, else_body, token.position)

    def parse_while(self, token):
        condition = self.parse_expression()
        self._require(TokenKind.COLON, ParseErrorKind.MISSING_COLON)
        body = self.parse_body()
        self._require(TokenKind.SEMICOLON, ParseErrorKind.MISSING_SEMICOLON)
        return WhileStmt(condition, body, token.position)

    def parse_fn(self, token):
        identifier = self._require(TokenKind.IDENTIFIER, ParseErrorKind.MISSING_IDENTIFIER).value
        self._require(TokenKind.OPEN_PAREN, ParseErrorKind.MISSING_PAREN)

        params = []
        if not self.lexer.expect(TokenKind.CLOSE_PAREN):
            while True:
                params.append(self._require(TokenKind.IDENTIFIER, ParseErrorKind.MISSING_IDENTIFIER).value)
                if not self.lexer.expect(TokenKind.COMMA):
                    break
            self._require(TokenKind.CLOSE_PAREN, ParseErrorKind.MISSING_PAREN)

        self._require(TokenKind.COLON, ParseErrorKind.MISSING_COLON)
        body = self.parse_body()
        self._require(TokenKind.SEMICOLON, ParseErrorKind.MISSING_SEMICOLON)
        return FnStmt(identifier, tuple(params), body, token.position)

    def parse_simple(self):
        token = self.lexer.expect(TokenKind.RET)
        if token:
            return RetStmt(self.parse_expression(), token.position)

        token = self.lexer.expect(TokenKind.NONLOCAL)
        if token:
            identifier = self._require(TokenKind.IDENTIFIER, ParseErrorKind.ASSIGNMENT_MISSING_IDENTIFIER).value
            self._require(TokenKind.EQUAL, ParseErrorKind.ASSIGNMENT_MISSING_EQUAL)
            return Assignment(identifier, self.parse_expression(), True, token.position)

        return self.parse_expression()

    def parse_expression(self):
        return self.parse_binary(0)

    def parse_binary(self, level):
        """Parses binary operators of BINARY_LEVELS[level] and everything that binds tighter."""
        if level == len(BINARY_LEVELS):
            return self.parse_unary()

        operators, repeats = BINARY_LEVELS[level]
        lhs = self.parse_binary(level + 1)

        while True:
            token = self.lexer.expect_any(operators)
            if token is None:
                break

            rhs = self.parse_binary(level + 1)
            lhs = BinaryExpr(token.kind, lhs, rhs, lhs.position)

            if not repeats:
                break

        return lhs

    def parse_unary(self):
        token = self.lexer.expect_any(UNARY)
        if token:
            return UnaryExpr(token.kind, self.parse_unary(), token.position)
        return self.parse_primary()

    def parse_primary(self):
        token = self.lexer.next()
        if token is None:
            raise ParseError(ParseErrorKind.UNEXPECTED_END_OF_INPUT, position=self.lexer.end_position())

        if token.kind is TokenKind.NUMBER:
            return NumberLiteral(token.value, token.position)
        elif token.kind is TokenKind.BOOLEAN:
            return BooleanLiteral(token.value, token.position)
        elif token.kind is TokenKind.STRING:
            return StringLiteral(token.value, token.position)
        elif token.kind is TokenKind.NIL:
            return NilLiteral(token.position)
        elif token.kind is TokenKind.IDENTIFIER:
            return self.parse_identifier(token)
        elif token.kind is TokenKind.OPEN_PAREN:
            return self.parse_grouping(token)

        raise ParseError(ParseErrorKind.UNEXPECTED_TOKEN, token)

    def parse_identifier(self, token):
        """An identifier followed by "(" is a call and followed by "=" is an assignment. Otherwise it is a reference."""
        if self.lexer.expect(TokenKind.OPEN_PAREN):
            args = []
            if not self.lexer.expect(TokenKind.CLOSE_PAREN):
                while True:
                    args.append(self.parse_expression())
                    if not self.lexer.expect(TokenKind.COMMA):
                        break
                self._require(TokenKind.CLOSE_PAREN, ParseErrorKind.FN_CALL_MISSING_CLOSE_PAREN)
            return FnCall(token.value, tuple(args), token.position)

        elif self.lexer.expect(TokenKind.EQUAL):
            return Assignment(token.value, self.parse_expression(), False, token.position)

        return Identifier(token.value, token.position)

    def parse_grouping(self, token):
        expr = self.parse_expression()
        self._require(TokenKind.CLOSE_PAREN, ParseErrorKind.UNCLOSED_GROUPING)
        return Grouping(expr, token.position)

    def _require(self, kind, error_kind):
        """Consumes and returns a token of kind, or raises a ParseError of error_kind carrying the offending token."""
        token = self.lexer.expect(kind)
        if token is None:
            offending = self.lexer.peek()
            if offending is None:
                raise ParseError(error_kind, position=self.lexer.end_position())
            raise ParseError(error_kind, offending)
        return token


def parse(source, error_handler=None):
    """Parses source into a ProgramRoot (or NilLiteral if source has a parse error)."""
    return Parser(source, error_handler).parse()
