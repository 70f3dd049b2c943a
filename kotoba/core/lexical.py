"""Lexical analysis for the kotoba language: turns source text into a lazy stream of Tokens.

Tokens are classified on their first byte using maximal munch:

```
<number>     ::= <digit>+ ("." <digit>+)?       ; "." is only part of a number if a digit follows it
<identifier> ::= [A-Za-z_] [A-Za-z0-9_]*        ; minus the keywords below
<string>     ::= '"' <any byte but '"'>* '"'    ; no escape sequences
<operator>   ::= "=" | "==" | "!" | "!=" | ">" | ">=" | "<" | "<=" | "+" | "-" | "*" | "/" | "%"
<punct>      ::= "(" | ")" | ":" | "," | ";"

keywords: true false nil and or if else while fn ret nonlocal
```

Whitespace is skipped. Unrecognized bytes produce a warning and are skipped, so lexing is never fatal except for an
unterminated string.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from kotoba.core.source import Position, SourceCursor
from kotoba.lang.error import ErrorHandler, ParseError, ParseErrorKind


class TokenKind(Enum):
    """Closed set of token kinds. Fixed tokens use their source text as value."""
    NUMBER = "<number>"
    BOOLEAN = "<boolean>"
    STRING = "<string>"
    IDENTIFIER = "<identifier>"
    NIL = "nil"

    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    COLON = ":"
    COMMA = ","
    SEMICOLON = ";"

    EQUAL = "="
    EQUAL_EQUAL = "=="
    BANG = "!"
    BANG_EQUAL = "!="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    AND = "and"
    OR = "or"

    IF = "if"
    ELSE = "else"
    WHILE = "while"
    FN = "fn"
    RET = "ret"
    NONLOCAL = "nonlocal"


@dataclass(frozen=True)
class Token:
    """A classified lexical unit. value holds the payload of literal/identifier tokens."""
    kind: TokenKind
    position: Position = field(default_factory=Position, compare=False)
    value: object = None

    @property
    def lexeme(self):
        """Source-like text of this token, used in diagnostics."""
        if self.kind is TokenKind.NUMBER:
            return repr(self.value)
        elif self.kind is TokenKind.BOOLEAN:
            return "true" if self.value else "false"
        elif self.kind is TokenKind.STRING:
            return f"\"{self.value}\""
        elif self.kind is TokenKind.IDENTIFIER:
            return self.value
        return self.kind.value

    def __repr__(self):
        if self.value is None:
            return f"Token({self.kind.name}, {self.position})"
        return f"Token({self.kind.name}, {self.value!r}, {self.position})"


KEYWORDS = {
    "true": (TokenKind.BOOLEAN, True),
    "false": (TokenKind.BOOLEAN, False),
    "nil": (TokenKind.NIL, None),
    "and": (TokenKind.AND, None),
    "or": (TokenKind.OR, None),
    "if": (TokenKind.IF, None),
    "else": (TokenKind.ELSE, None),
    "while": (TokenKind.WHILE, None),
    "fn": (TokenKind.FN, None),
    "ret": (TokenKind.RET, None),
    "nonlocal": (TokenKind.NONLOCAL, None),
}

# byte: (kind if followed by "=", kind otherwise)
DOUBLED = {
    ord("="): (TokenKind.EQUAL_EQUAL, TokenKind.EQUAL),
    ord("!"): (TokenKind.BANG_EQUAL, TokenKind.BANG),
    ord(">"): (TokenKind.GREATER_EQUAL, TokenKind.GREATER),
    ord("<"): (TokenKind.LESS_EQUAL, TokenKind.LESS),
}

SINGLE = {ord(kind.value): kind for kind in (
    TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT,
    TokenKind.OPEN_PAREN, TokenKind.CLOSE_PAREN, TokenKind.COLON, TokenKind.COMMA, TokenKind.SEMICOLON,
)}

WHITESPACE = b" \t\r\n"
QUOTE = ord("\"")


def is_digit(byte):
    return ord("0") <= byte <= ord("9")


def is_identifier_start(byte):
    return ord("a") <= byte <= ord("z") or ord("A") <= byte <= ord("Z") or byte == ord("_")


def is_identifier(byte):
    return is_identifier_start(byte) or is_digit(byte)


class Lexer:
    """Single-pass, pull-based token stream with an explicit lookahead buffer. peek does not advance the observable
    position of the stream; expect/expect_any consume a token only if it matches.
    """

    def __init__(self, source, error_handler=None, lookahead=1):
        if lookahead < 1:
            raise ValueError("lookahead must be at least 1")

        self.cursor = SourceCursor(source)
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)
        self.lookahead = lookahead
        self.warnings = []  # (Position, byte) of every skipped byte

        self._buffer = deque()

    def __iter__(self):
        return self

    def __next__(self):
        token = self.next()
        if token is None:
            raise StopIteration
        return token

    def next(self):
        """Consumes and returns the next token, or None at end of input."""
        if self._buffer:
            return self._buffer.popleft()
        return self._lex()

    def peek(self, offset=0):
        """Returns the token offset places ahead without consuming anything, or None if input ends before it."""
        if offset >= self.lookahead:
            raise ValueError(f"cannot peek {offset + 1} tokens ahead with a lookahead of {self.lookahead}")

        while len(self._buffer) <= offset:
            token = self._lex()
            if token is None:
                return None
            self._buffer.append(token)

        return self._buffer[offset]

    def expect(self, kind):
        """Consumes and returns the next token if it is of kind, otherwise returns None."""
        return self.expect_any((kind,))

    def expect_any(self, kinds):
        """Consumes and returns the next token if its kind is in kinds, otherwise returns None."""
        token = self.peek()
        if token is not None and token.kind in kinds:
            return self.next()
        return None

    def end_position(self):
        """Position just after the last consumed byte. Used to locate end-of-input errors."""
        return self.cursor.current_position()

    def _lex(self):
        """Lexes a single token from the cursor."""
        cursor = self.cursor

        while True:
            cursor.consume_while(lambda byte: byte in WHITESPACE)

            byte = cursor.peek()
            if byte is None:
                return None

            position = cursor.current_position()

            if is_digit(byte):
                return Token(TokenKind.NUMBER, position, self._lex_number())

            elif is_identifier_start(byte):
                word = cursor.consume_while(is_identifier).decode("ascii")
                kind, value = KEYWORDS.get(word, (TokenKind.IDENTIFIER, word))
                return Token(kind, position, value)

            elif byte == QUOTE:
                return Token(TokenKind.STRING, position, self._lex_string(position))

            elif byte in DOUBLED:
                cursor.next()
                doubled, single = DOUBLED[byte]
                return Token(doubled if cursor.expect("=") else single, position)

            elif byte in SINGLE:
                cursor.next()
                return Token(SINGLE[byte], position)

            cursor.next()
            self.warnings.append((position, byte))
            self.error_handler.warn("unrecognized byte '{}' (0x{}), skipping", [chr(byte), f"{byte:02x}"],
                                    position=position)

    def _lex_number(self):
        cursor = self.cursor

        text = cursor.consume_while(is_digit)
        if cursor.peek() == ord(".") and cursor.peek_second() is not None and is_digit(cursor.peek_second()):
            cursor.next()
            text += b"." + cursor.consume_while(is_digit)

        return float(text)

    def _lex_string(self, position):
        cursor = self.cursor

        cursor.next()  # opening quote
        contents = cursor.consume_while(lambda byte: byte != QUOTE)

        if not cursor.expect(QUOTE):
            raise ParseError(ParseErrorKind.UNTERMINATED_STRING, position=position,
                             msg="string literal is missing its closing '{}'", exprs=["\""])

        return contents.decode("utf-8", errors="replace")
