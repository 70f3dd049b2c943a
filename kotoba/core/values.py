"""Runtime values of the kotoba language: a tagged union of Number, Boolean, String and Nil.

Equality is structural and defined across all four kinds: values of different kinds are simply unequal.
"""

import math
from dataclasses import dataclass
from decimal import Decimal


def format_number(number):
    """Default decimal text of a float: the shortest digits that round-trip, in positional form. Integral values have
    no fractional part. Never uses exponent notation.
    """
    if math.isnan(number):
        return "NaN"
    elif math.isinf(number):
        return "inf" if number > 0 else "-inf"

    text = format(Decimal(repr(number)), "f")
    if number.is_integer() and text.endswith(".0"):
        return text[:-2]
    return text


class Value:
    """Superclass of runtime values."""
    type_name = "value"

    @property
    def raw(self):
        """Text written by print: like str, but strings are not quoted."""
        return str(self)


@dataclass(frozen=True, eq=False)
class Number(Value):
    type_name = "number"
    value: float

    def __eq__(self, other):
        return isinstance(other, Number) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return format_number(self.value)


@dataclass(frozen=True)
class Boolean(Value):
    type_name = "boolean"
    value: bool

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class String(Value):
    type_name = "string"
    value: str

    @property
    def raw(self):
        return self.value

    def __str__(self):
        return f"\"{self.value}\""


@dataclass(frozen=True)
class Nil(Value):
    type_name = "nil"

    def __str__(self):
        return "nil"


NIL = Nil()
TRUE = Boolean(True)
FALSE = Boolean(False)
