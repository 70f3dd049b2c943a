"""Builtin functions available to every kotoba session. Each builtin takes a list of already-evaluated Values and
returns a Value.
"""

import sys

from kotoba.core.runtime import remainder
from kotoba.core.values import FALSE, NIL, TRUE, Number
from kotoba.lang.error import EvalError, EvalErrorKind


def builtin_print(args):
    """Writes each argument's raw text (strings unquoted) with no separator."""
    sys.stdout.write("".join(arg.raw for arg in args))
    return NIL


def builtin_println(args):
    """Like print, followed by a newline."""
    builtin_print(args)
    sys.stdout.write("\n")
    return NIL


def two_numbers(name, args):
    """Unpacks exactly two Number arguments into floats."""
    if len(args) != 2:
        raise EvalError(EvalErrorKind.ARITY_ERROR, "'{}' expects {} argument(s), got {}", [name, "2", str(len(args))])

    lhs, rhs = args
    if not isinstance(lhs, Number) or not isinstance(rhs, Number):
        msg = "'{}' cannot be applied to {} and {}"
        raise EvalError(EvalErrorKind.BINARY_TYPE_ERROR, msg, [name, lhs.type_name, rhs.type_name])
    return lhs.value, rhs.value


def builtin_add_two(args):
    lhs, rhs = two_numbers("add_two", args)
    return Number(lhs + rhs)


def builtin_div(args):
    """div(q, n) is whether q divides n."""
    q, n = two_numbers("div", args)
    return TRUE if remainder(n, q) == 0 else FALSE


PRELUDE = {
    "print": builtin_print,
    "println": builtin_println,
    "add_two": builtin_add_two,
    "div": builtin_div,
}
