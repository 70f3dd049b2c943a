"""Tree-walking evaluator for the kotoba language. Evaluation is a strict, depth-first walk: every subexpression is
evaluated to completion before its parent uses it. The evaluator keeps no state between calls besides the Environment
it is given, which is only mutated by assignments, function declarations and builtin side effects.

All evaluation failures are raised as EvalErrors with a kind tag; nothing in here exits the process.
"""

import math
import operator

from kotoba.core.environment import Environment
from kotoba.core.lexical import TokenKind
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
from kotoba.core.values import FALSE, NIL, TRUE, Boolean, Number, String
from kotoba.lang.error import EvalError, EvalErrorKind, GenericException


def divide(lhs, rhs):
    """IEEE-754 division: dividing by zero gives a signed infinity, or NaN for 0/0."""
    if rhs == 0:
        if lhs == 0 or math.isnan(lhs):
            return math.nan
        return math.copysign(math.inf, lhs) * math.copysign(1, rhs)
    return lhs / rhs


def remainder(lhs, rhs):
    """Truncated remainder (sign of lhs). NaN if rhs is zero or lhs is infinite."""
    if rhs == 0 or math.isinf(lhs):
        return math.nan
    return math.fmod(lhs, rhs)


ARITHMETIC = {
    TokenKind.PLUS: operator.add,
    TokenKind.MINUS: operator.sub,
    TokenKind.STAR: operator.mul,
    TokenKind.SLASH: divide,
    TokenKind.PERCENT: remainder,
}

COMPARISON = {
    TokenKind.GREATER: operator.gt,
    TokenKind.GREATER_EQUAL: operator.ge,
    TokenKind.LESS: operator.lt,
    TokenKind.LESS_EQUAL: operator.le,
}


class ReturnSignal(Exception):
    """Raised by ret to unwind to the nearest function call or program root, carrying the returned value."""

    def __init__(self, value):
        super().__init__(value)
        self.value = value


class UserFunction:
    """Function declared with fn. closure is the handle of the scope it was declared in."""

    def __init__(self, name, params, body, closure):
        self.name = name
        self.params = params
        self.body = body
        self.closure = closure

    def __repr__(self):
        return f"UserFunction({self.name}({', '.join(self.params)}))"


class Evaluator:
    """Evaluates syntax trees against an Environment. If short_circuit, and/or skip their right operand when the left
    operand decides the result; by default both operands are always evaluated.
    """

    def __init__(self, short_circuit=False):
        self.short_circuit = short_circuit

    def eval(self, node, env, scope=Environment.ROOT):
        """Evaluates node in scope of env and returns its Value. A ret at the top level ends the program with its
        value; it never propagates out of this method. Running out of Python stack (deep recursion in kotoba
        functions) raises a RECURSION_LIMIT EvalError.
        """
        try:
            return self._eval(node, env, scope)
        except ReturnSignal as signal:
            return signal.value
        except RecursionError:
            raise EvalError(EvalErrorKind.RECURSION_LIMIT, "maximum recursion depth exceeded",
                            position=node.position) from None

    def _eval(self, node, env, scope):
        if isinstance(node, NumberLiteral):
            return Number(node.value)
        elif isinstance(node, BooleanLiteral):
            return TRUE if node.value else FALSE
        elif isinstance(node, StringLiteral):
            return String(node.value)
        elif isinstance(node, NilLiteral):
            return NIL

        elif isinstance(node, Grouping):
            return self._eval(node.expr, env, scope)

        elif isinstance(node, Identifier):
            try:
                return env.lookup(scope, node.name)
            except KeyError:
                raise EvalError(EvalErrorKind.UNDEFINED_VARIABLE, "undefined variable '{}'", node.name,
                                node.position) from None

        elif isinstance(node, UnaryExpr):
            return self._eval_unary(node, env, scope)

        elif isinstance(node, BinaryExpr):
            return self._eval_binary(node, env, scope)

        elif isinstance(node, Assignment):
            value = self._eval(node.operand, env, scope)
            if node.is_nonlocal:
                env.assign_nonlocal(scope, node.identifier, value)  # unbound names are left unbound
            else:
                env.assign(scope, node.identifier, value)
            return NIL

        elif isinstance(node, ProgramRoot):
            return self._eval_sequence(node.statements, env, scope)

        elif isinstance(node, Program):
            local = env.extend(scope)
            try:
                return self._eval_sequence(node.statements, env, local)
            finally:
                env.discard(local)

        elif isinstance(node, IfStmt):
            if self._eval_condition(node.condition, env, scope, "if"):
                return self._eval(node.then_body, env, scope)
            elif node.else_body is not None:
                return self._eval(node.else_body, env, scope)
            return NIL

        elif isinstance(node, WhileStmt):
            while self._eval_condition(node.condition, env, scope, "while"):
                self._eval(node.body, env, scope)
            return NIL

        elif isinstance(node, FnStmt):
            # a function is only reachable by name from its defining scope, which outlives every call to it
            env.declare_function(scope, node.identifier, UserFunction(node.identifier, node.params, node.body, scope))
            return NIL

        elif isinstance(node, FnCall):
            return self._eval_call(node, env, scope)

        elif isinstance(node, RetStmt):
            raise ReturnSignal(self._eval(node.expr, env, scope))

        raise GenericException(f"cannot evaluate '{type(node).__name__}'", internal=True)

    def _eval_sequence(self, statements, env, scope):
        """Evaluates statements in order. The value of a sequence is the value of its last statement."""
        value = NIL
        for statement in statements:
            value = self._eval(statement, env, scope)
        return value

    def _eval_condition(self, condition, env, scope, construct):
        value = self._eval(condition, env, scope)
        if not isinstance(value, Boolean):
            msg = "'{}' condition must be a boolean, got {}"
            raise EvalError(EvalErrorKind.CONDITION_TYPE_ERROR, msg, [construct, value.type_name], condition.position)
        return value.value

    def _eval_unary(self, node, env, scope):
        operand = self._eval(node.operand, env, scope)

        if node.operator is TokenKind.MINUS and isinstance(operand, Number):
            return Number(-operand.value)
        elif node.operator is TokenKind.BANG and isinstance(operand, Boolean):
            return FALSE if operand.value else TRUE

        msg = "unary operator '{}' cannot be applied to {}"
        raise EvalError(EvalErrorKind.UNARY_TYPE_ERROR, msg, [node.operator.value, operand.type_name], node.position)

    def _eval_binary(self, node, env, scope):
        if node.operator in (TokenKind.AND, TokenKind.OR):
            return self._eval_logical(node, env, scope)

        lhs = self._eval(node.lhs, env, scope)
        rhs = self._eval(node.rhs, env, scope)

        if node.operator is TokenKind.EQUAL_EQUAL:
            return TRUE if lhs == rhs else FALSE
        elif node.operator is TokenKind.BANG_EQUAL:
            return FALSE if lhs == rhs else TRUE

        if isinstance(lhs, Number) and isinstance(rhs, Number):
            if node.operator in ARITHMETIC:
                return Number(ARITHMETIC[node.operator](lhs.value, rhs.value))
            elif node.operator in COMPARISON:
                return TRUE if COMPARISON[node.operator](lhs.value, rhs.value) else FALSE

        elif node.operator is TokenKind.PLUS and isinstance(lhs, String) and isinstance(rhs, String):
            return String(lhs.value + rhs.value)

        self._binary_type_error(node, lhs, rhs)

    def _eval_logical(self, node, env, scope):
        lhs = self._eval(node.lhs, env, scope)

        if self.short_circuit:
            if not isinstance(lhs, Boolean):
                self._binary_type_error(node, lhs, None)
            if lhs.value is (node.operator is TokenKind.OR):  # true or ..., false and ...
                return lhs

        rhs = self._eval(node.rhs, env, scope)
        if not isinstance(lhs, Boolean) or not isinstance(rhs, Boolean):
            self._binary_type_error(node, lhs, rhs)

        if node.operator is TokenKind.AND:
            return TRUE if lhs.value and rhs.value else FALSE
        return TRUE if lhs.value or rhs.value else FALSE

    @staticmethod
    def _binary_type_error(node, lhs, rhs):
        if rhs is None:
            msg = "binary operator '{}' cannot be applied to {}"
            exprs = [node.operator.value, lhs.type_name]
        else:
            msg = "binary operator '{}' cannot be applied to {} and {}"
            exprs = [node.operator.value, lhs.type_name, rhs.type_name]
        raise EvalError(EvalErrorKind.BINARY_TYPE_ERROR, msg, exprs, node.position)

    def _eval_call(self, node, env, scope):
        try:
            function = env.lookup_function(scope, node.identifier)
        except KeyError:
            raise EvalError(EvalErrorKind.UNDEFINED_FUNCTION, "undefined function '{}'", node.identifier,
                            node.position) from None

        args = [self._eval(arg, env, scope) for arg in node.args]

        if not isinstance(function, UserFunction):
            try:
                return function(args)
            except EvalError as error:
                if error.position is None:  # builtins do not know where they were called from
                    error.position = node.position
                raise

        if len(args) != len(function.params):
            msg = "'{}' expects {} argument(s), got {}"
            exprs = [function.name, str(len(function.params)), str(len(args))]
            raise EvalError(EvalErrorKind.ARITY_ERROR, msg, exprs, node.position)

        local = env.extend(function.closure)
        try:
            for param, arg in zip(function.params, args):
                env.assign(local, param, arg)
            return self._eval(function.body, env, local)
        except ReturnSignal as signal:
            return signal.value
        finally:
            env.discard(local)
