"""Abstract syntax tree for the kotoba language. Every node exclusively owns its children and is immutable once built:
the tree has no cycles and no shared nodes. position is the Position of the first token of a node and never takes part
in equality.
"""

from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from kotoba.core.lexical import TokenKind
from kotoba.core.source import Position


class AstNode:
    """Superclass of every syntax tree node."""

    @property
    def nodes(self):
        """Child nodes, in source order."""
        children = []
        for node_field in fields(self):
            value = getattr(self, node_field.name)
            if isinstance(value, AstNode):
                children.append(value)
            elif isinstance(value, tuple):
                children.extend(item for item in value if isinstance(item, AstNode))
        return children

    @property
    def attrs(self):
        """Non-node fields, as name: value."""
        attrs = {}
        for node_field in fields(self):
            value = getattr(self, node_field.name)
            if node_field.name == "position" or isinstance(value, AstNode):
                continue
            elif isinstance(value, tuple) and any(isinstance(item, AstNode) for item in value):
                continue
            elif isinstance(value, TokenKind):
                value = value.value
            attrs[node_field.name] = value
        return attrs

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <AstNode>(<attr>=<value>, nodes=[
            <AstNode>(<attr>=<value>, nodes=[
                ...
                <AstNode>(<attr>=<value>)  # <-- if nodes is empty
            ])
        ])
        """
        attrs = ", ".join(f"{name}={value!r}" for name, value in self.attrs.items())

        result = f"{'    ' * indents}{type(self).__name__}({attrs}"
        if self.nodes:
            result += ", nodes=[" if attrs else "nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()


@dataclass(frozen=True)
class ProgramRoot(AstNode):
    """Top-level program. Evaluated directly in the caller's scope."""
    statements: Tuple[AstNode, ...] = ()
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program(AstNode):
    """Nested statement sequence (body of if/while/fn). Evaluated in its own child scope."""
    statements: Tuple[AstNode, ...] = ()
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NumberLiteral(AstNode):
    value: float
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BooleanLiteral(AstNode):
    value: bool
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class StringLiteral(AstNode):
    value: str
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NilLiteral(AstNode):
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Identifier(AstNode):
    name: str
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Grouping(AstNode):
    expr: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryExpr(AstNode):
    operator: TokenKind
    operand: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryExpr(AstNode):
    operator: TokenKind
    lhs: AstNode
    rhs: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Assignment(AstNode):
    """identifier = operand. If is_nonlocal, mutates an existing binding up the scope chain instead of shadowing."""
    identifier: str
    operand: AstNode
    is_nonlocal: bool = False
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IfStmt(AstNode):
    condition: AstNode
    then_body: AstNode
    else_body: Optional[AstNode] = None
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class WhileStmt(AstNode):
    condition: AstNode
    body: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FnStmt(AstNode):
    identifier: str
    params: Tuple[str, ...]
    body: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FnCall(AstNode):
    identifier: str
    args: Tuple[AstNode, ...] = ()
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class RetStmt(AstNode):
    expr: AstNode
    position: Optional[Position] = field(default=None, compare=False, repr=False)
