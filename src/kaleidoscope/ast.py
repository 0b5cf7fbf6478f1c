"""
Kaleidoscope Abstract Syntax Tree (AST) Definitions
===================================================

This module defines the AST node types produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions (the Expr union)
│   ├── NumberExpr - numeric literal
│   ├── VariableExpr - reference to a named value
│   ├── BinaryExpr - binary operator applied to two operands
│   └── CallExpr - call of a named function
├── Prototype - name and parameter names of a callable
└── Function - prototype plus body expression

Design Notes
------------
- The node set is closed. Code that walks the tree either subclasses
  ASTVisitor or uses a match statement over the Expr union.
- Nodes are frozen dataclasses. Sequences are stored as tuples so a
  finished tree cannot be changed behind the parser's back.
- Each node may carry its source location. The location is keyword-only
  and excluded from equality, so trees compare by structure:

      >>> BinaryExpr("+", NumberExpr(1), NumberExpr(2)) == BinaryExpr(
      ...     "+", NumberExpr(1.0), NumberExpr(2.0))
      True
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Union

from kaleidoscope.errors import SourceLocation


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location of the node's first token (optional)
    """
    location: Optional[SourceLocation] = field(
        default=None, kw_only=True, compare=False, repr=False
    )


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberExpr(ASTNode):
    """Numeric literal such as 1.0."""
    value: float

    def __post_init__(self):
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class VariableExpr(ASTNode):
    """Reference to a named value, such as a function parameter."""
    name: str


@dataclass(frozen=True)
class BinaryExpr(ASTNode):
    """
    Binary operator expression.

    Attributes:
        op: The operator character
        lhs: Left operand
        rhs: Right operand
    """
    op: str
    lhs: "Expr"
    rhs: "Expr"


@dataclass(frozen=True)
class CallExpr(ASTNode):
    """
    Function call.

    Attributes:
        callee: Name of the function being called
        args: Argument expressions, in order
    """
    callee: str
    args: tuple["Expr", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))


# Every expression node
Expr = Union[NumberExpr, VariableExpr, BinaryExpr, CallExpr]


# =============================================================================
# Top-Level Nodes
# =============================================================================

@dataclass(frozen=True)
class Prototype(ASTNode):
    """
    External signature of a function: its name and parameter names.

    Parameter names are not checked for uniqueness.

    Attributes:
        name: Function name ("" is never produced by the parser; anonymous
              top-level expressions get a reserved name)
        params: Parameter names, in order
    """
    name: str
    params: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Function(ASTNode):
    """
    Function definition: a prototype and a body expression.

    Anonymous top-level expressions are also represented as Function
    nodes whose prototype has the reserved anonymous name.
    """
    proto: Prototype
    body: Expr


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about. Unhandled nodes fall through to generic_visit, which visits
    the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpr(self, node):
                self.calls += 1
                self.generic_visit(node)

        counter = CallCounter()
        counter.visit(function)
    """

    def visit(self, node: ASTNode) -> Any:
        """Visit a node by dispatching to visit_<ClassName>."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node."""
        for node_field in fields(node):
            value = getattr(node, node_field.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

def format_number(value: float) -> str:
    """Format a literal without a trailing '.0' for whole numbers."""
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces an indented tree, one node per line:

        Function f(x y)
          Binary '+'
            Variable x
            Number 1

    Each visit_* method returns the node's label and its children. The
    tree is walked with an explicit stack, so a long operator chain
    prints no matter how deep the resulting tree is.

    Usage:
        printer = ASTPrinter()
        print(printer.print(node))
    """

    INDENT = "  "

    def __init__(self):
        self.output: list[str] = []

    def print(self, node: ASTNode) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        stack: list[tuple[ASTNode, int]] = [(node, 0)]

        while stack:
            current, depth = stack.pop()
            label, children = self.visit(current)
            self.output.append(f"{self.INDENT * depth}{label}")
            for child in reversed(children):
                stack.append((child, depth + 1))

        return "\n".join(self.output)

    def visit_Function(self, node: Function):
        return f"Function {_signature(node.proto)}", (node.body,)

    def visit_Prototype(self, node: Prototype):
        return f"Extern {_signature(node)}", ()

    def visit_NumberExpr(self, node: NumberExpr):
        return f"Number {format_number(node.value)}", ()

    def visit_VariableExpr(self, node: VariableExpr):
        return f"Variable {node.name}", ()

    def visit_BinaryExpr(self, node: BinaryExpr):
        return f"Binary '{node.op}'", (node.lhs, node.rhs)

    def visit_CallExpr(self, node: CallExpr):
        return f"Call {node.callee}", node.args


def _signature(proto: Prototype) -> str:
    return f"{proto.name}({' '.join(proto.params)})"


def format_expr(expr: Expr) -> str:
    """
    Render an expression on one line, fully parenthesized.

    >>> format_expr(BinaryExpr("+", NumberExpr(1), VariableExpr("x")))
    '(1 + x)'
    """
    parts: list[str] = []
    # Pending nodes and literal text, in reverse output order
    stack: list[Union[Expr, str]] = [expr]

    while stack:
        item = stack.pop()

        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, NumberExpr):
            parts.append(format_number(item.value))
        elif isinstance(item, VariableExpr):
            parts.append(item.name)
        elif isinstance(item, BinaryExpr):
            stack.extend([")", item.rhs, f" {item.op} ", item.lhs, "("])
        elif isinstance(item, CallExpr):
            stack.append(")")
            for index, arg in enumerate(reversed(item.args)):
                if index:
                    stack.append(", ")
                stack.append(arg)
            stack.append(f"{item.callee}(")
        else:
            parts.append(f"<{type(item).__name__}>")

    return "".join(parts)


def format_node(node: ASTNode) -> str:
    """Render a top-level node (Function or Prototype) on one line."""
    if isinstance(node, Function):
        return f"def {_signature(node.proto)} {format_expr(node.body)}"
    if isinstance(node, Prototype):
        return f"extern {_signature(node)}"
    return format_expr(node)
