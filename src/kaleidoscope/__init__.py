"""
Kaleidoscope Front-End
======================

This package implements the front-end of Kaleidoscope, a minimal
expression-oriented language: a lexer that turns source text into
tokens, and a parser that builds an abstract syntax tree from them.

Main Components
---------------
- **lexer**: character stream to tokens (never fails)
- **precedence**: the binary operator precedence table
- **ast**: AST node dataclasses, visitor and printers
- **parser**: recursive descent + precedence climbing
- **driver**: top-level loop with error recovery
- **cli**: the kparse command-line tool

Quick Start
-----------
Parse an expression:
    >>> from kaleidoscope import parse_expression
    >>> parse_expression("1 + 2 * 3")
    BinaryExpr(op='+', lhs=NumberExpr(value=1.0), rhs=BinaryExpr(op='*', lhs=NumberExpr(value=2.0), rhs=NumberExpr(value=3.0)))

Parse a whole program:
    >>> from kaleidoscope import parse_program
    >>> for item in parse_program("def sq(x) x*x; sq(4)"):
    ...     print(item.kind.name)
    DEFINITION
    EXPRESSION

Or use the command-line tool:
    $ kparse --ast program.k

Pipeline
--------
    Source → Lexer → Parser → AST → (handler: compile, evaluate, store...)

Code generation and semantic analysis are not part of this package; a
TopLevelHandler receives each construct and decides what to do with it.
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kaleidoscope.errors import (
    KaleidoscopeError,
    KSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    MalformedNumberError,
    NestingTooDeepError,
    ErrorCollector,
    SourceLocation,
)
from kaleidoscope.lexer import Lexer, Token, TokenType
from kaleidoscope.precedence import PrecedenceTable, DEFAULT_PRECEDENCE
from kaleidoscope.ast import (
    ASTNode,
    Expr,
    NumberExpr,
    VariableExpr,
    BinaryExpr,
    CallExpr,
    Prototype,
    Function,
    ASTVisitor,
    ASTPrinter,
)
from kaleidoscope.config import ParserOptions, ANON_FUNCTION_NAME
from kaleidoscope.parser import Parser, ParseResult, parse_expression, parse_prototype
from kaleidoscope.driver import (
    TopLevelDriver,
    TopLevelHandler,
    TopLevelItem,
    TopLevelKind,
    parse_program,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "KaleidoscopeError",
    "KSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "MalformedNumberError",
    "NestingTooDeepError",
    "ErrorCollector",
    "SourceLocation",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Precedence
    "PrecedenceTable",
    "DEFAULT_PRECEDENCE",
    # AST
    "ASTNode",
    "Expr",
    "NumberExpr",
    "VariableExpr",
    "BinaryExpr",
    "CallExpr",
    "Prototype",
    "Function",
    "ASTVisitor",
    "ASTPrinter",
    # Parser
    "ParserOptions",
    "ANON_FUNCTION_NAME",
    "Parser",
    "ParseResult",
    "parse_expression",
    "parse_prototype",
    # Driver
    "TopLevelDriver",
    "TopLevelHandler",
    "TopLevelItem",
    "TopLevelKind",
    "parse_program",
]
