"""
Kaleidoscope Error Hierarchy
============================

This module defines the exception hierarchy for the Kaleidoscope
front-end. All exceptions inherit from KaleidoscopeError, allowing
callers to catch every front-end error with a single except clause.

Exception Hierarchy
-------------------
KaleidoscopeError (base)
└── KSyntaxError - parser syntax errors
    ├── UnexpectedTokenError - token does not start the expected rule
    ├── MissingTokenError - required token ('(', ')') not found
    ├── MalformedNumberError - numeric literal rejected in strict mode
    └── NestingTooDeepError - expression nesting exhausted the stack

The lexer never raises: every character sequence maps to some token
sequence ending in EOF. Only the parser produces syntax errors.

Error Message Format
--------------------
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing

Example:
    fib.k:3:12: error: expected ')' in prototype
        def fib(x, y) x+y
                 ^
    hint: parameter names are separated by spaces, not commas
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class KaleidoscopeError(Exception):
    """
    Base exception for all Kaleidoscope front-end errors.

        try:
            parse_expression("1 +")
        except KaleidoscopeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text, used for error reporting.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Syntax Errors
# =============================================================================

class KSyntaxError(KaleidoscopeError):
    """
    Syntax error in Kaleidoscope source.

    Raised when the current token does not match any alternative of the
    grammar rule being parsed. Each error carries a static message; there
    are no error codes.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            fib.k:1:10: error: expected expression
                def f(x) )
                         ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class UnexpectedTokenError(KSyntaxError):
    """
    Unexpected token during parsing.

    Raised when a token appears where it cannot start or continue the
    expected construct, e.g. ')' at the start of an expression.
    """

    def __init__(
        self,
        message: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.found = found
        if hint is None and found:
            hint = f"found {found}"
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(KSyntaxError):
    """
    Required token is missing.

    Raised when a required punctuation token (like '(' or ')') is not
    found where the grammar needs it.
    """

    def __init__(
        self,
        message: str,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MalformedNumberError(KSyntaxError):
    """
    Numeric literal that is not a valid float.

    Only raised when strict number checking is enabled. By default the
    lexer keeps the longest valid prefix ("1.2.3" reads as 1.2).
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"malformed number '{text}'",
            location=location,
            hint="a number may contain at most one '.'",
            source_line=source_line,
        )


class NestingTooDeepError(KSyntaxError):
    """
    Expression nested too deeply to parse.

    Each parenthesis level and each right-nested operator adds a frame
    to the recursive parser. Pathological input is reported instead of
    letting RecursionError escape.
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "expression nested too deeply",
            location=location,
            hint="split the expression into smaller functions",
            source_line=source_line,
        )


# =============================================================================
# Error Collection
# =============================================================================

class ErrorCollector:
    """
    Syntax errors reported during one parse session.

    Every failed parse call on a Parser is recorded here. The top-level
    driver keeps going after a malformed construct until should_stop()
    is True.

    Example:
        parser = Parser(source, options=ParserOptions(max_errors=20))
        items = list(TopLevelDriver(parser))
        print(f"{parser.errors.error_count()} syntax error(s)")
    """

    def __init__(self, max_errors: int = 100):
        """
        Args:
            max_errors: Errors to collect before should_stop() is True
        """
        self.errors: List[KSyntaxError] = []
        self.max_errors = max_errors

    def add(self, error: KSyntaxError) -> None:
        self.errors.append(error)

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)
