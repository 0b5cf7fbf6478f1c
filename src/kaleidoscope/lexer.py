"""
Kaleidoscope Lexer (Tokenizer)
==============================

This module implements the lexer for the Kaleidoscope language. It
converts a character stream into tokens, one token per call, so the
parser can work on interactive input without reading it all first.

Token Categories
----------------
- Keywords: def, extern (case-sensitive)
- Identifiers: [A-Za-z][A-Za-z0-9]*
- Numbers: [0-9.]+ read as a 64-bit float
- Characters: any other single character, returned verbatim
  (operators and punctuation such as ( ) , ;)
- EOF: end of input, returned again on every later call

Comments
--------
A '#' starts a comment that runs to the end of the line. Comments are
skipped completely and never reach the parser.

Number Literals
---------------
The lexer accepts any run of digits and dots and converts it the way
C's strtod does: the longest valid leading float is used and the rest
is ignored. "1.2.3" gives 1.2, and "." gives 0.0. The raw text is kept
on the token so stricter callers can reject such literals.

Example Usage
-------------
>>> from kaleidoscope.lexer import Lexer
>>> for token in Lexer("def f(x) x * 2"):
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'f', 1:5)
Token(CHAR, '(', 1:6)
Token(IDENTIFIER, 'x', 1:7)
Token(CHAR, ')', 1:8)
Token(IDENTIFIER, 'x', 1:10)
Token(CHAR, '*', 1:12)
Token(NUMBER, 2.0, 1:14)
Token(EOF, 1:15)
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, TextIO, Union
import io
import logging
import re
import string

from kaleidoscope.errors import SourceLocation


logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the Kaleidoscope language.

    Keywords get their own types so the parser can dispatch on them
    without comparing strings. Every character the lexer does not
    otherwise recognize is a CHAR token carrying that character.
    """

    EOF = auto()            # End of input
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Floating point literals
    CHAR = auto()           # Any other single character


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from Kaleidoscope source.

    Attributes:
        type: The TokenType classification
        value: str for identifiers/keywords/characters, float for numbers,
               None for EOF
        text: The raw source text of the token ("" for EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source
    """
    type: TokenType
    value: Union[str, float, None]
    text: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_char(self, char: str) -> bool:
        """Return True if this is the CHAR token for the given character."""
        return self.type == TokenType.CHAR and self.value == char

    def describe(self) -> str:
        """Human-readable description used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.text}'"
        if self.type == TokenType.NUMBER:
            return f"number '{self.text}'"
        if self.type == TokenType.CHAR and self.text in ("\n", "\r", "\t", "\f", "\v"):
            return f"character {self.text!r}"
        return f"'{self.text}'"


# =============================================================================
# Number Conversion
# =============================================================================

# Longest leading float in a run of [0-9.] characters
_FLOAT_PREFIX = re.compile(r"\d+\.?\d*|\.\d+")

# A complete, well-formed literal
_FLOAT_LITERAL = re.compile(r"(\d+\.?\d*|\.\d+)\Z")


def number_value(text: str) -> float:
    """
    Convert a run of digits and dots to a float, strtod style.

    Args:
        text: Characters from [0-9.]

    Returns:
        Value of the longest valid leading float, or 0.0 if there is none
    """
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))


def is_well_formed_number(text: str) -> bool:
    """Return True if the whole text is a valid float literal."""
    return _FLOAT_LITERAL.match(text) is not None


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Kaleidoscope source one token at a time.

    The lexer reads its input one character at a time and keeps a single
    character of lookahead, so it works the same on a string, a file or
    an interactive stream such as sys.stdin (where it blocks waiting for
    input).

    The lexer never fails: every character sequence maps to a token
    sequence that ends in EOF, and EOF is returned again on every call
    after the input is exhausted.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for token locations)
    """

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits
    NUMBER_CHARS = string.digits + "."
    WHITESPACE = " \t\n\r\f\v"
    COMMENT_START = "#"
    SOURCE_LINE_HISTORY = 16

    def __init__(
        self,
        source: Union[str, TextIO],
        filename: str = "<input>",
    ):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a text stream read with read(1)
            filename: Name of the source (for error messages)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        self.filename = filename

        # Position of _last_char
        self._line = 1
        self._column = 0
        self._pending_newline = False

        # Text of the most recent lines, for diagnostics; the last entry
        # is line self._line
        self._lines: deque[str] = deque([""], maxlen=self.SOURCE_LINE_HISTORY)

        # Lookahead character; a blank is skipped before the first token
        self._last_char = " "

    def __iter__(self) -> Iterator[Token]:
        return self.tokenize()

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including the first EOF token.

        Yields:
            Token objects in source order
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """
        Scan and return the next token, advancing the lexer.

        Returns:
            The next Token (EOF once the input is exhausted)
        """
        self._skip_whitespace_and_comments()

        char = self._last_char
        line, column = self._line, self._column

        if not char:
            return self._make_token(TokenType.EOF, None, "", line, column)

        if char in self.IDENT_START:
            return self._scan_identifier(line, column)

        if char in self.NUMBER_CHARS:
            return self._scan_number(line, column)

        self._read_char()
        return self._make_token(TokenType.CHAR, char, char, line, column)

    def get_source_line(self, line: int) -> Optional[str]:
        """
        Return the text of a recently read source line.

        Only the last SOURCE_LINE_HISTORY lines are kept. The current line
        may be incomplete if the lexer has not reached its end yet.
        """
        index = len(self._lines) - 1 - (self._line - line)
        if 0 <= index < len(self._lines) and line > 0:
            return self._lines[index].rstrip("\r")
        return None

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read_char(self) -> str:
        """
        Read the next character into _last_char and update the position.

        Returns "" at end of input, and keeps returning it.
        """
        if self._pending_newline:
            self._line += 1
            self._column = 0
            self._lines.append("")
            self._pending_newline = False

        char = self._stream.read(1) if self._last_char else ""
        if char:
            self._column += 1
            if char == "\n":
                self._pending_newline = True
            else:
                self._lines[-1] += char
        else:
            # Point EOF just past the last character
            self._column += 1

        self._last_char = char
        return char

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and '#' comments before a token."""
        while self._last_char:
            if self._last_char in self.WHITESPACE:
                self._read_char()
                continue

            if self._last_char == self.COMMENT_START:
                self._skip_comment()
                continue

            break

    def _skip_comment(self) -> None:
        """Skip a '#' comment, stopping before the line break."""
        while self._read_char() and self._last_char not in "\n\r":
            pass

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_identifier(self, line: int, column: int) -> Token:
        """Scan an identifier or keyword starting at _last_char."""
        chars = [self._last_char]
        while self._read_char() and self._last_char in self.IDENT_CHARS:
            chars.append(self._last_char)

        text = "".join(chars)
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return self._make_token(token_type, text, text, line, column)

    def _scan_number(self, line: int, column: int) -> Token:
        """Scan a run of digits and dots and convert it to a float."""
        chars = [self._last_char]
        while self._read_char() and self._last_char in self.NUMBER_CHARS:
            chars.append(self._last_char)

        text = "".join(chars)
        value = number_value(text)
        if not is_well_formed_number(text):
            logger.debug(
                f"{self.filename}:{line}:{column}: "
                f"malformed number '{text}' read as {value}"
            )
        return self._make_token(TokenType.NUMBER, value, text, line, column)

    def _make_token(
        self,
        token_type: TokenType,
        value: Union[str, float, None],
        text: str,
        line: int,
        column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            text=text,
            line=line,
            column=column,
            filename=self.filename,
        )
