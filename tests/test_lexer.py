# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the Kaleidoscope lexer/tokenizer.
#
# Test coverage includes:
#   - Identifiers and the def/extern keywords
#   - Number literals, including strtod-style handling of malformed ones
#   - '#' comments
#   - Single-character tokens
#   - End of input behavior
#   - Token positions and stream input
# =============================================================================

import io
import logging

import pytest
from kaleidoscope.lexer import (
    Lexer,
    Token,
    TokenType,
    is_well_formed_number,
    number_value,
)


# =============================================================================
# Helper Functions
# =============================================================================

def tokenize(source: str) -> list[Token]:
    """Tokenize source and drop the final EOF token."""
    tokens = list(Lexer(source, "<test>").tokenize())
    assert tokens[-1].type == TokenType.EOF
    return tokens[:-1]


def kinds(source: str) -> list[tuple[TokenType, object]]:
    """Reduce tokens to (type, value) pairs for compact comparisons."""
    return [(t.type, t.value) for t in Lexer(source).tokenize()]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = list(Lexer("").tokenize())
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        """Whitespace-only source produces only EOF."""
        assert tokenize("  \t\n\r\n  ") == []

    def test_identifier(self):
        tokens = tokenize("foo")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "foo"

    def test_identifier_with_digits(self):
        """Digits may follow the first character."""
        tokens = tokenize("x1y2")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "x1y2"

    def test_digit_cannot_start_identifier(self):
        """'1x' is a number followed by an identifier."""
        assert kinds("1x") == [
            (TokenType.NUMBER, 1.0),
            (TokenType.IDENTIFIER, "x"),
            (TokenType.EOF, None),
        ]

    def test_underscore_is_not_identifier_char(self):
        assert kinds("a_b") == [
            (TokenType.IDENTIFIER, "a"),
            (TokenType.CHAR, "_"),
            (TokenType.IDENTIFIER, "b"),
            (TokenType.EOF, None),
        ]

    def test_multiple_identifiers(self):
        tokens = tokenize("foo bar\tbaz")
        assert [t.value for t in tokens] == ["foo", "bar", "baz"]


# =============================================================================
# Keyword Tests
# =============================================================================

class TestKeywords:
    """Test keyword recognition."""

    def test_def(self):
        tokens = tokenize("def")
        assert tokens[0].type == TokenType.DEF

    def test_extern(self):
        tokens = tokenize("extern")
        assert tokens[0].type == TokenType.EXTERN

    def test_keyword_prefix_is_identifier(self):
        """'define' starts with 'def' but is an identifier."""
        tokens = tokenize("define")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "define"

    def test_keywords_are_case_sensitive(self):
        tokens = tokenize("Def EXTERN")
        assert [t.type for t in tokens] == [TokenType.IDENTIFIER, TokenType.IDENTIFIER]

    def test_keyword_followed_by_digits(self):
        tokens = tokenize("def1")
        assert tokens[0].type == TokenType.IDENTIFIER


# =============================================================================
# Number Format Tests
# =============================================================================

class TestNumbers:
    """Test numeric literal recognition."""

    def test_integer(self):
        tokens = tokenize("42")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == 42.0
        assert isinstance(tokens[0].value, float)

    def test_decimal(self):
        tokens = tokenize("3.25")
        assert tokens[0].value == 3.25

    def test_leading_dot(self):
        tokens = tokenize(".5")
        assert tokens[0].value == 0.5

    def test_trailing_dot(self):
        tokens = tokenize("5.")
        assert tokens[0].value == 5.0

    def test_multiple_dots_keep_prefix(self):
        """'1.2.3' is one token whose value is the valid prefix 1.2."""
        tokens = tokenize("1.2.3")
        assert len(tokens) == 1
        assert tokens[0].value == 1.2
        assert tokens[0].text == "1.2.3"

    def test_lone_dot_is_zero(self):
        tokens = tokenize(".")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == 0.0

    def test_malformed_number_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="kaleidoscope.lexer")
        tokenize("1..2")
        assert "malformed number '1..2'" in caplog.text

    def test_number_value_helper(self):
        assert number_value("10") == 10.0
        assert number_value("..5") == 0.0
        assert number_value("2..") == 2.0

    def test_well_formed_check(self):
        assert is_well_formed_number("1.5")
        assert is_well_formed_number(".5")
        assert not is_well_formed_number("1.2.3")
        assert not is_well_formed_number(".")


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test '#' line comments."""

    def test_comment_is_skipped(self):
        """A comment line tokenizes the same as if it were absent."""
        assert kinds("# comment\n42") == kinds("42")

    def test_comment_at_end_of_input(self):
        assert kinds("1 # trailing") == [
            (TokenType.NUMBER, 1.0),
            (TokenType.EOF, None),
        ]

    def test_comment_ended_by_carriage_return(self):
        assert kinds("# c\rx") == [
            (TokenType.IDENTIFIER, "x"),
            (TokenType.EOF, None),
        ]

    def test_consecutive_comments(self):
        assert kinds("# one\n# two\n\n# three\nfoo") == [
            (TokenType.IDENTIFIER, "foo"),
            (TokenType.EOF, None),
        ]

    def test_comment_only(self):
        assert tokenize("# nothing here") == []


# =============================================================================
# Character Token Tests
# =============================================================================

class TestCharTokens:
    """Characters the lexer does not otherwise recognize."""

    def test_punctuation(self):
        tokens = tokenize("( ) , ;")
        assert [t.type for t in tokens] == [TokenType.CHAR] * 4
        assert [t.value for t in tokens] == ["(", ")", ",", ";"]

    def test_operators_are_single_characters(self):
        """'<=' is two tokens; operators are never combined."""
        tokens = tokenize("<=")
        assert [t.value for t in tokens] == ["<", "="]

    def test_non_ascii_letter_is_char(self):
        tokens = tokenize("é")
        assert tokens[0].type == TokenType.CHAR
        assert tokens[0].value == "é"

    def test_expression(self):
        assert kinds("x+1") == [
            (TokenType.IDENTIFIER, "x"),
            (TokenType.CHAR, "+"),
            (TokenType.NUMBER, 1.0),
            (TokenType.EOF, None),
        ]

    def test_is_char(self):
        token = tokenize("(")[0]
        assert token.is_char("(")
        assert not token.is_char(")")


# =============================================================================
# End of Input Tests
# =============================================================================

class TestEndOfInput:
    """EOF is returned once the input is exhausted, and keeps coming."""

    def test_repeated_eof(self):
        lexer = Lexer("x")
        assert lexer.next_token().type == TokenType.IDENTIFIER
        for _ in range(3):
            assert lexer.next_token().type == TokenType.EOF

    def test_tokenize_stops_at_eof(self):
        tokens = list(Lexer("a b").tokenize())
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_iteration(self):
        assert len(list(Lexer("1 2 3"))) == 4

    def test_arbitrary_bytes_never_fail(self):
        """Every character sequence lexes to tokens ending in EOF."""
        source = "".join(chr(c) for c in range(0, 256))
        tokens = list(Lexer(source).tokenize())
        assert tokens[-1].type == TokenType.EOF


# =============================================================================
# Position and Stream Tests
# =============================================================================

class TestPositions:
    """Token locations and input sources."""

    def test_columns(self):
        tokens = tokenize("def f(x)")
        assert [(t.line, t.column) for t in tokens] == [
            (1, 1), (1, 5), (1, 6), (1, 7), (1, 8),
        ]

    def test_lines(self):
        tokens = tokenize("def f\n  x")
        assert (tokens[2].line, tokens[2].column) == (2, 3)

    def test_eof_position(self):
        tokens = list(Lexer("42").tokenize())
        assert (tokens[-1].line, tokens[-1].column) == (1, 3)

    def test_location(self):
        token = tokenize("\n  foo")[0]
        assert str(token.location) == "<test>:2:3"

    def test_stream_input(self):
        stream = io.StringIO("extern sin(x)")
        types = [t.type for t in Lexer(stream, "stream.k").tokenize()]
        assert types[0] == TokenType.EXTERN
        assert types[-1] == TokenType.EOF

    def test_source_lines(self):
        lexer = Lexer("a\nbcd\ne")
        list(lexer.tokenize())
        assert lexer.get_source_line(2) == "bcd"
        assert lexer.get_source_line(9) is None

    def test_describe(self):
        tokens = list(Lexer("foo 1.5 ( ").tokenize())
        assert tokens[0].describe() == "identifier 'foo'"
        assert tokens[1].describe() == "number '1.5'"
        assert tokens[2].describe() == "'('"
        assert tokens[3].describe() == "end of input"

    @pytest.mark.parametrize("source", ["def", "extern", "foo", "1", "+"])
    def test_text_matches_source(self, source):
        assert tokenize(source)[0].text == source

    def test_source_line_history_is_bounded(self):
        """Only recent lines are kept for diagnostics."""
        count = Lexer.SOURCE_LINE_HISTORY * 4
        lexer = Lexer("\n".join(f"x{i}" for i in range(count)))
        list(lexer.tokenize())
        assert len(lexer._lines) == Lexer.SOURCE_LINE_HISTORY
        assert lexer.get_source_line(1) is None
        assert lexer.get_source_line(count) == f"x{count - 1}"
        assert lexer.get_source_line(count - 1) == f"x{count - 2}"
