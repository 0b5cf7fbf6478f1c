"""
Kaleidoscope Parser
===================

This module implements the Kaleidoscope parser: recursive descent for
primary expressions and top-level constructs, and operator-precedence
climbing for chains of binary operators.

Grammar (EBNF)
--------------
primary    ::= NUMBER
             | IDENTIFIER ['(' (expr (',' expr)*)? ')']
             | '(' expr ')'
expr       ::= primary (BINOP primary)*
prototype  ::= IDENTIFIER '(' IDENTIFIER* ')'
definition ::= 'def' prototype expr
external   ::= 'extern' prototype
toplevel   ::= expr

Binary operators are not part of the grammar. Any CHAR token with a
positive entry in the PrecedenceTable is a binary operator, so the
operator set can change between (and during) parses.

Precedence Climbing
-------------------
After the first primary of an expression, _parse_binop_rhs(0, lhs) runs:

1. Look up the precedence of the current token (-1 if not an operator).
2. If it is below the minimum, return the expression built so far.
3. Consume the operator and parse the next primary as the right operand.
4. If the operator after that binds strictly tighter, let it take the
   right operand first: recurse with minimum precedence + 1.
5. Combine into a BinaryExpr and loop.

The strict comparison in step 4 makes equal-precedence operators
associate to the left: 1+2+3 is ((1+2)+3).

Token Discipline
----------------
The parser keeps exactly one token of lookahead in `current`. Every
parse routine starts with `current` on the first token of its construct
and leaves it on the first token after the construct.

Error Handling
--------------
Internal routines raise KSyntaxError subclasses, which abandon the whole
construct: no partial tree is ever returned. The public parse_* methods
catch the error, record it in `errors`, and return a ParseResult. The
parser does not resynchronize; see kaleidoscope.driver for that.

Example Usage
-------------
>>> from kaleidoscope.parser import Parser
>>> parser = Parser("def add(a b) a + b")
>>> result = parser.parse_definition()
>>> result.ok
True
>>> result.node.proto.params
('a', 'b')
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TextIO, TypeVar, Union
import logging

from kaleidoscope.ast import (
    BinaryExpr,
    CallExpr,
    Expr,
    Function,
    NumberExpr,
    Prototype,
    VariableExpr,
)
from kaleidoscope.config import ParserOptions
from kaleidoscope.errors import (
    ErrorCollector,
    KSyntaxError,
    MalformedNumberError,
    MissingTokenError,
    NestingTooDeepError,
    UnexpectedTokenError,
)
from kaleidoscope.lexer import Lexer, Token, TokenType, is_well_formed_number
from kaleidoscope.precedence import PrecedenceTable


logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Parse Result
# =============================================================================

@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """
    Outcome of a public parse call: either a node or an error.

    Attributes:
        node: The parsed node (None on failure)
        error: The syntax error (None on success)
    """
    node: Optional[T] = None
    error: Optional[KSyntaxError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the node, or raise the stored error.

        Raises:
            KSyntaxError: If the parse failed
        """
        if self.error is not None:
            raise self.error
        return self.node


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Single-lookahead parser for Kaleidoscope.

    The parser owns its lexer and current token; independent parse
    sessions use independent Parser instances.

    The first token is read lazily, on the first access to `current`, so
    an interactive driver can print a prompt before the parser blocks on
    input.

    Attributes:
        precedence: The operator table consulted for binary operators
        options: Parser configuration
        errors: Every syntax error reported by this parser
    """

    def __init__(
        self,
        source: Union[str, TextIO, Lexer],
        filename: str = "<input>",
        precedence: Optional[PrecedenceTable] = None,
        options: Optional[ParserOptions] = None,
    ):
        """
        Initialize the parser.

        Args:
            source: Source text, a text stream, or a ready-made Lexer
            filename: Source name for diagnostics (ignored for a Lexer)
            precedence: Operator table; built from options if None
            options: Parser configuration (defaults if None)
        """
        self.options = options or ParserOptions()
        self.precedence = (
            precedence if precedence is not None
            else self.options.build_precedence_table()
        )
        self.lexer = source if isinstance(source, Lexer) else Lexer(source, filename)
        self.errors = ErrorCollector(max_errors=self.options.max_errors)
        self._current: Optional[Token] = None

    # =========================================================================
    # Token Access
    # =========================================================================

    @property
    def current(self) -> Token:
        """The lookahead token, read on first access."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current

    def advance(self) -> Token:
        """Consume the current token and return the new current token."""
        self._current = self.lexer.next_token()
        return self._current

    def at_end(self) -> bool:
        return self.current.type == TokenType.EOF

    def _current_precedence(self) -> int:
        return self.precedence.token_precedence(self.current)

    # =========================================================================
    # Public Entry Points
    # =========================================================================

    def parse_expression(self) -> ParseResult[Expr]:
        """Parse `expr`."""
        return self._run(self._parse_expression)

    def parse_prototype(self) -> ParseResult[Prototype]:
        """Parse `prototype`."""
        return self._run(self._parse_prototype)

    def parse_definition(self) -> ParseResult[Function]:
        """Parse `definition`; current must be the 'def' keyword."""
        return self._run(self._parse_definition)

    def parse_extern(self) -> ParseResult[Prototype]:
        """Parse `external`; current must be the 'extern' keyword."""
        return self._run(self._parse_extern)

    def parse_top_level_expr(self) -> ParseResult[Function]:
        """Parse `toplevel`: an expression wrapped in an anonymous function."""
        return self._run(self._parse_top_level_expr)

    def _run(self, parse: Callable[[], T]) -> ParseResult[T]:
        """Run a parse routine, turning syntax errors into a failed result."""
        start = self.current
        try:
            node = parse()
        except KSyntaxError as e:
            return self._fail(e)
        except RecursionError:
            return self._fail(
                NestingTooDeepError(start.location, self._source_line(start))
            )
        return ParseResult(node=node)

    def _fail(self, error: KSyntaxError) -> ParseResult:
        logger.debug(f"Syntax error: {error.message} at {error.location}")
        self.errors.add(error)
        return ParseResult(error=error)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expr:
        """expr ::= primary (BINOP primary)*"""
        lhs = self._parse_primary()
        return self._parse_binop_rhs(0, lhs)

    def _parse_binop_rhs(self, min_precedence: int, lhs: Expr) -> Expr:
        """
        Fold binary operators into lhs by precedence climbing.

        Args:
            min_precedence: Weakest operator this call may consume
            lhs: The expression parsed so far

        Returns:
            lhs extended with every operator of at least min_precedence
        """
        while True:
            token_precedence = self._current_precedence()

            # Not an operator, or one that belongs to an enclosing call
            if token_precedence < min_precedence:
                return lhs

            op_token = self.current
            self.advance()

            rhs = self._parse_primary()

            # A tighter operator after rhs takes rhs as its left operand
            if token_precedence < self._current_precedence():
                rhs = self._parse_binop_rhs(token_precedence + 1, rhs)

            lhs = BinaryExpr(op_token.value, lhs, rhs, location=op_token.location)

    def _parse_primary(self) -> Expr:
        """
        primary ::= identifierexpr | numberexpr | parenexpr
        """
        token = self.current

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_expr()

        if token.type == TokenType.NUMBER:
            return self._parse_number_expr()

        if token.is_char("("):
            return self._parse_paren_expr()

        raise UnexpectedTokenError(
            "expected expression",
            found=token.describe(),
            location=token.location,
            source_line=self._source_line(token),
        )

    def _parse_number_expr(self) -> NumberExpr:
        token = self.current
        if self.options.strict_numbers and not is_well_formed_number(token.text):
            raise MalformedNumberError(
                token.text, token.location, self._source_line(token)
            )
        self.advance()
        return NumberExpr(token.value, location=token.location)

    def _parse_paren_expr(self) -> Expr:
        """parenexpr ::= '(' expr ')'"""
        self.advance()  # consume '('
        expr = self._parse_expression()

        if not self.current.is_char(")"):
            raise self._missing("expected ')'", ")")

        self.advance()  # consume ')'
        return expr

    def _parse_identifier_expr(self) -> Expr:
        """
        identifierexpr ::= IDENTIFIER
                         | IDENTIFIER '(' (expr (',' expr)*)? ')'
        """
        name_token = self.current
        self.advance()

        if not self.current.is_char("("):
            return VariableExpr(name_token.value, location=name_token.location)

        self.advance()  # consume '('
        args: list[Expr] = []

        if not self.current.is_char(")"):
            while True:
                args.append(self._parse_expression())

                if self.current.is_char(")"):
                    break

                if not self.current.is_char(","):
                    token = self.current
                    raise UnexpectedTokenError(
                        "expected ')' or ',' in argument list",
                        found=token.describe(),
                        location=token.location,
                        source_line=self._source_line(token),
                    )
                self.advance()  # consume ','

        self.advance()  # consume ')'
        return CallExpr(name_token.value, args, location=name_token.location)

    # =========================================================================
    # Top-Level Constructs
    # =========================================================================

    def _parse_prototype(self) -> Prototype:
        """prototype ::= IDENTIFIER '(' IDENTIFIER* ')'"""
        name_token = self.current
        if name_token.type != TokenType.IDENTIFIER:
            raise UnexpectedTokenError(
                "expected function name in prototype",
                found=name_token.describe(),
                location=name_token.location,
                source_line=self._source_line(name_token),
            )

        self.advance()
        if not self.current.is_char("("):
            raise self._missing("expected '(' in prototype", "(")

        params: list[str] = []
        while self.advance().type == TokenType.IDENTIFIER:
            params.append(self.current.value)

        if not self.current.is_char(")"):
            hint = None
            if self.current.is_char(","):
                hint = "parameter names are separated by spaces, not commas"
            raise self._missing("expected ')' in prototype", ")", hint=hint)

        self.advance()  # consume ')'
        return Prototype(name_token.value, params, location=name_token.location)

    def _parse_definition(self) -> Function:
        """definition ::= 'def' prototype expr"""
        def_token = self.current
        self.advance()  # consume 'def'
        proto = self._parse_prototype()
        body = self._parse_expression()
        logger.debug(f"Parsed definition of '{proto.name}'")
        return Function(proto, body, location=def_token.location)

    def _parse_extern(self) -> Prototype:
        """external ::= 'extern' prototype"""
        self.advance()  # consume 'extern'
        proto = self._parse_prototype()
        logger.debug(f"Parsed extern '{proto.name}'")
        return proto

    def _parse_top_level_expr(self) -> Function:
        """toplevel ::= expr, wrapped in a nameless zero-argument function"""
        start = self.current
        body = self._parse_expression()
        proto = Prototype(self.options.anon_function_name, (), location=start.location)
        logger.debug("Parsed top-level expression")
        return Function(proto, body, location=start.location)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _source_line(self, token: Token) -> Optional[str]:
        return self.lexer.get_source_line(token.line)

    def _missing(
        self,
        message: str,
        expected: str,
        hint: Optional[str] = None,
    ) -> MissingTokenError:
        token = self.current
        if hint is None:
            hint = f"found {token.describe()}"
        return MissingTokenError(
            message,
            expected,
            location=token.location,
            source_line=self._source_line(token),
            hint=hint,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def _parse_whole(
    parse: Callable[[Parser], ParseResult[T]],
    source: str,
    filename: str,
    precedence: Optional[PrecedenceTable],
    options: Optional[ParserOptions],
) -> T:
    parser = Parser(source, filename, precedence=precedence, options=options)
    node = parse(parser).unwrap()

    if not parser.at_end():
        token = parser.current
        raise UnexpectedTokenError(
            "unexpected token after end of construct",
            found=token.describe(),
            location=token.location,
            source_line=parser.lexer.get_source_line(token.line),
        )
    return node


def parse_expression(
    source: str,
    filename: str = "<input>",
    precedence: Optional[PrecedenceTable] = None,
    options: Optional[ParserOptions] = None,
) -> Expr:
    """
    Parse source that holds exactly one expression.

    Raises:
        KSyntaxError: If the source is not a single valid expression
    """
    return _parse_whole(Parser.parse_expression, source, filename, precedence, options)


def parse_prototype(
    source: str,
    filename: str = "<input>",
    precedence: Optional[PrecedenceTable] = None,
    options: Optional[ParserOptions] = None,
) -> Prototype:
    """
    Parse source that holds exactly one prototype, e.g. "foo(x y)".

    Raises:
        KSyntaxError: If the source is not a single valid prototype
    """
    return _parse_whole(Parser.parse_prototype, source, filename, precedence, options)
