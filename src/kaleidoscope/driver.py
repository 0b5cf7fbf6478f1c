"""
Top-Level Driver
================

The driver repeatedly asks the parser for the next top-level construct
and hands it to a handler, in source order:

    top ::= definition | external | expression | ';'

A ';' between constructs is skipped. When a construct fails to parse,
the driver reports the error once, skips one token and carries on, so a
single malformed statement does not end the session.

What happens to each construct (compiling it, evaluating it, storing
it) is up to the handler. The driver only parses and dispatches.

Example Usage
-------------
>>> from kaleidoscope.driver import parse_program, TopLevelKind
>>> items = parse_program("def f(x) x*2; extern sin(a); f(3)")
>>> [item.kind for item in items]
[<TopLevelKind.DEFINITION: 1>, <TopLevelKind.EXTERN: 2>, <TopLevelKind.EXPRESSION: 3>]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, TextIO, Union
import logging

from kaleidoscope.ast import Function, Prototype
from kaleidoscope.config import ParserOptions
from kaleidoscope.errors import KSyntaxError
from kaleidoscope.lexer import TokenType
from kaleidoscope.parser import ParseResult, Parser
from kaleidoscope.precedence import PrecedenceTable


logger = logging.getLogger(__name__)


class TopLevelKind(Enum):
    """Kinds of top-level items the driver produces."""
    DEFINITION = 1
    EXTERN = 2
    EXPRESSION = 3
    ERROR = 4


@dataclass(frozen=True)
class TopLevelItem:
    """
    One top-level construct.

    Attributes:
        kind: What was parsed
        node: Function for DEFINITION/EXPRESSION, Prototype for EXTERN,
              None for ERROR
        error: The syntax error for ERROR items
    """
    kind: TopLevelKind
    node: Union[Function, Prototype, None] = None
    error: Optional[KSyntaxError] = None

    @property
    def is_error(self) -> bool:
        return self.kind == TopLevelKind.ERROR


class TopLevelHandler:
    """
    Receives parsed constructs from TopLevelDriver.run().

    The default methods do nothing; subclasses override the ones they
    need.
    """

    def handle_definition(self, function: Function) -> None:
        pass

    def handle_extern(self, proto: Prototype) -> None:
        pass

    def handle_expression(self, function: Function) -> None:
        pass

    def handle_error(self, error: KSyntaxError) -> None:
        pass


class TopLevelDriver:
    """
    Drives a parser through a sequence of top-level constructs.

    Iterating over the driver yields TopLevelItem objects until end of
    input. Parsing of one construct completes before the next begins,
    since both share the parser's token cursor.

    Usage:
        driver = TopLevelDriver(Parser(source))
        for item in driver:
            ...

    Attributes:
        parser: The parser being driven
        prompt: Called before each construct is read (for interactive use)
    """

    def __init__(
        self,
        parser: Parser,
        prompt: Optional[Callable[[], None]] = None,
    ):
        self.parser = parser
        self.prompt = prompt

    def __iter__(self) -> Iterator[TopLevelItem]:
        return self.items()

    def items(self) -> Iterator[TopLevelItem]:
        """
        Yield top-level items in source order.

        Stops at end of input, or once the parser's error collector has
        reached its limit.
        """
        parser = self.parser

        while True:
            if self.prompt is not None:
                self.prompt()

            token = parser.current

            if token.type == TokenType.EOF:
                return

            # Ignore top-level semicolons
            if token.is_char(";"):
                parser.advance()
                continue

            if token.type == TokenType.DEF:
                item = self._item(TopLevelKind.DEFINITION, parser.parse_definition())
            elif token.type == TokenType.EXTERN:
                item = self._item(TopLevelKind.EXTERN, parser.parse_extern())
            else:
                item = self._item(TopLevelKind.EXPRESSION, parser.parse_top_level_expr())

            if item.is_error:
                # Skip a token for error recovery
                parser.advance()

            yield item

            if item.is_error and parser.errors.should_stop():
                logger.warning(
                    f"Stopping after {parser.errors.error_count()} errors"
                )
                return

    def run(self, handler: TopLevelHandler) -> int:
        """
        Parse everything and dispatch each item to the handler.

        Returns:
            The number of syntax errors reported
        """
        errors = 0
        for item in self.items():
            if item.kind == TopLevelKind.DEFINITION:
                handler.handle_definition(item.node)
            elif item.kind == TopLevelKind.EXTERN:
                handler.handle_extern(item.node)
            elif item.kind == TopLevelKind.EXPRESSION:
                handler.handle_expression(item.node)
            else:
                errors += 1
                handler.handle_error(item.error)
        return errors

    def _item(self, kind: TopLevelKind, result: ParseResult) -> TopLevelItem:
        if not result.ok:
            return TopLevelItem(TopLevelKind.ERROR, error=result.error)

        if kind == TopLevelKind.DEFINITION:
            logger.info("Parsed a function definition.")
        elif kind == TopLevelKind.EXTERN:
            logger.info("Parsed an extern")
        else:
            logger.info("Parsed a top-level expr")
        return TopLevelItem(kind, node=result.node)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_program(
    source: Union[str, TextIO],
    filename: str = "<input>",
    precedence: Optional[PrecedenceTable] = None,
    options: Optional[ParserOptions] = None,
) -> list[TopLevelItem]:
    """
    Parse a whole program into a list of top-level items.

    Syntax errors do not raise; they appear as ERROR items.
    """
    parser = Parser(source, filename, precedence=precedence, options=options)
    return list(TopLevelDriver(parser))
