"""
kparse - Kaleidoscope Parser Command-Line Interface
===================================================

Parses Kaleidoscope source and prints each top-level construct it finds.
Syntax errors are reported on stderr and parsing resumes with the next
construct.

Usage Examples
--------------
Parse a file:
    $ kparse fib.k

Print the AST of every construct:
    $ kparse --ast fib.k

Add operators to the precedence table:
    $ kparse -p '/=40' -p '>=10' program.k

Interactive session:
    $ kparse --repl
    ready> def add(a b) a + b
    definition: def add(a b) (a + b)
"""

import logging
import sys
from typing import TextIO

import click

from kaleidoscope import __version__
from kaleidoscope.ast import ASTPrinter, Function, format_expr, format_node
from kaleidoscope.cli.errors import ExitCode, handle_cli_exception
from kaleidoscope.config import ParserOptions
from kaleidoscope.driver import TopLevelDriver, TopLevelItem, TopLevelKind
from kaleidoscope.parser import Parser
from kaleidoscope.precedence import parse_precedence_entry


LABELS = {
    TopLevelKind.DEFINITION: "definition",
    TopLevelKind.EXTERN: "extern",
    TopLevelKind.EXPRESSION: "expression",
}


def _validate_precedence(ctx, param, values: tuple[str, ...]) -> list[tuple[str, int]]:
    """Click callback: turn OP=N strings into (op, precedence) pairs."""
    entries = []
    for value in values:
        try:
            entries.append(parse_precedence_entry(value))
        except ValueError as e:
            raise click.BadParameter(str(e), ctx=ctx, param=param)
    return entries


def format_item(item: TopLevelItem, show_ast: bool = False) -> str:
    """Render a successfully parsed item for output."""
    label = LABELS[item.kind]

    if show_ast:
        return f"{label}:\n{ASTPrinter().print(item.node)}"

    if item.kind == TopLevelKind.EXPRESSION and isinstance(item.node, Function):
        return f"{label}: {format_expr(item.node.body)}"
    return f"{label}: {format_node(item.node)}"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
)
@click.option(
    "--ast", "show_ast",
    is_flag=True,
    help="Print each construct as an indented AST",
)
@click.option(
    "-p", "--precedence",
    "precedence_entries",
    multiple=True,
    metavar="OP=N",
    callback=_validate_precedence,
    help="Set a binary operator's precedence (can be repeated)",
)
@click.option(
    "--strict-numbers",
    is_flag=True,
    help="Reject numeric literals such as 1.2.3",
)
@click.option(
    "--repl",
    is_flag=True,
    help="Interactive mode: print a prompt before each construct",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(version=__version__, prog_name="kparse")
def main(
    input_file: TextIO,
    show_ast: bool,
    precedence_entries: list[tuple[str, int]],
    strict_numbers: bool,
    repl: bool,
    verbose: bool,
) -> None:
    """
    Parse Kaleidoscope source.

    INPUT_FILE is the source to parse; it defaults to standard input.

    \b
    Examples:
        kparse fib.k                 # One line per construct
        kparse --ast fib.k           # Indented AST
        kparse -p '/=40' prog.k      # Add the '/' operator
        kparse --repl                # Interactive session
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    options = ParserOptions.from_env()
    for op, precedence in precedence_entries:
        options.precedence[op] = precedence
    if strict_numbers:
        options.strict_numbers = True

    filename = getattr(input_file, "name", "<stdin>")
    prompt = _prompt if repl else None

    try:
        parser = Parser(input_file, filename, options=options)
        _parse_all(TopLevelDriver(parser, prompt=prompt), show_ast)
    except Exception as e:
        handle_cli_exception(e, verbose)

    if repl:
        click.echo("", err=True)

    errors = parser.errors.error_count()
    if verbose:
        click.echo(f"{errors} syntax error(s)", err=True)

    if errors:
        sys.exit(ExitCode.SYNTAX_ERROR)


def _parse_all(driver: TopLevelDriver, show_ast: bool) -> None:
    for item in driver:
        if item.is_error:
            click.echo(str(item.error), err=True)
        else:
            click.echo(format_item(item, show_ast))


def _prompt() -> None:
    click.echo("ready> ", nl=False, err=True)


if __name__ == "__main__":
    main()
