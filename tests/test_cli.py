"""
Tests for the kparse command-line tool.
"""

import click
import pytest
from click.testing import CliRunner

from kaleidoscope import __version__
from kaleidoscope.cli.errors import ExitCode, handle_cli_exception
from kaleidoscope.cli.kparse import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "KALEIDOSCOPE_PRECEDENCE",
        "KALEIDOSCOPE_STRICT_NUMBERS",
        "KALEIDOSCOPE_ANON_NAME",
        "KALEIDOSCOPE_MAX_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Output
# =============================================================================

class TestOutput:
    """One line per construct on stdout."""

    def test_definition(self, runner):
        result = runner.invoke(main, input="def add(a b) a + b\n")
        assert result.exit_code == ExitCode.SUCCESS
        assert "definition: def add(a b) (a + b)" in result.output

    def test_expression(self, runner):
        result = runner.invoke(main, input="1 + 2 * 3;\n")
        assert result.exit_code == 0
        assert "expression: (1 + (2 * 3))" in result.output

    def test_extern(self, runner):
        result = runner.invoke(main, input="extern sin(a);")
        assert "extern: extern sin(a)" in result.output

    def test_ast(self, runner):
        result = runner.invoke(main, ["--ast"], input="def f(x) x+1")
        assert result.exit_code == 0
        assert "definition:\nFunction f(x)\n  Binary '+'\n    Variable x\n    Number 1" in result.output

    def test_file_argument(self, runner, tmp_path):
        source = tmp_path / "fib.k"
        source.write_text("# fib\ndef fib(x) fib(x-1)+fib(x-2)\nfib(10)\n")
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == 0
        assert "definition: def fib(x) (fib((x - 1)) + fib((x - 2)))" in result.output
        assert "expression: fib(10)" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "missing.k")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_repl_prompt(self, runner):
        result = runner.invoke(main, ["--repl"], input="4;\n")
        assert result.exit_code == 0
        assert "ready> " in result.output
        assert "expression: 4" in result.output


# =============================================================================
# Syntax Errors
# =============================================================================

class TestSyntaxErrors:
    """Errors are reported and parsing continues."""

    def test_error_exit_code(self, runner):
        result = runner.invoke(main, input="1 + )\n")
        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "error: expected expression" in result.output

    def test_recovery_continues(self, runner):
        result = runner.invoke(main, input=") 4\n")
        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "expression: 4" in result.output

    def test_verbose_summary(self, runner):
        result = runner.invoke(main, ["-v"], input="def\n")
        assert "1 syntax error(s)" in result.output

    def test_error_count_matches_reports(self, runner):
        result = runner.invoke(main, ["-v"], input=") ; def ; 1\n")
        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "2 syntax error(s)" in result.output
        assert "expression: 1" in result.output


# =============================================================================
# Options
# =============================================================================

class TestOptions:
    """Tests for precedence and number options."""

    def test_unknown_operator_is_an_error(self, runner):
        result = runner.invoke(main, input="8 / 2\n")
        assert result.exit_code == ExitCode.SYNTAX_ERROR

    def test_precedence_option(self, runner):
        result = runner.invoke(main, ["-p", "/=40"], input="8 / 2 + 1\n")
        assert result.exit_code == 0
        assert "expression: ((8 / 2) + 1)" in result.output

    def test_repeated_precedence_option(self, runner):
        result = runner.invoke(main, ["-p", "/=40", "-p", ">=10"], input="a > b / c\n")
        assert "expression: (a > (b / c))" in result.output

    def test_bad_precedence_option(self, runner):
        result = runner.invoke(main, ["-p", "bogus"], input="1\n")
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_precedence_from_environment(self, runner, monkeypatch):
        monkeypatch.setenv("KALEIDOSCOPE_PRECEDENCE", "/=40")
        result = runner.invoke(main, input="8 / 2\n")
        assert result.exit_code == 0
        assert "expression: (8 / 2)" in result.output

    def test_numbers_are_permissive_by_default(self, runner):
        result = runner.invoke(main, input="1.2.3\n")
        assert result.exit_code == 0
        assert "expression: 1.2" in result.output

    def test_strict_numbers(self, runner):
        result = runner.invoke(main, ["--strict-numbers"], input="1.2.3\n")
        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "malformed number '1.2.3'" in result.output


# =============================================================================
# Large Inputs
# =============================================================================

class TestLongExpressions:
    """Deep trees from long operator chains are printed, not rejected."""

    TERMS = 3000

    def source(self):
        return "+".join(["1"] * self.TERMS) + "\n"

    def test_long_chain(self, runner):
        result = runner.invoke(main, input=self.source())
        assert result.exit_code == ExitCode.SUCCESS
        assert "expression: " + "(" * (self.TERMS - 1) + "1 + 1)" in result.output

    def test_long_chain_ast(self, runner):
        result = runner.invoke(main, ["--ast"], input=self.source())
        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.count("Number 1") == self.TERMS


# =============================================================================
# Exit Codes
# =============================================================================

class TestHandleCliException:
    """Tests for handle_cli_exception()."""

    def test_bad_parameter(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(click.BadParameter("nope"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    def test_missing_file(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(FileNotFoundError("missing.k"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    def test_internal_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(RuntimeError("boom"))
        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
