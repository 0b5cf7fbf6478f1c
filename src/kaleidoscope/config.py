"""
Parser Configuration
====================

Options that control a parse session. Configuration can come from:
- Default values (defined here)
- Keyword arguments / CLI options
- Environment variables (ParserOptions.from_env)

Environment Variables
---------------------
| Variable                      | Meaning                                 |
|-------------------------------|-----------------------------------------|
| KALEIDOSCOPE_PRECEDENCE       | Extra operators, e.g. "/=40,>=10"       |
| KALEIDOSCOPE_STRICT_NUMBERS   | "1"/"true"/"yes" rejects "1.2.3"        |
| KALEIDOSCOPE_ANON_NAME        | Name given to top-level expressions     |
| KALEIDOSCOPE_MAX_ERRORS       | Errors collected before giving up       |
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import os

from kaleidoscope.precedence import (
    DEFAULT_PRECEDENCE,
    PrecedenceTable,
    parse_precedence_entries,
)


logger = logging.getLogger(__name__)


# Reserved name of the prototype wrapped around top-level expressions
ANON_FUNCTION_NAME = "__anon_expr"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ParserOptions:
    """
    Parser configuration options.

    Attributes:
        precedence: Operator -> precedence entries used to seed the table
        strict_numbers: Reject numeric literals that are not a single valid
                        float (e.g. "1.2.3"). Off by default: the literal is
                        read strtod style.
        anon_function_name: Prototype name for top-level expressions
        max_errors: Errors the driver collects before it stops
    """
    precedence: dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_PRECEDENCE)
    )
    strict_numbers: bool = False
    anon_function_name: str = ANON_FUNCTION_NAME
    max_errors: int = 100

    def build_precedence_table(self) -> PrecedenceTable:
        """Create a fresh table seeded from these options."""
        return PrecedenceTable(self.precedence)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "ParserOptions":
        """
        Create options from environment variables.

        Variables that are unset keep their defaults. Invalid values are
        logged and ignored.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            ParserOptions with values from the environment
        """
        env = os.environ if environ is None else environ
        options = cls()

        if entries := env.get("KALEIDOSCOPE_PRECEDENCE"):
            try:
                for op, precedence in parse_precedence_entries(entries):
                    options.precedence[op] = precedence
            except ValueError as e:
                logger.warning(f"Ignoring KALEIDOSCOPE_PRECEDENCE: {e}")

        if strict := env.get("KALEIDOSCOPE_STRICT_NUMBERS"):
            options.strict_numbers = strict.strip().lower() in _TRUE_VALUES

        if anon_name := env.get("KALEIDOSCOPE_ANON_NAME"):
            options.anon_function_name = anon_name

        if max_errors := env.get("KALEIDOSCOPE_MAX_ERRORS"):
            try:
                options.max_errors = int(max_errors)
            except ValueError:
                logger.warning(f"Ignoring invalid KALEIDOSCOPE_MAX_ERRORS={max_errors!r}")

        return options
