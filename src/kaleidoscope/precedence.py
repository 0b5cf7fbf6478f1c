"""
Binary Operator Precedence Table
================================

The parser knows nothing about what binary operators mean. It only asks
this table how tightly a single-character operator binds. Higher numbers
bind tighter. A character that is absent from the table, or present with
a non-positive precedence, is not a binary operator: the expression
parser stops when it meets one.

The table is seeded before parsing and can be extended at any time by
the embedding application, which is how user-defined operators are
introduced.

Default Table
-------------
| Operator | Precedence |
|----------|------------|
| <        | 10         |
| +        | 20         |
| -        | 30         |
| *        | 40         |

Example Usage
-------------
>>> from kaleidoscope.precedence import PrecedenceTable
>>> table = PrecedenceTable.default()
>>> table["/"] = 40
>>> table.get_precedence("/")
40
>>> table.get_precedence("%")
-1
"""

from typing import Iterator, Mapping, Optional
import logging

from kaleidoscope.lexer import Token, TokenType


logger = logging.getLogger(__name__)


# Returned for anything that is not a binary operator
NOT_AN_OPERATOR = -1

DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 30,
    "*": 40,
}


class PrecedenceTable:
    """
    Mutable mapping from operator character to precedence.

    Supports the usual mapping protocol (table[op], table[op] = n,
    del table[op], op in table, len, iteration) plus lookups that never
    fail and return NOT_AN_OPERATOR for unknown characters.

    Keys must be exactly one character. Values must be integers.
    """

    def __init__(self, entries: Optional[Mapping[str, int]] = None):
        """
        Create a table.

        Args:
            entries: Initial operator -> precedence entries (empty if None)
        """
        self._table: dict[str, int] = {}
        if entries:
            self.update(entries)

    @classmethod
    def default(cls) -> "PrecedenceTable":
        """Create a table seeded with DEFAULT_PRECEDENCE."""
        return cls(DEFAULT_PRECEDENCE)

    @classmethod
    def from_text(cls, text: str, base: Optional[Mapping[str, int]] = None) -> "PrecedenceTable":
        """
        Build a table from a text description like "<=10,+=20,*=40".

        Entries are separated by commas. Each entry is an operator
        character, '=' and an integer. The operator itself may be '='
        ("==5" defines '=' with precedence 5).

        Args:
            text: The description to parse
            base: Entries to start from before applying text

        Raises:
            ValueError: If an entry is malformed
        """
        table = cls(base)
        for op, precedence in parse_precedence_entries(text):
            table[op] = precedence
        return table

    # =========================================================================
    # Mapping Protocol
    # =========================================================================

    def __getitem__(self, op: str) -> int:
        return self._table[op]

    def __setitem__(self, op: str, precedence: int) -> None:
        self.define(op, precedence)

    def __delitem__(self, op: str) -> None:
        del self._table[op]

    def __contains__(self, op: object) -> bool:
        return op in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"PrecedenceTable({self._table!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PrecedenceTable):
            return self._table == other._table
        if isinstance(other, Mapping):
            return self._table == dict(other)
        return NotImplemented

    # =========================================================================
    # Table Management
    # =========================================================================

    def define(self, op: str, precedence: int) -> None:
        """
        Install or replace an operator.

        Args:
            op: A single character
            precedence: Binding strength; values <= 0 disable the operator

        Raises:
            ValueError: If op is not a single character
            TypeError: If precedence is not an integer
        """
        if not isinstance(op, str) or len(op) != 1:
            raise ValueError(f"operator must be a single character, got {op!r}")
        if isinstance(precedence, bool) or not isinstance(precedence, int):
            raise TypeError(f"precedence must be an integer, got {precedence!r}")

        logger.debug(f"Operator '{op}' precedence set to {precedence}")
        self._table[op] = precedence

    def update(self, entries: Mapping[str, int]) -> None:
        """Install several operators at once."""
        for op, precedence in entries.items():
            self.define(op, precedence)

    def remove(self, op: str) -> None:
        """Remove an operator if present."""
        self._table.pop(op, None)

    def copy(self) -> "PrecedenceTable":
        return PrecedenceTable(self._table)

    def as_dict(self) -> dict[str, int]:
        return dict(self._table)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_precedence(self, op: str) -> int:
        """
        Return the precedence of an operator character.

        Returns:
            The positive precedence, or NOT_AN_OPERATOR if op is absent
            or has a non-positive precedence
        """
        precedence = self._table.get(op, NOT_AN_OPERATOR)
        if precedence <= 0:
            return NOT_AN_OPERATOR
        return precedence

    def is_operator(self, op: str) -> bool:
        """Return True if op is currently a binary operator."""
        return self.get_precedence(op) > 0

    def token_precedence(self, token: Token) -> int:
        """
        Return the precedence of a token.

        Only CHAR tokens can be binary operators; every other token
        (identifiers, numbers, keywords, EOF) returns NOT_AN_OPERATOR.
        """
        if token.type != TokenType.CHAR:
            return NOT_AN_OPERATOR
        return self.get_precedence(token.value)


# =============================================================================
# Text Format
# =============================================================================

def parse_precedence_entry(entry: str) -> tuple[str, int]:
    """
    Parse one "OP=N" entry.

    Raises:
        ValueError: If the entry is not a single character, '=' and an integer
    """
    entry = entry.strip()
    if len(entry) < 3 or entry[1] != "=":
        raise ValueError(f"invalid precedence entry {entry!r}, expected OP=N")

    op, value = entry[0], entry[2:].strip()
    try:
        precedence = int(value)
    except ValueError:
        raise ValueError(f"invalid precedence value {value!r} for operator '{op}'") from None
    return op, precedence


def parse_precedence_entries(text: str) -> list[tuple[str, int]]:
    """
    Parse a comma-separated list of "OP=N" entries.

    A ',' operator can't be written in this format since it separates
    entries.
    """
    return [
        parse_precedence_entry(entry)
        for entry in text.split(",")
        if entry.strip()
    ]
