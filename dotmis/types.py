"""Value helpers shared by the DotMis interpreter.

This module holds the small pieces of the runtime that every other part
of the interpreter needs: the diagnostic record used for reported errors,
normalization of single-letter variable names, and the rendering of
numbers for the output statement.
"""

from __future__ import annotations

from dataclasses import dataclass
import string

LETTERS = string.ascii_uppercase


@dataclass
class Diagnostic:
    """Represents a reported DotMis error.

    `kind` is one of 'SyntaxError', 'SemanticError', 'ResourceError',
    'JumpError' or 'IOError'. The message is what the user sees after the
    line-number prefix.
    """
    kind: str
    message: str

    def __repr__(self) -> str:
        return f"Diagnostic(kind={self.kind!r}, message={self.message!r})"


def normalize_letter(name: str) -> str:
    """Return the uppercase form of a variable letter.

    Raises ValueError if `name` is not exactly one ASCII letter.
    """
    if len(name) != 1 or name.upper() not in LETTERS:
        raise ValueError(f"invalid variable name {name!r}")
    return name.upper()


def is_letter(ch: str) -> bool:
    return len(ch) == 1 and ch.upper() in LETTERS


def format_number(value: float) -> str:
    """Render a numeric value with zero fractional digits.

    Halves round to even, the same as printf's `%.0f`.
    """
    return format(value, '.0f')
