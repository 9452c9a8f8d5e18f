"""Line-entry parsing for DotMis.

Both the REPL and the program loader deal with the same shape of text: a
decimal line number, optionally followed by whitespace and the statement
text for that line. This module recognizes that shape with a small Lark
grammar and turns each match into a `LineEntry`.

Public helpers sit on top of the grammar:

* `parse_line_entry` classifies a single line. It returns None when the
  line does not start with a line number, so the caller can treat it as a
  command or an immediate statement instead.
* `parse_program_text` / `format_program` convert between a program and
  its persisted form, one `"<number> <text>"` line per program line.
  Only `\n` separates stored lines; any other control character is part
  of the statement text.
* `load_program_text` replaces the contents of a program with a parsed
  persisted text. The file loader and `Interpreter.load_source` share it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput

from .program import ProgramLine, ProgramStore
from .variables import VariableStore


LINE_GRAMMAR = r"""
    start: _WS? LINENO (_WS TEXT?)?

    LINENO: /[0-9]+/
    TEXT: /\S.*/
    _WS: /[^\S\n]+/
"""


LINE_PARSER = Lark(
    LINE_GRAMMAR,
    parser='lalr',
    lexer='contextual',
    maybe_placeholders=False,
)


@dataclass
class LineEntry:
    """A numbered line as typed or stored.

    `text` is None when the number stands alone, which the REPL reads as
    a request to delete that line.
    """
    number: int
    text: Optional[str] = None


class LineEntryTransformer(Transformer):
    def start(self, items):
        number = int(items[0])
        text = str(items[1]) if len(items) > 1 else None
        return LineEntry(number, text)


def parse_line_entry(line: str) -> Optional[LineEntry]:
    line = line.rstrip('\r\n')
    try:
        tree = LINE_PARSER.parse(line)
    except UnexpectedInput:
        return None
    return LineEntryTransformer().transform(tree)


def parse_program_text(source: str) -> List[LineEntry]:
    """Parse the persisted form of a program.

    Lines without a leading number, without statement text, or numbered 0
    are skipped.
    """
    entries: List[LineEntry] = []
    for raw in source.split('\n'):
        entry = parse_line_entry(raw)
        if entry is None or entry.text is None or entry.number <= 0:
            continue
        entries.append(entry)
    return entries


def format_program(lines: Iterable[ProgramLine]) -> str:
    return ''.join(f"{line.number} {line.text}\n" for line in lines)


def load_program_text(source: str, program: ProgramStore, variables: VariableStore):
    """Replace `program` with the lines of `source` and drop string variables."""
    program.clear()
    variables.clear_strings()
    for entry in parse_program_text(source):
        program.upsert(entry.number, entry.text)
