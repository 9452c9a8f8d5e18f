"""Cursor and arithmetic expression evaluator for DotMis.

Statements are scanned character by character through a `Cursor`, which
holds the statement text and the read position. Both the statement
executor and the expression evaluator consume from the same cursor, so
after an expression has been read the statement continues exactly where
the expression stopped.

The evaluator is a recursive-descent parser over the grammar

    Expression := Term (('+'|'-') Term)*
    Term       := Factor (('*'|'/') Factor)*
    Factor     := '(' Expression ')' | Identifier | NumericLiteral

Evaluation happens while parsing. Errors inside an expression never abort
it: each one is passed to the `report` callback and a fallback value is
used in its place, so the enclosing statement still completes.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Optional

from .types import Diagnostic, is_letter
from .variables import VariableStore

Reporter = Callable[[Diagnostic], None]

NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
INT_RE = re.compile(r'[+-]?\d+')


class Cursor:
    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if 0 <= idx < len(self.text):
            return self.text[idx]
        return ''

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def advance(self, n: int = 1):
        self.pos = min(self.pos + n, len(self.text))

    def rest(self) -> str:
        return self.text[self.pos:]

    def skip_whitespace(self):
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def match(self, ch: str) -> bool:
        if self.peek() == ch:
            self.advance()
            return True
        return False

    def match_keyword(self, keyword: str) -> bool:
        """Consume `keyword` if the text continues with it, ignoring case."""
        end = self.pos + len(keyword)
        if self.text[self.pos:end].lower() == keyword.lower():
            self.pos = end
            return True
        return False

    def read_letter(self) -> Optional[str]:
        ch = self.peek()
        if is_letter(ch):
            self.advance()
            return ch.upper()
        return None

    def read_word(self) -> str:
        start = self.pos
        while is_letter(self.peek()):
            self.advance()
        return self.text[start:self.pos]

    def read_quoted(self) -> Optional[str]:
        """Read a double-quoted literal verbatim.

        The closing quote is optional; an unterminated literal runs to the
        end of the text.
        """
        if not self.match('"'):
            return None
        end = self.text.find('"', self.pos)
        if end < 0:
            value = self.text[self.pos:]
            self.pos = len(self.text)
            return value
        value = self.text[self.pos:end]
        self.pos = end + 1
        return value

    def read_int(self) -> Optional[int]:
        """Read a leading integer the way atoi does, skipping whitespace first.

        Returns None without moving when no digits follow.
        """
        self.skip_whitespace()
        m = INT_RE.match(self.text, self.pos)
        if m is None:
            return None
        self.pos = m.end()
        return int(m.group())

    def scan_number(self) -> Optional[float]:
        """Scan a numeric literal at the cursor.

        On failure returns None and still moves the cursor forward by one
        character (unless already at the end), so callers looping over
        operands always make progress.
        """
        m = NUMBER_RE.match(self.text, self.pos)
        if m is None:
            self.advance()
            return None
        self.pos = m.end()
        return float(m.group())


class ExpressionParser:
    def __init__(self, cursor: Cursor, variables: VariableStore, report: Reporter):
        self.cursor = cursor
        self.variables = variables
        self.report = report

    def error(self, kind: str, message: str):
        self.report(Diagnostic(kind, message))

    def parse_expression(self) -> float:
        result = self.parse_term()
        self.cursor.skip_whitespace()
        while self.cursor.peek() in ('+', '-'):
            op = self.cursor.peek()
            self.cursor.advance()
            right = self.parse_term()
            if op == '+':
                result += right
            else:
                result -= right
            self.cursor.skip_whitespace()
        return result

    def parse_term(self) -> float:
        result = self.parse_factor()
        self.cursor.skip_whitespace()
        while self.cursor.peek() in ('*', '/'):
            op = self.cursor.peek()
            self.cursor.advance()
            right = self.parse_factor()
            if op == '*':
                result *= right
            elif right == 0:
                self.error('SemanticError', 'Division by zero')
                result = 0.0
            else:
                result /= right
            self.cursor.skip_whitespace()
        return result

    def parse_factor(self) -> float:
        cursor = self.cursor
        cursor.skip_whitespace()
        if cursor.match('('):
            result = self.parse_expression()
            cursor.skip_whitespace()
            if not cursor.match(')'):
                self.error('SyntaxError', 'Missing )')
        elif is_letter(cursor.peek()):
            result = self.parse_identifier()
        else:
            result = self.parse_number()
        cursor.skip_whitespace()
        return result

    def parse_identifier(self) -> float:
        cursor = self.cursor
        name = cursor.read_word()
        cursor.skip_whitespace()
        if cursor.peek() == '(':
            self.error('SyntaxError', 'Unknown function')
            self.skip_call_arguments()
            return 0.0
        if len(name) != 1:
            self.error('SyntaxError', 'Unknown identifier')
            return 0.0
        return self.variables.get_number(name)

    def skip_call_arguments(self):
        # cursor sits on '('; stop after the matching ')' or at end of text
        depth = 0
        while not self.cursor.at_end():
            ch = self.cursor.peek()
            self.cursor.advance()
            if ch == '(':
                depth += 1
            elif ch == ')':
                depth -= 1
                if depth == 0:
                    return

    def parse_number(self) -> float:
        value = self.cursor.scan_number()
        if value is None:
            self.error('SyntaxError', 'Invalid number')
            return 0.0
        if math.isinf(value):
            self.error('SyntaxError', 'Invalid number')
        return value


def evaluate(text: str, variables: VariableStore, report: Reporter) -> float:
    """Evaluate `text` as a single expression and return its value."""
    return ExpressionParser(Cursor(text), variables, report).parse_expression()
