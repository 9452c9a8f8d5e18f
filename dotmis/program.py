"""Program storage for DotMis.

A program is an ordered collection of numbered statement lines. Lines are
kept sorted by number; inserting an existing number replaces its text and
deleting a missing number does nothing. Lookups represent absence with
None instead of raising.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass
class ProgramLine:
    number: int
    text: str

    def __str__(self) -> str:
        return f"{self.number} {self.text}"


class ProgramStore:
    def __init__(self):
        self.lines: List[ProgramLine] = []
        # parallel to self.lines, kept for bisect
        self.numbers: List[int] = []

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[ProgramLine]:
        return iter(list(self.lines))

    def upsert(self, number: int, text: str):
        if number <= 0:
            raise ValueError(f"line number must be positive, got {number}")
        idx = bisect_left(self.numbers, number)
        if idx < len(self.numbers) and self.numbers[idx] == number:
            self.lines[idx].text = text
            return
        self.numbers.insert(idx, number)
        self.lines.insert(idx, ProgramLine(number, text))

    def delete(self, number: int):
        idx = bisect_left(self.numbers, number)
        if idx < len(self.numbers) and self.numbers[idx] == number:
            del self.numbers[idx]
            del self.lines[idx]

    def find(self, number: int) -> Optional[ProgramLine]:
        idx = bisect_left(self.numbers, number)
        if idx < len(self.numbers) and self.numbers[idx] == number:
            return self.lines[idx]
        return None

    def successor(self, number: int) -> Optional[ProgramLine]:
        """Return the first stored line numbered strictly above `number`."""
        idx = bisect_right(self.numbers, number)
        if idx < len(self.lines):
            return self.lines[idx]
        return None

    def first(self) -> Optional[ProgramLine]:
        return self.lines[0] if self.lines else None

    def clear(self):
        self.lines = []
        self.numbers = []

    def listing(self) -> List[str]:
        return [str(line) for line in self.lines]
