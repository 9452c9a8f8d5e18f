from typing import Dict, Optional
from dotmis.types import LETTERS, normalize_letter


class VariableStore:
    """The 26 numeric and 26 string cells addressed by a single letter."""
    def __init__(self):
        self.numeric: Dict[str, float] = {}
        self.strings: Dict[str, Optional[str]] = {}
        self.reset()

    def reset(self):
        self.numeric = {letter: 0.0 for letter in LETTERS}
        self.clear_strings()

    def clear_strings(self):
        self.strings = {letter: None for letter in LETTERS}

    def get_number(self, name: str) -> float:
        return self.numeric[normalize_letter(name)]

    def set_number(self, name: str, value: float):
        self.numeric[normalize_letter(name)] = float(value)

    def get_string(self, name: str) -> Optional[str]:
        return self.strings[normalize_letter(name)]

    def set_string(self, name: str, value: Optional[str]):
        # Replacing the cell drops the only reference to the previous value
        self.strings[normalize_letter(name)] = value
