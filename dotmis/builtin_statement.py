from dataclasses import dataclass
from typing import Any


@dataclass
class BuiltinStatement:
    name: str
    keyword: str
    fn: Any
    def __repr__(self) -> str:
        return f"<statement {self.name} {self.keyword!r}>"
