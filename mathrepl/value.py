import abc
from dataclasses import dataclass

from mathrepl.utils import caret_line


class Value(abc.ABC):
    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        ...


@dataclass
class Void(Value):
    @classmethod
    def type_name(cls) -> str:
        return "Void"


@dataclass
class Real(Value):
    v: float

    @classmethod
    def type_name(cls) -> str:
        return "Real"


@dataclass
class Error(Value):
    """Line-scoped failure; ``error_offset`` is the column the fault is attributed to"""

    errmsg: str
    error_offset: int = 0

    @classmethod
    def type_name(cls) -> str:
        return "Error"

    def render(self, line: str = "") -> str:
        lines = [line.rstrip("\n")] if line else []
        lines.append(caret_line(self.error_offset))
        lines.append(f"ERROR: {self.errmsg}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
