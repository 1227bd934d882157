import logging
import math
import threading
from dataclasses import dataclass

from mathrepl.value import Error, Real, Value

logger = logging.getLogger(__name__)

SYMBOL_CAPACITY = 64


@dataclass
class SymbolTableFull(Exception):
    name: str
    capacity: int

    def __str__(self) -> str:
        return f"Symbol table is full ({self.capacity} names), cannot add {self.name!r}"


class SymbolTable:
    """Fixed-capacity name -> value mapping; entries are overwritten but never removed"""

    def __init__(self, capacity: int = SYMBOL_CAPACITY) -> None:
        self.capacity = capacity
        self._entries: list[tuple[str, Value]] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return self._find(name) is not None

    def names(self) -> list[str]:
        with self._lock:
            return [name for name, _ in self._entries]

    def _find(self, name: str) -> int | None:
        for i, (entry_name, _) in enumerate(self._entries):
            if entry_name == name:
                return i
        return None

    def lookup(self, name: str) -> Value:
        """Returns the stored value, or an "identifier not found" Error whose offset the caller fills in"""
        with self._lock:
            idx = self._find(name)
            if idx is None:
                return Error("identifier not found")
            return self._entries[idx][1]

    def set(self, name: str, value: Value) -> None:
        with self._lock:
            idx = self._find(name)
            if idx is not None:
                self._entries[idx] = (name, value)
            elif len(self._entries) >= self.capacity:
                raise SymbolTableFull(name=name, capacity=self.capacity)
            else:
                self._entries.append((name, value))
        logger.debug(f"Symbol {name!r} set to {value}")


def default_symbols() -> SymbolTable:
    symbols = SymbolTable()
    symbols.set("e", Real(math.e))
    symbols.set("pi", Real(math.pi))
    return symbols
