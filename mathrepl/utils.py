import enum


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def caret_line(offset: int) -> str:
    return " " * offset + "^"
