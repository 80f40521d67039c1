"""Output sinks for generated source."""

from typing import Protocol


class Printer(Protocol):
    """Prints one line built from its arguments."""

    def __call__(self, *args: object) -> None: ...


class LineBuffer:
    """Printer collecting lines in memory."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def __call__(self, *args: object) -> None:
        self._lines.append("".join(str(arg) for arg in args))

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def getvalue(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"
