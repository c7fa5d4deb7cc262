"""Exceptions raised while analysing archive dependencies."""

from __future__ import annotations

from typing import Sequence


class ArDepsError(Exception):
    """Base class for fatal analysis errors."""


class SymbolParseError(ArDepsError):
    """A symbol listing line did not have the expected shape."""

    def __init__(self, line: str, lineno: int, source: str | None = None) -> None:
        self.line = line
        self.lineno = lineno
        self.source = source
        where = f"{source}, line {lineno}" if source else f"line {lineno}"
        super().__init__(f"Failed to parse symbol listing ({where}):\n{line}")


class DuplicateObjectError(ArDepsError):
    """The same object identifier was contributed by two archives."""

    def __init__(self, object_id: str, archives: Sequence[str]) -> None:
        self.object_id = object_id
        self.archives = tuple(archives)
        super().__init__(
            f"Object {object_id} appears in more than one input archive: {', '.join(self.archives)}"
        )


class DuplicateSymbolError(ArDepsError):
    """A symbol is defined in two different input archives."""

    def __init__(self, symbol: str, first: str, second: str) -> None:
        self.symbol = symbol
        self.first = first
        self.second = second
        super().__init__(f"Symbol {symbol} is defined by both {first} and {second}")


class InvalidClusterModeError(ArDepsError, ValueError):
    """Unknown clustering mode requested for the graph description."""

    def __init__(self, mode: str, choices: Sequence[str]) -> None:
        self.mode = mode
        super().__init__(f"Unsupported cluster mode: {mode!r} (expected one of {', '.join(choices)})")


class ToolError(ArDepsError):
    """An external binutils command failed or could not be started."""

    def __init__(self, command: Sequence[str], returncode: int | None, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"Failed to execute {' '.join(self.command)}"
        else:
            message = f"{' '.join(self.command)} exited with status {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class DemangleError(ToolError):
    """The demangler could not render a symbol name."""


__all__ = [
    "ArDepsError",
    "DemangleError",
    "DuplicateObjectError",
    "DuplicateSymbolError",
    "InvalidClusterModeError",
    "SymbolParseError",
    "ToolError",
]
