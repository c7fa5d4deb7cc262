"""Adapters for the binutils commands that inspect static archives."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterator, Sequence

from ar_deps.config import ToolPaths
from ar_deps.errors import DemangleError, ToolError

LOGGER = logging.getLogger(__name__)


def run_tool(cmd: Sequence[str], *, error_cls: type[ToolError] = ToolError) -> str:
    """
    Execute an external command and return its standard output.

    A missing executable or a non-zero exit status is fatal; there is no partial result worth
    keeping.
    """

    LOGGER.debug("Running %s", " ".join(cmd))
    try:
        completed = subprocess.run(list(cmd), check=False, text=True, capture_output=True)
    except OSError as exc:
        raise error_cls(cmd, None, str(exc)) from exc
    if completed.returncode != 0:
        raise error_cls(cmd, completed.returncode, completed.stderr)
    return completed.stdout


class NmSymbolLister:
    """List archive symbols with ``nm -og`` and members with ``ar t``."""

    def __init__(self, tools: ToolPaths | None = None) -> None:
        self.tools = tools or ToolPaths()

    def list_symbols(self, archive: Path) -> Iterator[str]:
        output = run_tool([self.tools.nm, "-og", str(archive)])
        yield from output.splitlines()

    def list_members(self, archive: Path) -> list[str]:
        output = run_tool([self.tools.ar, "t", str(archive)])
        return [line.strip() for line in output.splitlines() if line.strip()]


class CxxFiltDemangler:
    """Render mangled symbol names with ``c++filt``; results are cached per name."""

    def __init__(self, executable: str = "c++filt") -> None:
        self.executable = executable
        self._cache: dict[str, str] = {}

    def __call__(self, symbol: str) -> str:
        cached = self._cache.get(symbol)
        if cached is not None:
            return cached
        output = run_tool([self.executable, symbol], error_cls=DemangleError)
        pretty = output.strip() or symbol
        self._cache[symbol] = pretty
        return pretty


def identity_demangler(symbol: str) -> str:
    return symbol


__all__ = ["CxxFiltDemangler", "NmSymbolLister", "identity_demangler", "run_tool"]
