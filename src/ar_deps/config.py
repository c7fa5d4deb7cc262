"""Configuration primitives for the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ar_deps.errors import InvalidClusterModeError

CLUSTER_MODES = ("scc", "archive", "none")
STDOUT = "-"


@dataclass(slots=True)
class ToolPaths:
    """Executables used to inspect archives."""

    nm: str = "nm"
    ar: str = "ar"
    cxxfilt: str = "c++filt"


@dataclass(slots=True)
class AnalysisConfig:
    """Settings for one analysis run over a set of archives."""

    archives: List[Path]
    dot_output: str | None = None
    scc_output: str | None = None
    plot_output: Path | None = None
    show_external: bool = False
    cluster: str = "scc"
    demangle: bool = True
    list_members: bool = True
    tools: ToolPaths = field(default_factory=ToolPaths)

    def __post_init__(self) -> None:
        if self.cluster not in CLUSTER_MODES:
            raise InvalidClusterModeError(self.cluster, CLUSTER_MODES)
        if self.dot_output is None and self.scc_output is None:
            self.scc_output = STDOUT

    @property
    def archive_names(self) -> list[str]:
        return [archive.name for archive in self.archives]

    @classmethod
    def from_archives(
        cls,
        archives: Iterable[str | Path],
        *,
        tools: ToolPaths | None = None,
        **options,
    ) -> "AnalysisConfig":
        """Factory helper that normalises archive paths."""

        resolved = [Path(archive).expanduser().resolve() for archive in archives]
        return cls(archives=resolved, tools=tools or ToolPaths(), **options)
