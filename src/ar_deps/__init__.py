"""Link-dependency analysis for static library archives."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ar-deps")
except PackageNotFoundError:  # pragma: no cover - package metadata absent in dev mode
    __version__ = "0.0.0"

__all__ = ["__version__"]
