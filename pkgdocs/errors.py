"""Exception and warning types shared by the pkgdocs build pipeline.

Fatal problems derive from :class:`PkgdocsError` and unwind to the caller of
the build. Warnings derive from :class:`UserWarning`; they are collected by
the stage that produced them and logged as a summary, never raised.
"""

from __future__ import annotations

from pathlib import Path


class PkgdocsError(Exception):
    """Base class for fatal pkgdocs build errors."""


class ConfigError(PkgdocsError, ValueError):
    """Raised when the descriptor or site configuration is missing or invalid."""


class IndexCompletenessError(ConfigError):
    """Raised in strict mode when items are missing from a section index."""

    def __init__(self, kind: str, names: list[str]) -> None:
        self.kind = kind
        self.names = list(names)
        super().__init__(f"{kind.capitalize()} missing from index: {', '.join(names)}")


class PathError(PkgdocsError, FileNotFoundError):
    """Raised when a required input path does not exist."""


class RenderError(PkgdocsError, RuntimeError):
    """Raised when converting or rendering a specific file fails."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to render '{self.path}': {reason}")


class SelectionWarning(UserWarning):
    """An expression matched nothing, or items are missing from an index."""

    def __init__(self, message: str, *, names: tuple[str, ...] = ()) -> None:
        self.names = names
        super().__init__(message)


class ManifestWarning(UserWarning):
    """No usable site manifest was found during cleanup."""


__all__ = [
    "ConfigError",
    "IndexCompletenessError",
    "ManifestWarning",
    "PathError",
    "PkgdocsError",
    "RenderError",
    "SelectionWarning",
]
