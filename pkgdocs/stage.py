"""Shared bookkeeping for build stages.

Each stage (``init``, ``home``, ``reference``, ``articles``, ``news``) returns
a :class:`StageResult` listing the files it wrote and the warnings it
collected. Warnings are summarised in the log when the stage ends.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from .errors import IndexCompletenessError

if typ.TYPE_CHECKING:
    from .context import PackageContext
    from .indexer import IndexResult

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class StageResult:
    """Files written and warnings collected by one build stage."""

    name: str
    written: list[Path] = dc.field(default_factory=list)
    warnings: list[Warning] = dc.field(default_factory=list)
    skipped: bool = False

    def relative_paths(self, root: Path) -> list[str]:
        """Return written paths relative to ``root`` in POSIX form."""
        return [path.relative_to(root).as_posix() for path in self.written]


def rule(title: str) -> None:
    """Log a stage banner."""
    logger.info("-- %s %s", title, "-" * max(0, 60 - len(title)))


def finish_stage(result: StageResult) -> StageResult:
    """Log the warning summary for ``result`` and return it."""
    if result.warnings:
        logger.warning(
            "%s stage finished with %d warning(s):", result.name, len(result.warnings)
        )
        for warning in result.warnings:
            logger.warning("  %s", warning)
    return result


def check_completeness(
    pkg: PackageContext, index: IndexResult, *, kind: str, strict: bool | None
) -> None:
    """Raise ``IndexCompletenessError`` for missing items in strict mode.

    ``strict`` overrides the ``strict`` configuration setting when not ``None``.
    """
    enabled = pkg.config.strict if strict is None else strict
    if enabled and index.missing:
        raise IndexCompletenessError(kind, index.missing)


__all__ = ["StageResult", "check_completeness", "finish_stage", "rule"]
