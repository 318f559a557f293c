"""Remove generated files recorded in the site manifest.

Only paths listed in the previous manifest are deleted, and only when they
still exist inside the destination. Anything else in the output directory,
including files that merely look generated, is left alone.
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from .errors import ManifestWarning
from .manifest import read_manifest

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


def remove_listed(root: Path, entries: cabc.Iterable[str]) -> list[Path]:
    """Delete each listed file that still exists inside ``root``.

    Entries resolving outside ``root`` (through ``..`` or symlinks) and
    entries that are not regular files are skipped.
    """
    removed: list[Path] = []
    for entry in entries:
        target = (root / entry).resolve()
        if not target.is_relative_to(root) or not target.is_file():
            continue
        target.unlink()
        removed.append(target)
        logger.info("Removing '%s'", entry)
    return removed


def clean_site(dst_path: Path | str) -> list[Path]:
    """Delete the files a previous build recorded as generated.

    Parameters
    ----------
    dst_path : Path or str
        Site output directory holding ``pkgdocs.yml``.

    Returns
    -------
    list[Path]
        Files that were removed, in manifest order. Empty when no manifest
        was found; that case is logged as a :class:`ManifestWarning`.
    """
    root = Path(dst_path).resolve()
    manifest = read_manifest(root)
    if manifest is None:
        warning = ManifestWarning(
            f"No site manifest in '{root}'; nothing known to be generated."
        )
        logger.warning("%s", warning)
        return []

    return remove_listed(root, manifest.files)


__all__ = ["clean_site", "remove_listed"]
