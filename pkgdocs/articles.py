"""Articles stage: render vignettes and ``articles/index.html``.

Every vignette below ``vignettes/`` is rendered to ``articles/`` at the same
relative location, one at a time and in discovery order. Supporting files
(images, data) are copied alongside. The index groups vignettes per the
``articles`` configuration, or lists them all in one "All vignettes" section,
and warns about vignettes that no section lists.
"""

from __future__ import annotations

import logging
import shutil
import typing as typ

from ._constants import VIGNETTE_SUFFIXES, VIGNETTES_DIR
from .config import SectionSpec
from .indexer import IndexEntry, IndexResult, build_index, default_section
from .render import PageRenderer
from .stage import StageResult, check_completeness, finish_stage, rule

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .context import PackageContext

logger = logging.getLogger(__name__)

DEFAULT_ARTICLES_TITLE = "All vignettes"
EXCLUDED_DIRS = ("rsconnect",)


def _article_entries(pkg: PackageContext) -> list[IndexEntry]:
    return [
        IndexEntry(vignette.as_candidate(), vignette.file_out, vignette.title)
        for vignette in pkg.vignettes
    ]


def default_articles_index(pkg: PackageContext) -> tuple[SectionSpec, ...]:
    """Return the single section used when ``articles`` is not configured."""
    return (default_section(DEFAULT_ARTICLES_TITLE, _article_entries(pkg)),)


def data_articles_index(
    pkg: PackageContext, renderer: PageRenderer
) -> tuple[dict[str, typ.Any], IndexResult]:
    """Resolve the article sections and return template data with warnings."""
    sections = pkg.config.articles
    if sections is None:
        sections = default_articles_index(pkg)
    index = build_index(
        sections,
        _article_entries(pkg),
        kind="vignettes",
        default_title=DEFAULT_ARTICLES_TITLE,
    )
    rendered = [
        {
            "section": section,
            "description": (
                renderer.render_markdown(section.description, depth=1)
                if section.description
                else None
            ),
        }
        for section in index.sections
    ]
    return {"pagetitle": "Articles", "sections": rendered}, index


def build_articles_index(
    pkg: PackageContext, renderer: PageRenderer, *, strict: bool | None = None
) -> tuple[Path, IndexResult]:
    """Render ``articles/index.html``."""
    data, index = data_articles_index(pkg, renderer)
    check_completeness(pkg, index, kind="vignettes", strict=strict)
    path = renderer.render_page("article-index.jinja", data, "articles/index.html", depth=1)
    return path, index


def _is_hidden(relative: Path) -> bool:
    """Return whether a vignettes-relative path is excluded from the site."""
    if relative.name.startswith("."):
        return True
    return any(
        part.startswith(("_", ".")) or part in EXCLUDED_DIRS
        for part in relative.parts[:-1]
    )


def copy_vignette_resources(pkg: PackageContext) -> list[Path]:
    """Copy non-source files from ``vignettes/`` into ``articles/``.

    Hidden files and anything below ``_*``, ``.*`` or ``rsconnect``
    directories are left out, as they are for vignette discovery.
    """
    src_root = pkg.src_path / VIGNETTES_DIR
    dst_root = pkg.dst_path / "articles"
    copied: list[Path] = []
    for path in sorted(src_root.rglob("*")):
        relative = path.relative_to(src_root)
        if not path.is_file() or path.suffix in VIGNETTE_SUFFIXES:
            continue
        if _is_hidden(relative):
            continue
        target = dst_root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, target)
        copied.append(target)
    return copied


def build_articles(
    pkg: PackageContext,
    *,
    renderer: PageRenderer | None = None,
    strict: bool | None = None,
) -> StageResult:
    """Render every vignette and the articles index.

    The stage is skipped when the package has no vignettes. A vignette that
    fails to render aborts the stage with a ``RenderError`` naming its file.
    """
    result = StageResult("articles")
    if not pkg.vignettes:
        logger.info("No vignettes found; skipping articles")
        result.skipped = True
        return result

    renderer = renderer or PageRenderer(pkg)
    rule("Building articles")
    (pkg.dst_path / "articles").mkdir(parents=True, exist_ok=True)
    result.written.extend(copy_vignette_resources(pkg))

    for vignette in pkg.vignettes:
        logger.info("Building article '%s'", vignette.file_out)
        result.written.append(renderer.render_article(vignette))

    path, index = build_articles_index(pkg, renderer, strict=strict)
    result.written.append(path)
    result.warnings.extend(index.warnings)
    return finish_stage(result)


__all__ = [
    "DEFAULT_ARTICLES_TITLE",
    "build_articles",
    "build_articles_index",
    "copy_vignette_resources",
    "data_articles_index",
    "default_articles_index",
]
