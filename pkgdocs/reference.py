"""Reference stage: one page per topic plus ``reference/index.html``.

Topic pages show the description, usage, arguments, return value, details and
highlighted examples of an Rd topic. Cross-references written as
``\\link{name}`` resolve through the package alias index to the page of the
topic that documents ``name``.
"""

from __future__ import annotations

import logging
import typing as typ

from markupsafe import Markup

from .indexer import IndexEntry, IndexResult, build_index
from .rd import rd_to_html
from .render import PageRenderer
from .stage import StageResult, check_completeness, finish_stage, rule

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .context import PackageContext, Topic

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_TITLE = "All functions"


def data_reference_topic(
    topic: Topic, pkg: PackageContext, renderer: PageRenderer
) -> dict[str, typ.Any]:
    """Return the template data for one topic page."""
    doc = topic.doc

    def rd(text: str) -> Markup:
        return Markup(rd_to_html(text, pkg.topic_href))

    return {
        "pagetitle": topic.title,
        "topic": topic,
        "description": rd(doc.description),
        "details": rd(doc.details),
        "value": rd(doc.value),
        "arguments": [(name, rd(text)) for name, text in doc.arguments],
        "usage": renderer.highlight(doc.usage.strip()) if doc.usage.strip() else None,
        "examples": (
            renderer.highlight(doc.examples.strip()) if doc.examples.strip() else None
        ),
    }


def data_reference_index(
    pkg: PackageContext, renderer: PageRenderer
) -> tuple[dict[str, typ.Any], IndexResult]:
    """Resolve the reference sections and return template data with warnings."""
    entries = [
        IndexEntry(topic.as_candidate(), topic.file_out, topic.title) for topic in pkg.topics
    ]
    index = build_index(
        pkg.config.reference,
        entries,
        kind="topics",
        default_title=DEFAULT_REFERENCE_TITLE,
    )
    sections = [
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
    return {"pagetitle": "Function reference", "sections": sections}, index


def build_reference_index(
    pkg: PackageContext, renderer: PageRenderer, *, strict: bool | None = None
) -> tuple[Path, IndexResult]:
    """Render ``reference/index.html``."""
    data, index = data_reference_index(pkg, renderer)
    check_completeness(pkg, index, kind="topics", strict=strict)
    path = renderer.render_page("reference-index.jinja", data, "reference/index.html", depth=1)
    return path, index


def build_reference(
    pkg: PackageContext,
    *,
    renderer: PageRenderer | None = None,
    strict: bool | None = None,
) -> StageResult:
    """Render every topic page and the reference index.

    The stage is skipped when the package documents no topics.
    """
    result = StageResult("reference")
    if not pkg.topics:
        logger.info("No topics found; skipping reference")
        result.skipped = True
        return result

    renderer = renderer or PageRenderer(pkg)
    rule("Building function reference")
    (pkg.dst_path / "reference").mkdir(parents=True, exist_ok=True)
    for topic in pkg.topics:
        logger.info("Building topic '%s'", topic.file_out)
        data = data_reference_topic(topic, pkg, renderer)
        result.written.append(
            renderer.render_page("topic.jinja", data, f"reference/{topic.file_out}", depth=1)
        )

    path, index = build_reference_index(pkg, renderer, strict=strict)
    result.written.append(path)
    result.warnings.extend(index.warnings)
    return finish_stage(result)


__all__ = [
    "DEFAULT_REFERENCE_TITLE",
    "build_reference",
    "build_reference_index",
    "data_reference_index",
    "data_reference_topic",
]
