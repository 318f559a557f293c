"""Group selected topics or vignettes into titled index sections.

:func:`build_index` resolves each configured :class:`SectionSpec` through the
content selector, drops unusable sections with a warning, and finally checks
that every candidate appears somewhere in the index. Problems are collected as
:class:`~pkgdocs.errors.SelectionWarning` instances on the returned
:class:`IndexResult`; nothing here raises for an incomplete index.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .config import SectionSpec
from .errors import SelectionWarning
from .selector import Candidate, ExactName, select

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class ResolvedItem:
    """One entry of a resolved section."""

    name: str
    path: str
    title: str


@dc.dataclass(frozen=True, slots=True)
class ResolvedSection:
    """A section ready for rendering, with contents in configured order."""

    title: str
    contents: tuple[ResolvedItem, ...]
    description: str | None = None
    css_class: str | None = None


@dc.dataclass(frozen=True, slots=True)
class IndexEntry:
    """A candidate together with the link and title used in the index."""

    candidate: Candidate
    path: str
    title: str


@dc.dataclass(slots=True)
class IndexResult:
    """Sections produced by :func:`build_index` plus collected warnings."""

    sections: list[ResolvedSection] = dc.field(default_factory=list)
    warnings: list[SelectionWarning] = dc.field(default_factory=list)
    missing: list[str] = dc.field(default_factory=list)


def default_section(
    title: str, entries: cabc.Sequence[IndexEntry], *, include_internal: bool = False
) -> SectionSpec:
    """Return a single section listing every entry by exact name."""
    names = [
        entry.candidate.name
        for entry in entries
        if include_internal or not entry.candidate.internal
    ]
    return SectionSpec(title=title, contents=tuple(ExactName(name) for name in names))


def build_index(
    sections: cabc.Sequence[SectionSpec] | None,
    entries: cabc.Sequence[IndexEntry],
    *,
    kind: str,
    default_title: str,
    include_internal: bool = False,
) -> IndexResult:
    """Resolve ``sections`` against ``entries`` into an index.

    Parameters
    ----------
    sections : Sequence[SectionSpec] or None
        Configured sections; ``None`` synthesises one default section holding
        every entry in discovery order.
    entries : Sequence[IndexEntry]
        Candidates with their link paths and display titles.
    kind : str
        Plural noun used in warnings (``"vignettes"``, ``"topics"``).
    default_title : str
        Title of the synthesised section.
    include_internal : bool, optional
        Let internal candidates be selected and count them as required.

    Returns
    -------
    IndexResult
        Resolved sections in configured order with any warnings.
    """
    if sections is None:
        sections = [default_section(default_title, entries, include_internal=include_internal)]

    candidates = [entry.candidate for entry in entries]
    result = IndexResult()
    for position, section_spec in enumerate(sections, start=1):
        if not section_spec.title:
            result.warnings.append(
                SelectionWarning(f"Section {position} has no title and was skipped.")
            )
            continue
        selection = select(
            section_spec.contents, candidates, include_internal=include_internal
        )
        for expression in selection.unmatched_expressions:
            result.warnings.append(
                SelectionWarning(
                    f"In section '{section_spec.title}': {expression} matched no {kind}.",
                    names=(str(expression),),
                )
            )
        if not selection.matched_indices:
            result.warnings.append(
                SelectionWarning(
                    f"Section '{section_spec.title}' has no contents and was skipped."
                )
            )
            continue
        contents = tuple(
            ResolvedItem(
                name=entries[index].candidate.name,
                path=entries[index].path,
                title=entries[index].title,
            )
            for index in selection.matched_indices
        )
        result.sections.append(
            ResolvedSection(
                title=section_spec.title,
                contents=contents,
                description=section_spec.description,
                css_class=section_spec.css_class,
            )
        )

    listed = {item.name for section in result.sections for item in section.contents}
    result.missing = [
        candidate.name
        for candidate in candidates
        if candidate.name not in listed and (include_internal or not candidate.internal)
    ]
    if result.missing:
        result.warnings.append(
            SelectionWarning(
                f"{kind.capitalize()} missing from index: {', '.join(result.missing)}",
                names=tuple(result.missing),
            )
        )
    return result


__all__ = [
    "IndexEntry",
    "IndexResult",
    "ResolvedItem",
    "ResolvedSection",
    "build_index",
    "default_section",
]
