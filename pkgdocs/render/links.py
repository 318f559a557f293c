"""Markdown extension that fixes up links inside rendered articles.

Two rewrites happen on the parsed markdown tree:

* relative links to sibling sources (``other.Rmd``, ``../guide.md#setup``)
  are pointed at the generated ``.html`` pages;
* inline code naming a documented function (``` `plot_bar()` ```) is wrapped
  in a link to its reference page when a topic resolver is supplied.
"""

from __future__ import annotations

import posixpath
import re
import typing as typ
from urllib.parse import urlsplit, urlunsplit
from xml.etree.ElementTree import Element

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any

SOURCE_SUFFIXES = (".Rmd", ".rmd", ".md")
CALL_PATTERN = re.compile(r"^([A-Za-z.][A-Za-z0-9._]*)\(\)$")

TopicHref = typ.Callable[[str], str | None]


class ArticleLinkExtension(Extension):
    """Register :class:`ArticleLinkTreeprocessor` on a Markdown instance."""

    def __init__(self, topic_href: TopicHref | None = None) -> None:
        super().__init__()
        self.topic_href = topic_href

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor on the Markdown instance."""
        processor = ArticleLinkTreeprocessor(md, self.topic_href)
        md.treeprocessors.register(processor, "pkgdocs_article_links", 15)


class ArticleLinkTreeprocessor(Treeprocessor):
    """Rewrite source links and autolink function references."""

    def __init__(self, md: Markdown, topic_href: TopicHref | None) -> None:
        super().__init__(md)
        self.topic_href = topic_href

    def run(self, root: Element) -> Element:
        """Rewrite anchors and wrap linkable inline code in the parsed tree."""
        for element in list(root.iter()):
            if element.tag == "a":
                rewritten = rewrite_source_link(element.get("href"))
                if rewritten:
                    element.set("href", rewritten)
        if self.topic_href is not None:
            self._autolink(root)
        return root

    def _autolink(self, root: Element) -> None:
        for parent in list(root.iter()):
            if parent.tag in {"a", "pre"}:
                continue
            for position, child in enumerate(list(parent)):
                if child.tag != "code" or len(child):
                    continue
                href = self._code_href(child.text or "")
                if not href:
                    continue
                anchor = Element("a", {"href": href})
                anchor.tail = child.tail
                child.tail = None
                parent.remove(child)
                anchor.append(child)
                parent.insert(position, anchor)

    def _code_href(self, text: str) -> str | None:
        match = CALL_PATTERN.match(text.strip())
        if not match or self.topic_href is None:
            return None
        return self.topic_href(match.group(1))


def rewrite_source_link(target: str | None) -> str | None:
    """Return ``target`` with a markdown source suffix replaced by ``.html``.

    Absolute URLs, fragments and non-source links return ``None``.

    Examples
    --------
    >>> rewrite_source_link("tuning.Rmd#grid")
    'tuning.html#grid'
    >>> rewrite_source_link("https://example.com/a.md") is None
    True
    """
    if not target or target.startswith(("#", "//")) or "://" in target:
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc:
        return None
    stem, suffix = posixpath.splitext(parsed.path)
    if suffix not in SOURCE_SUFFIXES:
        return None
    return urlunsplit(("", "", f"{stem}.html", parsed.query, parsed.fragment))


__all__ = [
    "ArticleLinkExtension",
    "ArticleLinkTreeprocessor",
    "rewrite_source_link",
]
