"""News stage: render ``NEWS.md`` into ``news/index.html``.

The changelog is split on level-one headings such as ``# mypkg 1.0.0``. Each
section becomes a :class:`NewsEntry` whose body is rendered through the
configured converter. When the package declares a GitHub URL, ``@user``
mentions and ``#123`` issue references are linked to GitHub.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ

from markupsafe import Markup

from .render import MarkdownConverter, PageRenderer
from .render.converters import FENCE_PATTERN, closes_fence
from .errors import RenderError
from .stage import StageResult, finish_stage, rule

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .context import PackageContext

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#[ \t]+(?P<heading>.+?)[ \t#]*$")
BULLET_PATTERN = re.compile(r"^[*+-][ \t]+(?P<text>.*)$")
INLINE_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
VERSION_PATTERN = re.compile(r"\d+(?:[.-]\d+)+")
USER_PATTERN = re.compile(r"(?<![\w.@\[/])@([A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)\b")
ISSUE_PATTERN = re.compile(r"(?<![\w&/\[])#(\d+)\b")
GITHUB_USER_URL = "https://github.com/{user}"
UNRELEASED = "unreleased"


@dc.dataclass(frozen=True, slots=True)
class NewsEntry:
    """One release section of the changelog.

    Attributes
    ----------
    version : str
        Version found in the heading, or ``"unreleased"``.
    heading : str
        Heading text without the leading ``#``.
    html : Markup
        Rendered section body.
    bullets : tuple[str, ...]
        Plain text of the top-level bullet items, in source order.
    anchor : str
        Element id, unique within one changelog.
    """

    version: str
    heading: str
    html: Markup
    bullets: tuple[str, ...]
    anchor: str


def _anchor(package: str, version: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", f"{package}-{version}").strip("-")
    return slug.lower()


def _unique_anchor(anchor: str, seen: dict[str, int]) -> str:
    count = seen.get(anchor, 0)
    seen[anchor] = count + 1
    return anchor if count == 0 else f"{anchor}-{count}"


def split_sections(text: str) -> list[tuple[str, str]]:
    """Return ``(heading, body)`` for each level-one heading outside code fences.

    Text before the first heading is dropped.

    Examples
    --------
    >>> split_sections("# pkg 1.0\\n```r\\n# comment\\n```\\n")
    [('pkg 1.0', '```r\\n# comment\\n```')]
    """
    sections: list[tuple[str, list[str]]] = []
    opening: str | None = None
    for line in text.splitlines():
        fence = FENCE_PATTERN.match(line)
        if fence is not None:
            if opening is None:
                opening = fence.group("fence")
            elif closes_fence(fence, opening):
                opening = None
        elif opening is None and (heading := HEADING_PATTERN.match(line)):
            sections.append((heading.group("heading").strip(), []))
            continue
        if sections:
            sections[-1][1].append(line)
    return [(heading, "\n".join(lines).strip("\n")) for heading, lines in sections]


def _plain(text: str) -> str:
    text = INLINE_LINK_PATTERN.sub(r"\1", text)
    text = text.replace("`", "").replace("**", "")
    return " ".join(text.split())


def top_level_bullets(body: str) -> tuple[str, ...]:
    """Return the plain text of each unindented bullet item in ``body``.

    Indented lines continue the current item; nested lists and fenced code
    are not part of any item.
    """
    items: list[list[str]] = []
    current: list[str] | None = None
    opening: str | None = None
    for line in body.splitlines():
        fence = FENCE_PATTERN.match(line)
        if fence is not None:
            if opening is None:
                opening = fence.group("fence")
            elif closes_fence(fence, opening):
                opening = None
            current = None
            continue
        if opening is not None:
            continue
        bullet = BULLET_PATTERN.match(line)
        if bullet:
            current = [bullet.group("text")]
            items.append(current)
        elif not line.strip() or not line[0].isspace():
            current = None
        elif current is not None and not BULLET_PATTERN.match(line.strip()):
            current.append(line.strip())
        else:
            current = None
    return tuple(_plain(" ".join(item)) for item in items)


def parse_news(
    text: str,
    *,
    package: str,
    repo_url: str | None = None,
    render: cabc.Callable[[str], str] | None = None,
) -> list[NewsEntry]:
    """Split ``NEWS.md`` text into entries, newest first as written.

    Parameters
    ----------
    text : str
        Markdown contents of ``NEWS.md``.
    package : str
        Package name, used to build section anchors.
    repo_url : str, optional
        GitHub repository used to link ``@user`` and ``#123`` references.
    render : callable, optional
        Converts a section body to HTML. Defaults to a plain
        :class:`~pkgdocs.render.MarkdownConverter`.

    Returns
    -------
    list[NewsEntry]
        One entry per level-one heading outside fenced code.

    Examples
    --------
    >>> [e.version for e in parse_news("# pkg 1.0\\n\\n* a\\n", package="pkg")]
    ['1.0']
    """
    render = render or MarkdownConverter().markdown
    seen: dict[str, int] = {}
    entries: list[NewsEntry] = []
    for heading, body in split_sections(text):
        found = VERSION_PATTERN.search(heading)
        version = found.group(0) if found else UNRELEASED
        entries.append(
            NewsEntry(
                version=version,
                heading=heading,
                html=Markup(render(link_github(body, repo_url))),
                bullets=top_level_bullets(body),
                anchor=_unique_anchor(_anchor(package, version), seen),
            )
        )
    return entries


def link_github(text: str, repo_url: str | None) -> str:
    """Turn ``@user`` and ``#123`` into markdown links to GitHub.

    Examples
    --------
    >>> link_github("Fixed (@jane, #4)", "https://github.com/acme/pkg")
    'Fixed ([@jane](https://github.com/jane), [#4](https://github.com/acme/pkg/issues/4))'
    """
    if not repo_url:
        return text
    text = USER_PATTERN.sub(
        lambda m: f"[@{m.group(1)}]({GITHUB_USER_URL.format(user=m.group(1))})", text
    )
    return ISSUE_PATTERN.sub(
        lambda m: f"[#{m.group(1)}]({repo_url}/issues/{m.group(1)})", text
    )


def data_news(pkg: PackageContext, renderer: PageRenderer) -> list[NewsEntry]:
    """Return the parsed and rendered entries of ``NEWS.md``.

    Raises
    ------
    RenderError
        If ``NEWS.md`` cannot be read as UTF-8 text.
    """
    try:
        text = pkg.news_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RenderError(pkg.news_path, str(exc)) from exc
    return parse_news(
        text,
        package=pkg.package,
        repo_url=pkg.repo_url,
        render=lambda body: renderer.render_markdown(body, depth=1),
    )


def build_news(
    pkg: PackageContext, *, renderer: PageRenderer | None = None
) -> StageResult:
    """Render ``news/index.html``; skipped when there is no ``NEWS.md``."""
    result = StageResult("news")
    if not pkg.news_path.is_file():
        logger.info("No NEWS.md found; skipping news")
        result.skipped = True
        return result

    renderer = renderer or PageRenderer(pkg)
    rule("Building news")
    data = {"pagetitle": "Changelog", "entries": data_news(pkg, renderer)}
    result.written.append(
        renderer.render_page("news.jinja", data, "news/index.html", depth=1)
    )
    return finish_stage(result)


__all__ = [
    "NewsEntry",
    "build_news",
    "data_news",
    "link_github",
    "parse_news",
    "split_sections",
    "top_level_bullets",
]
