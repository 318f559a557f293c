"""Markdown-to-HTML converters used for articles, the home page and news.

Two interchangeable backends share one small contract:

* :class:`MarkdownConverter` converts in process with Python-Markdown and
  Pygments, building a fresh ``Markdown`` instance per document.
* :class:`PandocConverter` runs one ``pandoc`` subprocess per document.

Both fill page templates that use pandoc's ``$title$``, ``$body$`` and
``$table-of-contents$`` substitution points.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import typing as typ
from html import escape
from pathlib import Path

import markdown as markdown_pkg
from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from pkgdocs.context import read_front_matter, strip_front_matter
from pkgdocs.errors import ConfigError, RenderError

from .links import ArticleLinkExtension

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

# ``{r setup, echo=FALSE}`` chunk headers as well as plain ``r`` info strings.
FENCE_PATTERN = re.compile(
    r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?:\{[ \t]*(?P<chunk>[\w+#.-]+)[^}]*\}|(?P<lang>[\w+#.-]+))?"
    r"(?P<rest>.*)$"
)
HIGHLIGHT_OPEN_TAG = re.compile(r'<div class="codehilite">')

TopicHref = typ.Callable[[str], str | None]


def closes_fence(match: re.Match[str], opening: str) -> bool:
    """Return whether the fence line in ``match`` ends a block opened by ``opening``.

    A closing fence uses the same character, is at least as long as the
    opening fence and carries no info string.
    """
    fence = match.group("fence")
    return (
        fence[0] == opening[0]
        and len(fence) >= len(opening)
        and not (match.group("chunk") or match.group("lang"))
        and not match.group("rest").strip()
    )


def normalize_fences(text: str) -> tuple[str, list[str]]:
    """Rewrite fenced code blocks into the form Python-Markdown understands.

    Fence lines lose up to three spaces of indentation and R Markdown chunk
    headers (``{r label, echo=FALSE}``) become bare language names. Lines
    between an opening and its closing fence are left alone.

    Returns
    -------
    tuple[str, list[str]]
        The rewritten text and the language of each block in document order,
        ``"text"`` where the block names none.

    Examples
    --------
    >>> normalize_fences("```{r setup}\\nx <- 1\\n```\\n")
    ('```r\\nx <- 1\\n```\\n', ['r'])
    """
    out: list[str] = []
    languages: list[str] = []
    opening: str | None = None
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body) :]
        match = FENCE_PATTERN.match(body)
        if match is None:
            out.append(line)
            continue
        fence = match.group("fence")
        if opening is None:
            language = match.group("chunk") or match.group("lang") or ""
            languages.append(language or "text")
            opening = fence
            out.append(f"{fence}{language}{ending}")
            continue
        if closes_fence(match, opening):
            opening = None
            out.append(f"{fence}{ending}")
        else:
            out.append(line)
    return "".join(out), languages


def tag_languages(html: str, languages: cabc.Iterable[str]) -> str:
    """Add ``data-language`` to each highlighted block of ``html`` in turn."""
    remaining = iter(languages)

    def _open_tag(_match: re.Match[str]) -> str:
        language = escape(next(remaining, "text"), quote=True)
        return f'<div class="codehilite" data-language="{language}">'

    return HIGHLIGHT_OPEN_TAG.sub(_open_tag, html)


class Converter(typ.Protocol):
    """Contract shared by the converter backends."""

    @property
    def version(self) -> str: ...

    def markdown(self, text: str, *, topic_href: TopicHref | None = None) -> str: ...

    def render_document(
        self,
        source: Path,
        template: Path,
        output: Path,
        *,
        title: str,
        topic_href: TopicHref | None = None,
    ) -> Path: ...


class MarkdownConverter:
    """In-process converter built on Python-Markdown and Pygments.

    Parameters
    ----------
    pygments_style : str, optional
        Pygments style for highlighted R code and fenced blocks.
    """

    def __init__(self, pygments_style: str = "friendly") -> None:
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def version(self) -> str:
        return f"python-markdown {markdown_pkg.__version__}"

    @property
    def stylesheet(self) -> str:
        """Return the Pygments rules embedded in every page."""
        return self._formatter.get_style_defs(".codehilite")

    def _build(self, topic_href: TopicHref | None) -> Markdown:
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "toc",
            ArticleLinkExtension(topic_href),
        ]
        return Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                },
                "toc": {"toc_depth": "2-3"},
            },
            output_format="html",
        )

    def markdown(self, text: str, *, topic_href: TopicHref | None = None) -> str:
        """Return ``text`` as an HTML fragment."""
        html, _toc = self._convert(text, topic_href)
        return html

    def _convert(self, text: str, topic_href: TopicHref | None) -> tuple[str, str]:
        normalized, languages = normalize_fences(text)
        if not normalized.strip():
            return "", ""
        md = self._build(topic_href)
        html = md.convert(normalized)
        return tag_languages(html, languages), getattr(md, "toc", "")

    def render_document(
        self,
        source: Path,
        template: Path,
        output: Path,
        *,
        title: str,
        topic_href: TopicHref | None = None,
    ) -> Path:
        """Convert ``source`` and substitute it into the ``template`` file.

        Raises
        ------
        RenderError
            If the source or template cannot be read.
        """
        try:
            text = source.read_text(encoding="utf-8")
            layout = template.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RenderError(source, str(exc)) from exc
        meta = read_front_matter(text)
        page_title = str(meta.get("title") or title)
        body, toc = self._convert(strip_front_matter(text), topic_href)
        html = (
            layout.replace("$title$", escape(page_title))
            .replace("$table-of-contents$", toc)
            .replace("$body$", body)
        )
        output.write_text(html, encoding="utf-8")
        return output

    def code_block(self, code: str, language: str = "r") -> str:
        """Highlight a usage or examples snippet outside any markdown document.

        Unknown language names fall back to plain text.
        """
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        return tag_languages(highlight(code, lexer, self._formatter), [language])


class PandocConverter:
    """Convert documents by running ``pandoc`` once per document."""

    def __init__(self, executable: str = "pandoc") -> None:
        resolved = shutil.which(executable)
        if not resolved:
            msg = f"The pandoc converter needs '{executable}' on PATH."
            raise ConfigError(msg)
        self.executable = resolved
        self._version: str | None = None

    @property
    def version(self) -> str:
        if self._version is None:
            completed = subprocess.run(  # noqa: S603
                [self.executable, "--version"],
                check=True,
                capture_output=True,
                text=True,
            )
            first_line = completed.stdout.splitlines()[0] if completed.stdout else ""
            self._version = first_line.strip() or "pandoc"
        return self._version

    def _run(self, args: list[str], *, source: Path, stdin: str | None = None) -> str:
        try:
            completed = subprocess.run(  # noqa: S603
                [self.executable, *args],
                input=stdin,
                check=True,
                capture_output=True,
                text=True,
            )
        except subprocess.CalledProcessError as exc:
            reason = (exc.stderr or "").strip() or f"pandoc exited with {exc.returncode}"
            raise RenderError(source, reason) from exc
        except OSError as exc:
            raise RenderError(source, str(exc)) from exc
        return completed.stdout

    def markdown(self, text: str, *, topic_href: TopicHref | None = None) -> str:  # noqa: ARG002
        """Render a markdown string to an HTML fragment."""
        if not text.strip():
            return ""
        return self._run(
            ["--from", "markdown", "--to", "html5"], source=Path("<string>"), stdin=text
        )

    def render_document(
        self,
        source: Path,
        template: Path,
        output: Path,
        *,
        title: str,
        topic_href: TopicHref | None = None,  # noqa: ARG002
    ) -> Path:
        """Render ``source`` through ``template`` into ``output``."""
        self._run(
            [
                str(source),
                "--from",
                "markdown",
                "--to",
                "html5",
                "--template",
                str(template),
                "--toc",
                "--toc-depth",
                "2",
                "--metadata",
                f"pagetitle={title}",
                "--output",
                str(output),
            ],
            source=source,
        )
        return output


def build_converter(name: str) -> Converter:
    """Return the converter backend configured by ``name``."""
    if name == "pandoc":
        return PandocConverter()
    return MarkdownConverter()


__all__ = [
    "FENCE_PATTERN",
    "Converter",
    "MarkdownConverter",
    "PandocConverter",
    "build_converter",
    "closes_fence",
    "normalize_fences",
    "tag_languages",
]
