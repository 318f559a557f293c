r"""Extract topic metadata and body fields from ``man/*.Rd`` files.

Only the parts of the Rd format that a reference page needs are understood:
``\name``, ``\alias``, ``\title``, ``\keyword``, ``\description``,
``\details``, ``\usage``, ``\arguments``, ``\value`` and ``\examples``, plus
the common inline markup inside them. Anything else is ignored.

Example
-------
>>> doc = parse_rd(r"\name{plot_bar}\alias{plot_bar}\title{Bar plots}")
>>> (doc.name, doc.aliases, doc.title)
('plot_bar', ('plot_bar',), 'Bar plots')
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from .errors import ConfigError

COMMENT_PATTERN = re.compile(r"(?<!\\)%.*$", re.MULTILINE)
COMMAND_PATTERN = re.compile(r"\\([A-Za-z]+)")
INLINE_TAGS = {
    "code": "code",
    "emph": "em",
    "strong": "strong",
    "bold": "strong",
    "var": "var",
    "samp": "code",
    "file": "code",
    "env": "code",
    "option": "code",
    "command": "code",
    "kbd": "kbd",
    "pkg": "span",
    "eqn": "span",
}
QUOTES = {"dQuote": ("\u201c", "\u201d"), "sQuote": ("\u2018", "\u2019")}
LIST_TAGS = {"itemize": "ul", "enumerate": "ol"}

LinkResolver = typ.Callable[[str], str | None]


@dc.dataclass(frozen=True, slots=True)
class RdDocument:
    """Fields pulled out of one Rd file; text fields hold raw Rd markup."""

    name: str
    aliases: tuple[str, ...]
    title: str
    keywords: tuple[str, ...] = ()
    description: str = ""
    details: str = ""
    usage: str = ""
    arguments: tuple[tuple[str, str], ...] = ()
    value: str = ""
    examples: str = ""

    @property
    def internal(self) -> bool:
        """Return whether the topic is tagged ``\\keyword{internal}``."""
        return "internal" in self.keywords


def _read_braced(text: str, start: int) -> tuple[str, int]:
    """Return the contents of the brace group opening at ``text[start]``.

    The second element is the index just past the closing brace. Escaped
    braces (``\\{`` and ``\\}``) do not count towards nesting.
    """
    if start >= len(text) or text[start] != "{":
        msg = f"Expected '{{' at offset {start}."
        raise ConfigError(msg)
    depth = 0
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start + 1 : index], index + 1
        index += 1
    msg = f"Unbalanced braces starting at offset {start}."
    raise ConfigError(msg)


def _skip_space(text: str, index: int) -> int:
    while index < len(text) and text[index] in " \t\r\n":
        index += 1
    return index


def _top_level_commands(text: str) -> list[tuple[str, list[str]]]:
    """Return ``(command, args)`` for each brace-taking command at depth zero."""
    found: list[tuple[str, list[str]]] = []
    index = 0
    while index < len(text):
        match = COMMAND_PATTERN.match(text, index)
        if not match:
            index += 2 if text[index] == "\\" else 1
            continue
        args: list[str] = []
        cursor = match.end()
        while True:
            probe = _skip_space(text, cursor) if args else cursor
            if probe < len(text) and text[probe] == "{":
                body, cursor = _read_braced(text, probe)
                args.append(body)
                continue
            break
        found.append((match.group(1), args))
        index = cursor
    return found


def _strip_comments(text: str) -> str:
    return COMMENT_PATTERN.sub("", text)


def _unescape(text: str) -> str:
    return re.sub(r"\\([{}%\\])", r"\1", text)


def _unwrap_examples(text: str) -> str:
    """Replace ``\\dontrun{...}``-style wrappers with their contents."""
    pattern = re.compile(r"\\(?:dontrun|donttest|dontshow)\s*(?=\{)")
    while match := pattern.search(text):
        body, end = _read_braced(text, match.end())
        text = text[: match.start()] + body.strip("\n") + text[end:]
    return text


def _parse_arguments(body: str) -> tuple[tuple[str, str], ...]:
    """Return ``(name, description)`` pairs from an ``\\arguments`` block."""
    pairs: list[tuple[str, str]] = []
    for command, args in _top_level_commands(body):
        if command == "item" and len(args) >= 2:
            pairs.append((_plain_text(args[0]), args[1].strip()))
    return tuple(pairs)


def _plain_text(text: str) -> str:
    """Return ``text`` with Rd markup removed and whitespace collapsed."""
    stripped = re.sub(r"\\[A-Za-z]+\{", "", text)
    stripped = stripped.replace("{", "").replace("}", "")
    return " ".join(_unescape(stripped).split())


def parse_rd(text: str, *, source: str = "<rd>") -> RdDocument:
    """Parse Rd ``text`` into an :class:`RdDocument`.

    Raises
    ------
    ConfigError
        If the file has no ``\\name`` or its braces do not balance.
    """
    commands = _top_level_commands(_strip_comments(text))
    values: dict[str, list[list[str]]] = {}
    for command, args in commands:
        values.setdefault(command, []).append(args)

    def first(command: str) -> str:
        entries = values.get(command)
        if not entries or not entries[0]:
            return ""
        return entries[0][0].strip()

    name = _plain_text(first("name"))
    if not name:
        msg = f"{source}: topic has no \\name{{}}."
        raise ConfigError(msg)

    aliases: list[str] = []
    for args in values.get("alias", []):
        alias = _plain_text(args[0]) if args else ""
        if alias and alias not in aliases:
            aliases.append(alias)
    if not aliases:
        aliases.append(name)

    keywords = tuple(
        _plain_text(args[0]) for args in values.get("keyword", []) if args
    )
    return RdDocument(
        name=name,
        aliases=tuple(aliases),
        title=_plain_text(first("title")) or name,
        keywords=keywords,
        description=first("description"),
        details=first("details"),
        usage=_unescape(first("usage")),
        arguments=_parse_arguments(first("arguments")),
        value=first("value"),
        examples=_unescape(_unwrap_examples(first("examples"))),
    )


def rd_to_html(text: str, link: LinkResolver | None = None) -> str:
    """Convert Rd body markup into HTML paragraphs.

    Parameters
    ----------
    text : str
        Raw Rd markup from a section such as ``\\description``.
    link : callable, optional
        Maps a topic name to an href (or ``None`` when unknown); used for
        ``\\link{}`` cross-references.
    """
    paragraphs = [chunk.strip() for chunk in re.split(r"\n\s*\n", text.strip())]
    rendered = []
    for chunk in paragraphs:
        if not chunk:
            continue
        html = _inline(chunk, link).strip()
        if html.startswith(("<ul>", "<ol>", "<pre>")):
            rendered.append(html)
        else:
            rendered.append(f"<p>{html}</p>")
    return "\n".join(rendered)


def _inline(text: str, link: LinkResolver | None) -> str:
    """Render inline Rd markup in ``text`` into HTML."""
    out: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\":
            out.append(escape(char, quote=False))
            index += 1
            continue
        match = COMMAND_PATTERN.match(text, index)
        if not match:
            out.append(escape(text[index + 1 : index + 2], quote=False))
            index += 2
            continue
        command = match.group(1)
        args: list[str] = []
        option: str | None = None
        cursor = match.end()
        if command == "link" and text.startswith("[", cursor) and "]" in text[cursor:]:
            close = text.index("]", cursor)
            option = text[cursor + 1 : close]
            cursor = close + 1
        while cursor < len(text) and text[cursor] == "{":
            body, cursor = _read_braced(text, cursor)
            args.append(body)
        out.append(_render_command(command, args, link, option))
        index = cursor
    return "".join(out)


def _render_command(
    command: str,
    args: list[str],
    link: LinkResolver | None,
    option: str | None = None,
) -> str:
    """Render one inline Rd command with its brace arguments.

    ``option`` is the bracketed argument of ``\\link[=target]{label}``. A
    leading ``=`` names the topic to link to; anything else names another
    package and leaves the label unlinked.
    """
    content = args[0] if args else ""
    if command == "link":
        label = _plain_text(content)
        if option is None:
            target: str | None = label
        elif option.startswith("=") and len(option) > 1:
            target = option[1:]
        else:
            target = None
        href = link(target) if link and target else None
        inner = f"<code>{escape(label)}</code>"
        return f"<a href='{escape(href)}'>{inner}</a>" if href else inner
    if command == "code" and content.lstrip().startswith("\\link"):
        return _inline(content, link)
    if command == "url":
        url = _plain_text(content)
        return f"<a href='{escape(url)}'>{escape(url)}</a>"
    if command == "href" and len(args) >= 2:
        return f"<a href='{escape(_plain_text(args[0]))}'>{_inline(args[1], link)}</a>"
    if command in QUOTES:
        opening, closing = QUOTES[command]
        return f"{opening}{_inline(content, link)}{closing}"
    if command in LIST_TAGS:
        tag = LIST_TAGS[command]
        items = [item.strip() for item in re.split(r"\\item\b", content)[1:]]
        body = "".join(f"<li>{_inline(item, link)}</li>" for item in items)
        return f"<{tag}>{body}</{tag}>"
    if command == "preformatted":
        return f"<pre>{escape(_unescape(content))}</pre>"
    if command in INLINE_TAGS:
        tag = INLINE_TAGS[command]
        return f"<{tag}>{_inline(content, link)}</{tag}>"
    if command == "R":
        return "R"
    if command in {"ldots", "dots"}:
        return "&hellip;"
    return _inline(content, link)


__all__ = ["RdDocument", "parse_rd", "rd_to_html"]
