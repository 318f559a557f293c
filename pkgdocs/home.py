"""Home page and license page rendering.

``index.html`` is rendered from ``index.md`` or ``README.md`` (falling back to
the descriptor's description) with a sidebar listing links, the license and
the authors. A ``LICENSE.md`` is rendered as markdown to ``LICENSE.html``; a
plain ``LICENSE`` file is shown escaped inside ``<pre>``.
"""

from __future__ import annotations

import logging
import re
import typing as typ
from html import escape

from markupsafe import Markup

from .errors import RenderError
from .render import PageRenderer
from .stage import StageResult, finish_stage, rule

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .context import PackageContext

logger = logging.getLogger(__name__)

LICENSE_LINKS: dict[str, str] = {
    "AGPL-3": "https://www.r-project.org/Licenses/AGPL-3",
    "Apache License 2.0": "https://www.apache.org/licenses/LICENSE-2.0",
    "Apache License": "https://www.apache.org/licenses/LICENSE-2.0",
    "Artistic-2.0": "https://www.r-project.org/Licenses/Artistic-2.0",
    "BSD_2_clause": "https://www.r-project.org/Licenses/BSD_2_clause",
    "BSD_3_clause": "https://www.r-project.org/Licenses/BSD_3_clause",
    "CC0": "https://creativecommons.org/publicdomain/zero/1.0/",
    "GPL-2": "https://www.r-project.org/Licenses/GPL-2",
    "GPL-3": "https://www.r-project.org/Licenses/GPL-3",
    "LGPL-2.1": "https://www.r-project.org/Licenses/LGPL-2.1",
    "LGPL-3": "https://www.r-project.org/Licenses/LGPL-3",
    "MIT": "https://opensource.org/licenses/mit-license.php",
    "MPL-2.0": "https://www.mozilla.org/en-US/MPL/2.0/",
    "LICENSE": "LICENSE.html",
}
LICENSE_PATTERN = re.compile(
    r"(?<![\w-])("
    + "|".join(re.escape(abbr) for abbr in sorted(LICENSE_LINKS, key=len, reverse=True))
    + r")(?![\w-])"
)


def autolink_license(text: str) -> str:
    """Return escaped ``text`` with known license abbreviations linked.

    Examples
    --------
    >>> autolink_license("GPL-3")
    "<a href='https://www.r-project.org/Licenses/GPL-3'>GPL-3</a>"
    """

    def _link(match: re.Match[str]) -> str:
        abbr = match.group(1)
        return f"<a href='{LICENSE_LINKS[abbr]}'>{abbr}</a>"

    return LICENSE_PATTERN.sub(_link, escape(text, quote=False))


def data_home_sidebar(pkg: PackageContext) -> dict[str, typ.Any]:
    """Return the sidebar model: links, license HTML and authors."""
    links: list[dict[str, str]] = []
    if pkg.repo_url:
        links.append({"text": "Browse source code", "href": pkg.repo_url})
    bug_reports = pkg.descriptor.fields.get("BugReports")
    if bug_reports:
        links.append({"text": "Report a bug", "href": bug_reports})

    authors: list[Markup] = []
    for name in pkg.authors:
        override = pkg.config.authors.get(name)
        if override and override.html:
            label = Markup(override.html)
        else:
            label = Markup.escape(name)
        if override and override.href:
            authors.append(Markup("<a href='{}'>{}</a>").format(override.href, label))
        else:
            authors.append(label)

    license_html = Markup(autolink_license(pkg.license)) if pkg.license else None
    return {"links": links, "license_html": license_html, "authors": authors}


def build_home_license(pkg: PackageContext, renderer: PageRenderer) -> Path | None:
    """Render ``LICENSE.md`` or ``LICENSE`` into ``LICENSE.html`` if present."""
    license_md = pkg.src_path / "LICENSE.md"
    if license_md.is_file():
        body = renderer.render_markdown_file(license_md)
        return renderer.render_page(
            "title-body.jinja",
            {"pagetitle": "License", "body": body},
            "LICENSE.html",
            depth=0,
        )
    license_raw = pkg.src_path / "LICENSE"
    if license_raw.is_file():
        try:
            text = license_raw.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RenderError(license_raw, str(exc)) from exc
        body = Markup("<pre>{}</pre>").format(text)
        return renderer.render_page(
            "title-body.jinja",
            {"pagetitle": "License", "body": body},
            "LICENSE.html",
            depth=0,
        )
    return None


def _home_source(pkg: PackageContext) -> Path | None:
    for name in ("index.md", "README.md"):
        candidate = pkg.src_path / name
        if candidate.is_file():
            return candidate
    return None


def build_home(pkg: PackageContext, *, renderer: PageRenderer | None = None) -> StageResult:
    """Render ``index.html`` and the license page.

    Parameters
    ----------
    pkg : PackageContext
        Package being built.
    renderer : PageRenderer, optional
        Renderer to reuse; a new one is created when omitted.

    Returns
    -------
    StageResult
        The written pages.
    """
    renderer = renderer or PageRenderer(pkg)
    result = StageResult("home")
    rule("Building home")

    source = _home_source(pkg)
    if source is not None:
        body = renderer.render_markdown_file(source)
    else:
        body = renderer.render_markdown(pkg.descriptor.description or pkg.descriptor.title)

    title = pkg.descriptor.title or pkg.title
    data = {
        "pagetitle": title,
        "body": body,
        "sidebar": data_home_sidebar(pkg),
    }
    result.written.append(renderer.render_page("home.jinja", data, "index.html", depth=0))

    license_page = build_home_license(pkg, renderer)
    if license_page is not None:
        result.written.append(license_page)
    return finish_stage(result)


__all__ = [
    "LICENSE_LINKS",
    "autolink_license",
    "build_home",
    "build_home_license",
    "data_home_sidebar",
]
