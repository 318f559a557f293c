"""Uniform page-rendering seam over Jinja2 templates and markdown converters.

:class:`PageRenderer` is the only place that touches the template engine. Every
render receives the navigation ``depth`` explicitly; from it the renderer
computes the ``../`` prefix that lets a page reference site-root assets and
navbar links identically at any nesting level.

Example
-------
>>> from pkgdocs.context import load_package
>>> from pkgdocs.render import PageRenderer
>>> pkg = load_package(".")  # doctest: +SKIP
>>> PageRenderer(pkg).render_page(  # doctest: +SKIP
...     "title-body.jinja", {"pagetitle": "License", "body": "..."}, "LICENSE.html", depth=0
... )
PosixPath('.../docs/LICENSE.html')
"""

from __future__ import annotations

import importlib.util
import logging
import os
import tempfile
import typing as typ
from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateError,
    pass_context,
    select_autoescape,
)
from markupsafe import Markup

from pkgdocs._constants import EXTRAS_DIR
from pkgdocs.context import strip_front_matter
from pkgdocs.errors import ConfigError, PathError, RenderError

from .converters import Converter, MarkdownConverter, build_converter

if typ.TYPE_CHECKING:
    from jinja2.runtime import Context

    from pkgdocs.context import PackageContext, Vignette

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES = Path(__file__).resolve().parents[1] / "templates"
ABSOLUTE_PREFIXES = ("http://", "https://", "mailto:", "#", "/", "data:", "javascript:")


def depth_prefix(depth: int) -> str:
    """Return the relative prefix leading from a page at ``depth`` to the site root.

    Examples
    --------
    >>> depth_prefix(0)
    ''
    >>> depth_prefix(2)
    '../../'
    """
    if depth < 0:
        msg = f"Navigation depth must not be negative, got {depth}."
        raise ValueError(msg)
    return "../" * depth


def relative_href(href: str | None, prefix: str) -> str:
    """Prefix a site-root-relative ``href``; leave absolute URLs untouched."""
    if not href:
        return ""
    if href.startswith(ABSOLUTE_PREFIXES) or "://" in href:
        return href
    return f"{prefix}{href}"


def _package_loader(package: str) -> PackageLoader:
    """Return a loader for the ``templates`` directory of ``package``."""
    try:
        module_spec = importlib.util.find_spec(package)
    except (ImportError, ValueError):
        module_spec = None
    if module_spec is None:
        msg = f"Template package '{package}' is not installed."
        raise ConfigError(msg)
    try:
        return PackageLoader(package, "templates")
    except ValueError as exc:
        msg = f"Template package '{package}' has no templates: {exc}"
        raise ConfigError(msg) from exc


@pass_context
def _rel_filter(ctx: Context, href: str | None) -> str:
    return relative_href(href, ctx.get("prefix", ""))


class PageRenderer:
    """Render templated pages and markdown for one package build."""

    def __init__(
        self,
        context: PackageContext,
        *,
        templates_dir: Path | None = None,
        converter: Converter | None = None,
    ) -> None:
        """Initialize the Jinja environment and converter.

        Parameters
        ----------
        context : PackageContext
            The package being built; supplies site metadata, navbar and the
            template configuration.
        templates_dir : Path, optional
            Directory searched before every configured template source.
        converter : Converter, optional
            Markdown backend; defaults to the one named in the configuration.
        """
        self.context = context
        self.converter = converter or build_converter(context.config.converter)
        self.highlighter = (
            self.converter
            if isinstance(self.converter, MarkdownConverter)
            else MarkdownConverter()
        )
        self.env = Environment(
            loader=ChoiceLoader(self._template_loaders(templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["rel"] = _rel_filter

    def _template_loaders(self, templates_dir: Path | None) -> list[BaseLoader]:
        """Return loaders in lookup order: override, config path, package, built-in."""
        template = self.context.config.template
        loaders: list[BaseLoader] = []
        if templates_dir is not None:
            loaders.append(FileSystemLoader(str(templates_dir)))
        if template.path:
            path = self.context.src_path / template.path
            if not path.is_dir():
                msg = f"Can not find template path '{path}'."
                raise PathError(msg)
            loaders.append(FileSystemLoader(str(path)))
        if template.package:
            loaders.append(_package_loader(template.package))
        loaders.append(FileSystemLoader(str(BUILTIN_TEMPLATES)))
        return loaders

    def template_data(self, depth: int) -> dict[str, typ.Any]:
        """Return the values injected into every page at ``depth``."""
        pkg = self.context
        return {
            "site": {"title": pkg.title, "url": pkg.config.url},
            "package": {"name": pkg.package, "version": pkg.version},
            "navbar": pkg.navbar,
            "params": pkg.config.template.params,
            "pagetitle": pkg.title,
            "prefix": depth_prefix(depth),
            "depth": depth,
            "pygments_css": Markup(self.highlighter.stylesheet),
            "extra": {
                "css": (pkg.src_path / EXTRAS_DIR / "extra.css").is_file(),
                "js": (pkg.src_path / EXTRAS_DIR / "extra.js").is_file(),
            },
        }

    def render_string(
        self, template_name: str, data: typ.Mapping[str, typ.Any], *, depth: int
    ) -> str:
        """Render ``template_name`` with shared and page ``data`` to a string.

        Raises
        ------
        RenderError
            If the template is missing or fails to render.
        """
        context = self.template_data(depth)
        context.update(data)
        try:
            template = self.env.get_template(template_name)
            html = template.render(**context)
        except TemplateError as exc:
            raise RenderError(template_name, str(exc)) from exc
        if not html.endswith("\n"):
            html += "\n"
        return html

    def render_page(
        self,
        template_name: str,
        data: typ.Mapping[str, typ.Any],
        path: str | Path,
        *,
        depth: int,
    ) -> Path:
        """Render a page and write it to ``path`` below the destination.

        Parameters
        ----------
        template_name : str
            Jinja template to render.
        data : Mapping[str, Any]
            Page data; overrides shared values such as ``pagetitle``.
        path : str or Path
            Output path relative to the destination directory.
        depth : int
            Directory levels between the output page and the site root.

        Returns
        -------
        Path
            Absolute path of the written file.
        """
        html = self.render_string(template_name, data, depth=depth)
        output = self.context.dst_path / path
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")
        logger.info("Writing '%s'", Path(path).as_posix())
        return output

    def render_markdown(self, text: str, *, depth: int = 0) -> Markup:
        """Convert a markdown string, linking function references at ``depth``."""
        html = self.converter.markdown(text, topic_href=self._topic_linker(depth))
        return Markup(html)

    def render_markdown_file(self, path: Path, *, depth: int = 0) -> Markup:
        """Convert the markdown file at ``path`` to HTML.

        Raises
        ------
        RenderError
            If the file cannot be read or converted.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RenderError(path, str(exc)) from exc
        try:
            return self.render_markdown(strip_front_matter(text), depth=depth)
        except RenderError as exc:
            raise RenderError(path, exc.reason) from exc

    def render_article(self, vignette: Vignette) -> Path:
        """Render one vignette to ``articles/<file_out>``.

        The article template is first rendered to a temporary file with
        ``$title$``/``$body$`` substitution points; the converter then fills it
        from the vignette source. The temporary file is removed on every exit
        path and no output is left behind when conversion fails.
        """
        depth = vignette.depth + 1
        output = self.context.dst_path / "articles" / vignette.file_out
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix="pkgdocs-article-", suffix=".html")
        os.close(fd)
        template_path = Path(tmp_name)
        try:
            layout = self.render_string(
                "article.jinja",
                {"pagetitle": "$title$", "vignette": vignette},
                depth=depth,
            )
            template_path.write_text(layout, encoding="utf-8")
            try:
                self.converter.render_document(
                    vignette.source_path,
                    template_path,
                    output,
                    title=vignette.title,
                    topic_href=self._topic_linker(depth),
                )
            except RenderError as exc:
                output.unlink(missing_ok=True)
                raise RenderError(vignette.source_path, exc.reason) from exc
        finally:
            template_path.unlink(missing_ok=True)
        return output

    def highlight(self, code: str, language: str = "r") -> Markup:
        """Return syntax-highlighted HTML for ``code``."""
        return Markup(self.highlighter.code_block(code, language))

    def _topic_linker(self, depth: int) -> typ.Callable[[str], str | None]:
        """Return a resolver from function name to reference page at ``depth``."""
        prefix = depth_prefix(depth)

        def _href(name: str) -> str | None:
            page = self.context.topic_href(name)
            return f"{prefix}reference/{page}" if page else None

        return _href


__all__ = ["PageRenderer", "depth_prefix", "relative_href"]
