"""Typed dataclasses describing pkgdocs site configuration structures."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from pkgdocs.selector import MatchExpression  # noqa: TC001 - runtime type metadata


@dc.dataclass(frozen=True, slots=True)
class NavItem:
    """A navbar entry: a link, an icon link, a menu heading or a separator."""

    text: str | None = None
    icon: str | None = None
    href: str | None = None
    menu: tuple[NavItem, ...] = ()

    @property
    def is_separator(self) -> bool:
        """Return whether the entry is a ``---`` style menu divider."""
        return bool(self.text) and set(self.text.strip()) == {"-"} and not self.href

    @property
    def is_heading(self) -> bool:
        """Return whether the entry is a menu heading (text without link)."""
        return not self.href and not self.menu and not self.is_separator


@dc.dataclass(frozen=True, slots=True)
class NavbarConfig:
    """Navbar layout; ``None`` components are filled from the default navbar."""

    type: str | None = None
    left: tuple[NavItem, ...] | None = None
    right: tuple[NavItem, ...] | None = None


@dc.dataclass(frozen=True, slots=True)
class TemplateConfig:
    """Where page templates and static assets come from."""

    package: str | None = None
    path: str | None = None
    assets: str | None = None
    default_assets: bool = True
    params: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(frozen=True, slots=True)
class SectionSpec:
    """A titled group of index entries selected by match expressions."""

    title: str | None
    contents: tuple[MatchExpression, ...] = ()
    description: str | None = None
    css_class: str | None = None


@dc.dataclass(frozen=True, slots=True)
class AuthorLink:
    """Display override for one author on the home page."""

    href: str | None = None
    html: str | None = None


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Site configuration after merging ``_pkgdocs.yml`` over the defaults.

    Attributes
    ----------
    destination : str
        Output directory, relative to the package root unless absolute.
    url : str or None
        Canonical URL where the site is published.
    title : str or None
        Site title; the package name is used when ``None``.
    template : TemplateConfig
        Template and asset sources.
    navbar : NavbarConfig or None
        User navbar; missing components come from the default navbar.
    articles : tuple[SectionSpec, ...] or None
        Article index sections; ``None`` means one default section.
    reference : tuple[SectionSpec, ...] or None
        Reference index sections; ``None`` means one default section.
    authors : dict[str, AuthorLink]
        Per-author display overrides keyed by author name.
    converter : str
        Markdown converter backend, ``"markdown"`` or ``"pandoc"``.
    strict : bool
        Promote "missing from index" warnings to errors.
    """

    destination: str = "docs"
    url: str | None = None
    title: str | None = None
    template: TemplateConfig = dc.field(default_factory=TemplateConfig)
    navbar: NavbarConfig | None = None
    articles: tuple[SectionSpec, ...] | None = None
    reference: tuple[SectionSpec, ...] | None = None
    authors: dict[str, AuthorLink] = dc.field(default_factory=dict)
    converter: str = "markdown"
    strict: bool = False


__all__ = [
    "AuthorLink",
    "NavItem",
    "NavbarConfig",
    "SectionSpec",
    "SiteConfig",
    "TemplateConfig",
]
