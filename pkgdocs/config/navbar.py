"""Default navbar construction and one-level completion of user navbars."""

from __future__ import annotations

import typing as typ

from .models import NavbarConfig, NavItem

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def default_navbar(
    *,
    vignettes: cabc.Sequence[tuple[str, str]],
    has_reference: bool,
    has_news: bool,
    repo_url: str | None,
) -> NavbarConfig:
    """Return the navbar used when the site configuration omits components.

    Parameters
    ----------
    vignettes : Sequence[tuple[str, str]]
        ``(title, output path)`` pairs in discovery order; an "Articles" menu is
        added when any exist.
    has_reference : bool
        Whether a "Reference" link should be shown.
    has_news : bool
        Whether a "Changelog" link should be shown.
    repo_url : str or None
        GitHub repository URL shown as an icon on the right.
    """
    left: list[NavItem] = []
    if has_reference:
        left.append(NavItem(text="Reference", href="reference/index.html"))
    if vignettes:
        menu = tuple(
            NavItem(text=title, href=f"articles/{path}") for title, path in vignettes
        )
        left.append(NavItem(text="Articles", menu=menu))
    if has_news:
        left.append(NavItem(text="Changelog", href="news/index.html"))

    right: list[NavItem] = []
    if repo_url:
        right.append(NavItem(icon="fa-github fa-lg", href=repo_url))
    return NavbarConfig(type="default", left=tuple(left), right=tuple(right))


def complete_navbar(user: NavbarConfig | None, default: NavbarConfig) -> NavbarConfig:
    """Fill missing ``type``/``left``/``right`` components from ``default``."""
    if user is None:
        return default
    return NavbarConfig(
        type=user.type if user.type is not None else default.type,
        left=user.left if user.left is not None else default.left,
        right=user.right if user.right is not None else default.right,
    )


__all__ = ["complete_navbar", "default_navbar"]
