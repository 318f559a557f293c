"""Utility helpers shared by the pkgdocs configuration loader."""

from __future__ import annotations

import typing as typ

from pkgdocs.errors import ConfigError
from pkgdocs.selector import parse_match_expression

from .models import AuthorLink, NavbarConfig, NavItem, SectionSpec, TemplateConfig

CONVERTERS = ("markdown", "pandoc")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_mapping(key: str, value: object) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` when it is a mapping, raising ``ConfigError`` otherwise."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping."
        raise ConfigError(msg)
    return value


def _require_list(key: str, value: object) -> list[typ.Any]:
    """Return ``value`` when it is a list, raising ``ConfigError`` otherwise."""
    if not isinstance(value, list):
        msg = f"'{key}' must be a list."
        raise ConfigError(msg)
    return value


def _build_template_config(payload: object) -> TemplateConfig:
    """Build a TemplateConfig from the ``template`` mapping."""
    data = _require_mapping("template", payload)
    params = _require_mapping("template.params", data.get("params"))
    default_assets = data.get("default_assets", True)
    if not isinstance(default_assets, bool):
        msg = "'template.default_assets' must be true or false."
        raise ConfigError(msg)
    return TemplateConfig(
        package=_optional_str(data.get("package")),
        path=_optional_str(data.get("path")),
        assets=_optional_str(data.get("assets")),
        default_assets=default_assets,
        params=dict(params),
    )


def _build_nav_items(key: str, entries: object) -> tuple[NavItem, ...]:
    """Build navbar items (recursively for menus) from a YAML list."""
    items: list[NavItem] = []
    for entry in _require_list(key, entries):
        match entry:
            case {"menu": menu, **rest}:
                items.append(
                    NavItem(
                        text=_optional_str(rest.get("text")),
                        icon=_optional_str(rest.get("icon")),
                        href=_optional_str(rest.get("href")),
                        menu=_build_nav_items(f"{key}.menu", menu),
                    )
                )
            case {"text": _} | {"icon": _}:
                items.append(
                    NavItem(
                        text=_optional_str(entry.get("text")),
                        icon=_optional_str(entry.get("icon")),
                        href=_optional_str(entry.get("href")),
                    )
                )
            case _:
                msg = f"Navbar entries in '{key}' need 'text' or 'icon'."
                raise ConfigError(msg)
    return tuple(items)


def _build_navbar_config(payload: object) -> NavbarConfig | None:
    """Build a partial NavbarConfig; absent components stay ``None``."""
    if payload is None:
        return None
    data = _require_mapping("navbar", payload)
    left = data.get("left")
    right = data.get("right")
    return NavbarConfig(
        type=_optional_str(data.get("type")),
        left=_build_nav_items("navbar.left", left) if left is not None else None,
        right=_build_nav_items("navbar.right", right) if right is not None else None,
    )


def _build_sections(key: str, payload: object) -> tuple[SectionSpec, ...] | None:
    """Build SectionSpec entries for the ``articles`` or ``reference`` index."""
    if payload is None:
        return None
    sections: list[SectionSpec] = []
    for entry in _require_list(key, payload):
        if not isinstance(entry, dict):
            msg = f"Each '{key}' section must be a mapping."
            raise ConfigError(msg)
        contents = entry.get("contents") or []
        if not isinstance(contents, list):
            contents = [contents]
        sections.append(
            SectionSpec(
                title=_optional_str(entry.get("title")),
                contents=tuple(parse_match_expression(item) for item in contents),
                description=_optional_str(entry.get("desc", entry.get("description"))),
                css_class=_optional_str(entry.get("class")),
            )
        )
    return tuple(sections)


def _build_authors(payload: object) -> dict[str, AuthorLink]:
    """Build author display overrides keyed by author name."""
    authors: dict[str, AuthorLink] = {}
    for name, value in _require_mapping("authors", payload).items():
        data = _require_mapping(f"authors.{name}", value)
        authors[str(name)] = AuthorLink(
            href=_optional_str(data.get("href")),
            html=_optional_str(data.get("html")),
        )
    return authors


def _build_converter(payload: object) -> str:
    """Validate the converter backend name."""
    name = (_optional_str(payload) or "markdown").lower()
    if name not in CONVERTERS:
        msg = f"Unknown converter {name!r}; expected one of: {', '.join(CONVERTERS)}."
        raise ConfigError(msg)
    return name


__all__ = [
    "CONVERTERS",
    "_build_authors",
    "_build_converter",
    "_build_nav_items",
    "_build_navbar_config",
    "_build_sections",
    "_build_template_config",
    "_optional_str",
    "_require_mapping",
]
