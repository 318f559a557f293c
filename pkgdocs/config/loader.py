"""Load ``_pkgdocs.yml`` into a typed :class:`SiteConfig`.

User settings override the built-in defaults one top-level key at a time: a
key present in the user document replaces the default value for that key
entirely. Nested structures are never deep-merged here; the navbar is
completed against the default navbar later, once the package is known.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from pkgdocs._constants import DEFAULT_DESTINATION
from pkgdocs.errors import ConfigError

from .helpers import (
    _build_authors,
    _build_converter,
    _build_navbar_config,
    _build_sections,
    _build_template_config,
    _optional_str,
)
from .models import SiteConfig

DEFAULT_SETTINGS: dict[str, typ.Any] = {
    "destination": DEFAULT_DESTINATION,
    "url": None,
    "title": None,
    "template": {},
    "navbar": None,
    "articles": None,
    "reference": None,
    "authors": {},
    "converter": "markdown",
    "strict": False,
}


def read_config_document(path: Path) -> dict[str, typ.Any]:
    """Return the raw mapping stored in ``path``, or ``{}`` when it is absent.

    Raises
    ------
    ConfigError
        If the YAML cannot be parsed or its top level is not a mapping.
    """
    if not path.exists():
        return {}
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle)
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Could not read '{path}': {exc}"
        raise ConfigError(msg) from exc
    except YAMLError as exc:
        msg = f"Could not parse '{path}': {exc}"
        raise ConfigError(msg) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure in '{path}' must be a mapping."
        raise ConfigError(msg)
    return dict(loaded)


def merge_settings(
    defaults: typ.Mapping[str, typ.Any], overrides: typ.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    """Overlay ``overrides`` on ``defaults``, replacing whole top-level values."""
    merged = dict(defaults)
    merged.update(overrides)
    return merged


def build_site_config(raw: typ.Mapping[str, typ.Any]) -> SiteConfig:
    """Build a :class:`SiteConfig` from a user mapping merged over the defaults."""
    merged = merge_settings(DEFAULT_SETTINGS, raw)
    strict = merged.get("strict", False)
    if not isinstance(strict, bool):
        msg = "'strict' must be true or false."
        raise ConfigError(msg)
    return SiteConfig(
        destination=_optional_str(merged.get("destination")) or DEFAULT_DESTINATION,
        url=(_optional_str(merged.get("url")) or "").rstrip("/") or None,
        title=_optional_str(merged.get("title")),
        template=_build_template_config(merged.get("template")),
        navbar=_build_navbar_config(merged.get("navbar")),
        articles=_build_sections("articles", merged.get("articles")),
        reference=_build_sections("reference", merged.get("reference")),
        authors=_build_authors(merged.get("authors")),
        converter=_build_converter(merged.get("converter")),
        strict=strict,
    )


def load_site_config(path: Path) -> SiteConfig:
    """Load the site configuration stored at ``path``.

    Parameters
    ----------
    path : Path
        Location of ``_pkgdocs.yml``. A missing file yields the defaults.

    Returns
    -------
    SiteConfig
        The merged configuration.

    Raises
    ------
    ConfigError
        If the document is malformed or a key has the wrong shape.

    Examples
    --------
    >>> from pathlib import Path
    >>> load_site_config(Path("does-not-exist.yml")).destination
    'docs'
    """
    return build_site_config(read_config_document(path))


__all__ = [
    "DEFAULT_SETTINGS",
    "build_site_config",
    "load_site_config",
    "merge_settings",
    "read_config_document",
]
