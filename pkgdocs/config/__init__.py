"""Site configuration loading for pkgdocs.

Re-exports the typed configuration models together with the loader that reads
``_pkgdocs.yml`` and the navbar helpers that complete it against defaults.
"""

from __future__ import annotations

from .loader import (
    DEFAULT_SETTINGS,
    build_site_config,
    load_site_config,
    merge_settings,
    read_config_document,
)
from .models import (
    AuthorLink,
    NavbarConfig,
    NavItem,
    SectionSpec,
    SiteConfig,
    TemplateConfig,
)
from .navbar import complete_navbar, default_navbar

__all__ = [
    "DEFAULT_SETTINGS",
    "AuthorLink",
    "NavItem",
    "NavbarConfig",
    "SectionSpec",
    "SiteConfig",
    "TemplateConfig",
    "build_site_config",
    "complete_navbar",
    "default_navbar",
    "load_site_config",
    "merge_settings",
    "read_config_document",
]
