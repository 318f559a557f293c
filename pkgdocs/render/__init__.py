"""Page rendering for pkgdocs: the Jinja adapter and markdown converters."""

from __future__ import annotations

from .converters import Converter, MarkdownConverter, PandocConverter, build_converter
from .renderer import PageRenderer, depth_prefix, relative_href

__all__ = [
    "Converter",
    "MarkdownConverter",
    "PandocConverter",
    "PageRenderer",
    "build_converter",
    "depth_prefix",
    "relative_href",
]
