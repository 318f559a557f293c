"""Static documentation sites for R-style packages.

pkgdocs reads a package source tree (``DESCRIPTION``, ``man/*.Rd``,
``vignettes/``, ``NEWS.md``, ``README.md``) and writes a browsable HTML site
with a home page, function reference, articles and changelog.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``build_site``: Build a complete site from Python.

Examples
--------
>>> from pkgdocs import build_site
>>> build_site("path/to/package")  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main
from .site import build_site

__all__ = ["app", "build_site", "main"]
