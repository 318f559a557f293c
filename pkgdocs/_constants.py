"""Common literal values used across pkgdocs.

These constants keep source-tree file names, output locations and manifest
keys centralized so the loader, the build stages, cleanup and tests import the
same values without drifting.

Examples
--------
>>> from pkgdocs import _constants
>>> _constants.MANIFEST_FILENAME
'pkgdocs.yml'
"""

CONFIG_FILENAME = "_pkgdocs.yml"
DESCRIPTION_FILENAME = "DESCRIPTION"
TOPICS_DIR = "man"
VIGNETTES_DIR = "vignettes"
NEWS_FILENAME = "NEWS.md"
EXTRAS_DIR = "pkgdocs"
MANIFEST_FILENAME = "pkgdocs.yml"
DEFAULT_DESTINATION = "docs"
VIGNETTE_SUFFIXES = (".Rmd", ".rmd", ".md")
SHA_ENV_VAR = "PKGDOCS_SHA"
