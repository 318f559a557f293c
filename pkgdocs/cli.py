"""Cyclopts CLI entrypoint for building pkgdocs documentation sites.

The ``pkgdocs`` console script builds a complete site with ``pkgdocs build``
or runs a single stage (``init``, ``home``, ``reference``, ``articles``,
``news``) against an already initialised destination. ``pkgdocs clean``
removes exactly the files recorded in the previous build's manifest.

Examples
--------
Build the package in the current directory:

>>> from pkgdocs.cli import main
>>> main()  # doctest: +SKIP

Build into a custom directory and fail on unlisted vignettes:

>>> from pkgdocs.cli import app
>>> app(["build", "--destination", "site", "--strict"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .articles import build_articles
from .clean import clean_site
from .context import PackageContext, load_package
from .errors import PkgdocsError
from .home import build_home
from .logging_utils import setup_logging
from .news import build_news
from .reference import build_reference
from .site import build_site, init_site

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .stage import StageResult

logger = logging.getLogger(__name__)

app = App(name="pkgdocs", config=cyclopts.config.Env("PKGDOCS_", command=False))  # type: ignore[unknown-argument]

PathOption = typ.Annotated[
    Path, Parameter(help="Package root containing DESCRIPTION")
]
DestinationOption = typ.Annotated[
    Path | None, Parameter(help="Override the configured output directory")
]
QuietOption = typ.Annotated[bool, Parameter(help="Only report warnings and errors")]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _run(
    path: Path,
    destination: Path | None,
    quiet: bool,
    stage: cabc.Callable[[PackageContext], StageResult],
) -> None:
    """Load the package and run one stage, turning build errors into exit 1."""
    setup_logging(quiet=quiet)
    try:
        pkg = load_package(path, destination=destination)
        result = stage(pkg)
    except PkgdocsError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc
    if result.skipped:
        logger.info("Nothing to do for '%s'", result.name)


@app.command(help="Build the complete documentation site.")
def build(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    preview: typ.Annotated[
        bool, Parameter(help="Open the home page in a browser when done")
    ] = False,
    quiet: QuietOption = False,
    strict: typ.Annotated[
        bool | None,
        Parameter(help="Fail when topics or vignettes are missing from the index"),
    ] = None,
) -> None:
    """Run every build stage and write the site manifest.

    Parameters
    ----------
    path : Path, optional
        Package root; defaults to the current directory.
    destination : Path or None, optional
        Output directory overriding ``destination`` in ``_pkgdocs.yml``.
    preview : bool, optional
        Open ``index.html`` in the default browser after building.
    quiet : bool, optional
        Suppress progress messages.
    strict : bool or None, optional
        Override the ``strict`` configuration setting.

    Raises
    ------
    SystemExit
        With status 1 when the build fails.
    """
    setup_logging(quiet=quiet)
    try:
        result = build_site(
            path, destination=destination, preview=preview, strict=strict
        )
    except PkgdocsError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc
    logger.info(
        "Wrote %d files to '%s'",
        len(result.written),
        _format_path(result.context.dst_path),
    )


@app.command(help="Create the destination and copy assets.")
def init(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
) -> None:
    """Initialise the site output directory."""
    _run(path, destination, quiet, init_site)


@app.command(help="Render the home page and license page.")
def home(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
) -> None:
    """Build ``index.html`` and ``LICENSE.html``."""
    _run(path, destination, quiet, build_home)


@app.command(help="Render the function reference.")
def reference(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
    strict: bool | None = None,
) -> None:
    """Build ``reference/`` topic pages and the reference index."""
    _run(path, destination, quiet, lambda pkg: build_reference(pkg, strict=strict))


@app.command(help="Render vignettes and the articles index.")
def articles(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
    strict: bool | None = None,
) -> None:
    """Build ``articles/`` pages and the articles index."""
    _run(path, destination, quiet, lambda pkg: build_articles(pkg, strict=strict))


@app.command(help="Render the changelog from NEWS.md.")
def news(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
) -> None:
    """Build ``news/index.html``."""
    _run(path, destination, quiet, build_news)


@app.command(help="Remove the files recorded in the site manifest.")
def clean(
    *,
    path: PathOption = Path(),
    destination: DestinationOption = None,
    quiet: QuietOption = False,
) -> None:
    """Delete previously generated files, leaving everything else alone."""
    setup_logging(quiet=quiet)
    try:
        pkg = load_package(path, destination=destination)
    except PkgdocsError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc
    removed = clean_site(pkg.dst_path)
    logger.info("Removed %d files from '%s'", len(removed), _format_path(pkg.dst_path))


def main() -> None:
    """Invoke the Cyclopts application that powers the ``pkgdocs`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
