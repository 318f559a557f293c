"""Build orchestration: run every stage and record the generated files.

:func:`build_site` loads the package once, runs ``init``, ``home``,
``reference``, ``articles`` and ``news`` against the same read-only
:class:`~pkgdocs.context.PackageContext`, and finally writes the
``pkgdocs.yml`` manifest listing every generated file. Files the previous
manifest lists but this build did not produce are deleted first.

Example
-------
>>> from pkgdocs.site import build_site
>>> result = build_site("path/to/package")  # doctest: +SKIP
>>> result.manifest_path  # doctest: +SKIP
PosixPath('path/to/package/docs/pkgdocs.yml')
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ
import webbrowser
from importlib import resources
from pathlib import Path

from ._constants import EXTRAS_DIR, MANIFEST_FILENAME
from .articles import build_articles
from .clean import remove_listed
from .context import PackageContext, load_package
from .errors import PathError
from .home import build_home
from .manifest import build_manifest, read_manifest, write_manifest
from .news import build_news
from .reference import build_reference
from .render import PageRenderer
from .stage import StageResult, finish_stage, rule

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

BUILTIN_ASSETS = Path(__file__).resolve().parent / "assets"
EXTRA_PATTERN = "extra*"


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a full build, owned by the orchestrator."""

    context: PackageContext
    stages: list[StageResult] = dc.field(default_factory=list)
    manifest_path: Path | None = None

    @property
    def written(self) -> list[Path]:
        """Return every file written by the stages, in stage order."""
        return [path for stage in self.stages for path in stage.written]

    @property
    def warnings(self) -> list[Warning]:
        """Return every warning collected by the stages."""
        return [warning for stage in self.stages for warning in stage.warnings]


def _copy_tree(src: Path, dst: Path) -> list[Path]:
    copied: list[Path] = []
    for path in sorted(src.rglob("*")):
        if not path.is_file():
            continue
        target = dst / path.relative_to(src)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, target)
        copied.append(target)
    return copied


def _package_assets(package: str) -> Path | None:
    try:
        root = resources.files(package) / "assets"
    except ModuleNotFoundError:
        return None
    path = Path(str(root))
    return path if path.is_dir() else None


def init_site(pkg: PackageContext) -> StageResult:
    """Create the destination and copy assets and extras into it.

    Assets come from the built-in set (unless ``template.default_assets`` is
    false), the ``assets`` directory of ``template.package`` and the
    ``template.assets`` directory, in that order so later sources win.

    Raises
    ------
    PathError
        If ``template.assets`` names a directory that does not exist.
    """
    result = StageResult("init")
    rule("Initialising site")
    pkg.dst_path.mkdir(parents=True, exist_ok=True)
    template = pkg.config.template

    sources: list[Path] = []
    if template.default_assets:
        sources.append(BUILTIN_ASSETS)
    if template.package:
        package_assets = _package_assets(template.package)
        if package_assets is not None:
            sources.append(package_assets)
    if template.assets:
        assets = pkg.src_path / template.assets
        if not assets.is_dir():
            msg = f"Can not find asset path '{assets}'."
            raise PathError(msg)
        sources.append(assets)

    copied: dict[Path, None] = {}
    for source in sources:
        logger.info("Copying assets from '%s'", source)
        copied.update(dict.fromkeys(_copy_tree(source, pkg.dst_path)))

    for extra in sorted((pkg.src_path / EXTRAS_DIR).glob(EXTRA_PATTERN)):
        if extra.is_file():
            logger.info("Copying '%s/%s'", EXTRAS_DIR, extra.name)
            target = pkg.dst_path / extra.name
            shutil.copyfile(extra, target)
            copied[target] = None

    result.written.extend(copied)
    return finish_stage(result)


def _relative_files(result: BuildResult) -> list[str]:
    root = result.context.dst_path
    return [path for stage in result.stages for path in stage.relative_paths(root)]


def prune_orphans(dst_path: Path, current: cabc.Iterable[str]) -> list[Path]:
    """Delete files the previous build generated that this build did not.

    The previous build is read from the manifest still on disk, so this must
    run before the new manifest is written. Without a usable manifest nothing
    is removed.
    """
    previous = read_manifest(dst_path)
    if previous is None:
        return []
    keep = {*current, MANIFEST_FILENAME}
    orphans = [entry for entry in previous.files if entry not in keep]
    if orphans:
        logger.info("Removing %d orphaned files", len(orphans))
    return remove_listed(dst_path.resolve(), orphans)


def preview_site(pkg: PackageContext) -> None:
    """Open the built home page in the default web browser."""
    index = pkg.dst_path / "index.html"
    logger.info("Previewing site at '%s'", index)
    webbrowser.open(index.as_uri())


def build_site(
    src_path: Path | str,
    *,
    destination: Path | str | None = None,
    preview: bool = False,
    strict: bool | None = None,
) -> BuildResult:
    """Build the complete site for the package at ``src_path``.

    Parameters
    ----------
    src_path : Path or str
        Package root.
    destination : Path or str, optional
        Output directory overriding the configured ``destination``.
    preview : bool, optional
        Open ``index.html`` in a browser once the build finishes.
    strict : bool, optional
        Fail when topics or vignettes are missing from their index. Defaults
        to the ``strict`` configuration setting.

    Returns
    -------
    BuildResult
        Per-stage outputs and the manifest location.

    Raises
    ------
    PkgdocsError
        Any fatal error raised by a stage, unchanged, after logging which
        stage failed. Files written before the failure are left in place.
    """
    pkg = load_package(src_path, destination=destination)
    logger.info("Building pkgdocs site for package '%s'", pkg.package)
    logger.info("Reading from: '%s'", pkg.src_path)
    logger.info("Writing to:   '%s'", pkg.dst_path)

    result = BuildResult(context=pkg)
    renderer = PageRenderer(pkg)
    stages: list[tuple[str, typ.Callable[[], StageResult]]] = [
        ("init", lambda: init_site(pkg)),
        ("home", lambda: build_home(pkg, renderer=renderer)),
        ("reference", lambda: build_reference(pkg, renderer=renderer, strict=strict)),
        ("articles", lambda: build_articles(pkg, renderer=renderer, strict=strict)),
        ("news", lambda: build_news(pkg, renderer=renderer)),
    ]
    for name, stage in stages:
        try:
            result.stages.append(stage())
        except Exception:
            logger.error("Build failed during the '%s' stage", name)  # noqa: TRY400
            raise

    rule("Finalising site")
    files = _relative_files(result)
    prune_orphans(pkg.dst_path, files)
    manifest = build_manifest(
        pkg,
        converter_version=renderer.converter.version,
        files=files,
    )
    result.manifest_path = write_manifest(pkg.dst_path, manifest)
    logger.info("Writing '%s'", result.manifest_path.name)

    if preview:
        preview_site(pkg)
    return result


__all__ = ["BuildResult", "build_site", "init_site", "preview_site", "prune_orphans"]
