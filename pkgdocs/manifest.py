"""Read and write the ``pkgdocs.yml`` site manifest.

The manifest is written at the end of every full build. Besides the versions
of the tools that produced the site and the article name → path mapping, it
lists every file the build generated so that cleanup can remove exactly those
files and nothing a user added by hand.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
import typing as typ
from importlib import metadata
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import MANIFEST_FILENAME, SHA_ENV_VAR

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .context import PackageContext


@dc.dataclass(slots=True)
class SiteManifest:
    """Persisted record of one build.

    Attributes
    ----------
    converter : str
        Version string of the markdown converter.
    tool : str
        pkgdocs version.
    tool_sha : str or None
        Commit identifier of the pkgdocs build, from ``PKGDOCS_SHA``.
    articles : dict[str, str]
        Vignette name to output path (relative to ``articles/``).
    urls : dict[str, str]
        Absolute ``reference`` and ``article`` bases when a site URL is set.
    files : list[str]
        Every generated file, relative to the destination, sorted.
    last_built : str or None
        UTC timestamp of the build in ISO 8601 form.
    """

    converter: str
    tool: str
    tool_sha: str | None = None
    articles: dict[str, str] = dc.field(default_factory=dict)
    urls: dict[str, str] = dc.field(default_factory=dict)
    files: list[str] = dc.field(default_factory=list)
    last_built: str | None = None

    def to_mapping(self) -> dict[str, typ.Any]:
        """Return the YAML document written to disk."""
        document: dict[str, typ.Any] = {
            "converter": self.converter,
            "pkgdocs": self.tool,
            "pkgdocs_sha": self.tool_sha,
            "articles": dict(self.articles),
        }
        if self.urls:
            document["urls"] = dict(self.urls)
        document["files"] = list(self.files)
        document["last_built"] = self.last_built
        return document

    @classmethod
    def from_mapping(cls, data: cabc.Mapping[str, typ.Any]) -> SiteManifest:
        """Build a manifest from a loaded YAML mapping."""
        files = data.get("files") or []
        last_built = data.get("last_built")
        if isinstance(last_built, dt.datetime):
            last_built = last_built.isoformat()
        return cls(
            converter=str(data.get("converter") or ""),
            tool=str(data.get("pkgdocs") or ""),
            tool_sha=data.get("pkgdocs_sha"),
            articles={str(k): str(v) for k, v in (data.get("articles") or {}).items()},
            urls={str(k): str(v) for k, v in (data.get("urls") or {}).items()},
            files=[str(item) for item in files if isinstance(item, str)],
            last_built=last_built,
        )


def tool_version() -> str:
    """Return the installed pkgdocs version, or ``"unknown"``."""
    try:
        return metadata.version("pkgdocs")
    except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
        return "unknown"


def build_manifest(
    pkg: PackageContext,
    *,
    converter_version: str,
    files: cabc.Iterable[str],
    now: dt.datetime | None = None,
) -> SiteManifest:
    """Assemble the manifest for a finished build of ``pkg``."""
    urls: dict[str, str] = {}
    if pkg.config.url:
        urls = {
            "reference": f"{pkg.config.url}/reference",
            "article": f"{pkg.config.url}/articles",
        }
    timestamp = (now or dt.datetime.now(dt.UTC)).replace(microsecond=0)
    return SiteManifest(
        converter=converter_version,
        tool=tool_version(),
        tool_sha=os.getenv(SHA_ENV_VAR) or None,
        articles=dict(pkg.article_index),
        urls=urls,
        files=sorted(set(files) | {MANIFEST_FILENAME}),
        last_built=timestamp.isoformat(),
    )


def _build_yaml() -> YAML:
    yaml = YAML()
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def write_manifest(dst_path: Path, manifest: SiteManifest) -> Path:
    """Write ``manifest`` to ``<dst_path>/pkgdocs.yml`` and return its path."""
    path = dst_path / MANIFEST_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        _build_yaml().dump(manifest.to_mapping(), handle)
    return path


def read_manifest(dst_path: Path) -> SiteManifest | None:
    """Return the manifest stored below ``dst_path``, or ``None`` if unusable."""
    path = dst_path / MANIFEST_FILENAME
    if not path.is_file():
        return None
    loader = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = loader.load(handle)
    except (OSError, UnicodeDecodeError, YAMLError):
        return None
    if not isinstance(data, dict):
        return None
    return SiteManifest.from_mapping(data)


__all__ = [
    "SiteManifest",
    "build_manifest",
    "read_manifest",
    "tool_version",
    "write_manifest",
]
