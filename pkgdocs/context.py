"""Scan a package source tree into an immutable :class:`PackageContext`.

The context is built once at the start of a build and handed, read-only, to
every stage. It holds the descriptor metadata, the discovered topics and
vignettes, the merged site configuration and the resolved navbar.

Example
-------
>>> from pathlib import Path
>>> from pkgdocs.context import load_package
>>> pkg = load_package(Path("tests/fixtures/demo"))  # doctest: +SKIP
>>> [v.name for v in pkg.vignettes]  # doctest: +SKIP
['advanced/tuning', 'intro']
"""

from __future__ import annotations

import dataclasses as dc
import re
import types
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import (
    CONFIG_FILENAME,
    DESCRIPTION_FILENAME,
    NEWS_FILENAME,
    TOPICS_DIR,
    VIGNETTE_SUFFIXES,
    VIGNETTES_DIR,
)
from .config import (
    NavbarConfig,
    SiteConfig,
    complete_navbar,
    default_navbar,
    load_site_config,
)
from .descriptor import Descriptor, read_descriptor
from .errors import ConfigError, PathError
from .rd import RdDocument, parse_rd
from .selector import Candidate

FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)\r?\n(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL
)


@dc.dataclass(frozen=True, slots=True)
class Topic:
    """One documented unit read from an Rd file."""

    name: str
    aliases: tuple[str, ...]
    title: str
    internal: bool
    source_path: Path
    doc: RdDocument

    @property
    def file_out(self) -> str:
        """Return the output file name relative to ``reference/``."""
        return f"{self.name}.html"

    def as_candidate(self) -> Candidate:
        """Return the selector view of this topic."""
        return Candidate(self.name, self.aliases, self.internal)


@dc.dataclass(frozen=True, slots=True)
class Vignette:
    """One article source file below ``vignettes/``.

    Attributes
    ----------
    name : str
        POSIX path relative to ``vignettes/`` without extension.
    title : str
        Title from the YAML front matter, or the name.
    source_path : Path
        Absolute path of the source file.
    file_in : str
        POSIX path relative to ``vignettes/`` including the extension.
    file_out : str
        POSIX output path relative to ``articles/``.
    depth : int
        Directory levels between ``vignettes/`` and the file.
    """

    name: str
    title: str
    source_path: Path
    file_in: str
    file_out: str
    depth: int

    def as_candidate(self) -> Candidate:
        """Return the selector view of this vignette (its name is its alias)."""
        return Candidate(self.name, (self.name,), False)


@dc.dataclass(frozen=True, slots=True)
class PackageContext:
    """Read-only snapshot of everything a build needs to know about a package."""

    src_path: Path
    dst_path: Path
    package: str
    version: str
    license: str
    authors: tuple[str, ...]
    descriptor: Descriptor
    topics: tuple[Topic, ...]
    vignettes: tuple[Vignette, ...]
    config: SiteConfig
    navbar: NavbarConfig
    topic_index: typ.Mapping[str, str] = dc.field(default_factory=dict)
    article_index: typ.Mapping[str, str] = dc.field(default_factory=dict)

    @property
    def title(self) -> str:
        """Return the site title, defaulting to the package name."""
        return self.config.title or self.package

    @property
    def repo_url(self) -> str | None:
        """Return the GitHub URL declared in the descriptor, if any."""
        return self.descriptor.github_url

    @property
    def news_path(self) -> Path:
        return self.src_path / NEWS_FILENAME

    def topic_href(self, alias: str) -> str | None:
        """Return the ``reference/``-relative page for ``alias``, if known."""
        name = self.topic_index.get(alias)
        return f"{name}.html" if name else None


def read_source(path: Path) -> str:
    """Return the UTF-8 text of a package source file.

    Raises
    ------
    ConfigError
        If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Could not read '{path}': {exc}"
        raise ConfigError(msg) from exc


def read_front_matter(text: str) -> dict[str, typ.Any]:
    """Return the YAML front matter of a markdown document, or ``{}``."""
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        return {}
    loader = YAML(typ="safe")
    try:
        data = loader.load(match.group(1))
    except YAMLError:
        return {}
    return dict(data) if isinstance(data, dict) else {}


def strip_front_matter(text: str) -> str:
    """Return ``text`` without a leading YAML front matter block."""
    return FRONT_MATTER_PATTERN.sub("", text, count=1)


def discover_topics(src_path: Path) -> tuple[Topic, ...]:
    """Parse every ``man/*.Rd`` file, sorted by file name.

    Raises
    ------
    ConfigError
        If a file cannot be parsed or two files declare the same name.
    """
    man_dir = src_path / TOPICS_DIR
    if not man_dir.is_dir():
        return ()
    topics: list[Topic] = []
    seen: dict[str, Path] = {}
    for path in sorted(man_dir.glob("*.Rd")):
        doc = parse_rd(read_source(path), source=str(path))
        if doc.name in seen:
            msg = (
                f"Topic '{doc.name}' is defined in both "
                f"'{seen[doc.name]}' and '{path}'."
            )
            raise ConfigError(msg)
        seen[doc.name] = path
        topics.append(
            Topic(
                name=doc.name,
                aliases=doc.aliases,
                title=doc.title,
                internal=doc.internal,
                source_path=path,
                doc=doc,
            )
        )
    return tuple(topics)


def discover_vignettes(src_path: Path) -> tuple[Vignette, ...]:
    """Find vignette sources below ``vignettes/`` at any depth.

    Directories whose name starts with ``_`` or ``.`` are skipped. Results are
    sorted by relative path so discovery order is stable.

    Raises
    ------
    ConfigError
        If two sources would produce the same output file.
    """
    root = src_path / VIGNETTES_DIR
    if not root.is_dir():
        return ()
    vignettes: list[Vignette] = []
    outputs: dict[str, str] = {}
    candidates = sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix in VIGNETTE_SUFFIXES
    )
    for path in candidates:
        relative = path.relative_to(root)
        if any(part.startswith(("_", ".")) for part in relative.parts[:-1]):
            continue
        name = relative.with_suffix("").as_posix()
        file_out = f"{name}.html"
        file_in = relative.as_posix()
        if file_out in outputs:
            msg = (
                f"Vignettes '{outputs[file_out]}' and '{file_in}' both render "
                f"to 'articles/{file_out}'."
            )
            raise ConfigError(msg)
        outputs[file_out] = file_in
        meta = read_front_matter(read_source(path))
        title = str(meta.get("title") or "").strip() or name
        vignettes.append(
            Vignette(
                name=name,
                title=title,
                source_path=path,
                file_in=file_in,
                file_out=file_out,
                depth=len(relative.parts) - 1,
            )
        )
    return tuple(vignettes)


def _resolve_destination(src_path: Path, value: Path | str) -> Path:
    dst = Path(value)
    return dst if dst.is_absolute() else src_path / dst


def load_package(
    src_path: Path | str, *, destination: Path | str | None = None
) -> PackageContext:
    """Build the :class:`PackageContext` for the package at ``src_path``.

    Parameters
    ----------
    src_path : Path or str
        Package root containing ``DESCRIPTION``.
    destination : Path or str, optional
        Output directory overriding the configured ``destination``.

    Returns
    -------
    PackageContext
        Immutable snapshot of the package.

    Raises
    ------
    PathError
        If ``src_path`` does not exist.
    ConfigError
        If the descriptor or site configuration is missing or invalid.
    """
    src = Path(src_path).resolve()
    if not src.is_dir():
        msg = f"Package path '{src_path}' does not exist."
        raise PathError(msg)

    descriptor = read_descriptor(src / DESCRIPTION_FILENAME)
    config = load_site_config(src / CONFIG_FILENAME)
    topics = discover_topics(src)
    vignettes = discover_vignettes(src)

    topic_index: dict[str, str] = {}
    for topic in topics:
        for alias in topic.aliases:
            topic_index.setdefault(alias, topic.name)
    article_index = {vignette.name: vignette.file_out for vignette in vignettes}

    navbar = complete_navbar(
        config.navbar,
        default_navbar(
            vignettes=[(v.title, v.file_out) for v in vignettes],
            has_reference=bool(topics),
            has_news=(src / NEWS_FILENAME).is_file(),
            repo_url=descriptor.github_url,
        ),
    )
    return PackageContext(
        src_path=src,
        dst_path=_resolve_destination(src, destination or config.destination),
        package=descriptor.package,
        version=descriptor.version,
        license=descriptor.license,
        authors=descriptor.authors,
        descriptor=descriptor,
        topics=topics,
        vignettes=vignettes,
        config=config,
        navbar=navbar,
        topic_index=types.MappingProxyType(topic_index),
        article_index=types.MappingProxyType(article_index),
    )


__all__ = [
    "PackageContext",
    "Topic",
    "Vignette",
    "discover_topics",
    "discover_vignettes",
    "load_package",
    "read_front_matter",
    "read_source",
    "strip_front_matter",
]
