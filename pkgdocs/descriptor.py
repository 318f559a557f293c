r"""Read the package ``DESCRIPTION`` file.

The descriptor uses the Debian control file layout: ``Key: value`` lines, with
continuation lines indented by whitespace. Only the fields the site needs are
interpreted; everything else is kept verbatim in :attr:`Descriptor.fields`.

Example
-------
>>> desc = parse_descriptor("Package: demo\nVersion: 1.0.0\nLicense: MIT\n")
>>> (desc.package, desc.version, desc.license)
('demo', '1.0.0', 'MIT')
"""

from __future__ import annotations

import dataclasses as dc
import re
from pathlib import Path

from .errors import ConfigError

FIELD_PATTERN = re.compile(r"^([A-Za-z0-9@._/-]+):[ \t]*(.*)$")
PERSON_PATTERN = re.compile(
    r"person\(\s*(?:given\s*=\s*)?\"([^\"]*)\""
    r"(?:\s*,\s*(?:family\s*=\s*)?\"([^\"]*)\")?"
)
GITHUB_PATTERN = re.compile(r"https?://(?:www\.)?github\.com/([^/\s,]+)/([^/\s,#]+)")


@dc.dataclass(frozen=True, slots=True)
class Descriptor:
    """Parsed package descriptor.

    Attributes
    ----------
    package : str
        Package name.
    version : str
        Package version string.
    title : str
        One-line title, empty when absent.
    description : str
        Paragraph description, empty when absent.
    license : str
        License field, empty when absent.
    authors : tuple[str, ...]
        Author display names in declaration order.
    fields : dict[str, str]
        Every raw field keyed by name.
    """

    package: str
    version: str
    title: str = ""
    description: str = ""
    license: str = ""
    authors: tuple[str, ...] = ()
    fields: dict[str, str] = dc.field(default_factory=dict)

    @property
    def github_url(self) -> str | None:
        """Return the GitHub repository URL found in ``URL`` or ``BugReports``."""
        for key in ("URL", "BugReports"):
            match = GITHUB_PATTERN.search(self.fields.get(key, ""))
            if match:
                repo = match.group(2).removesuffix(".git")
                return f"https://github.com/{match.group(1)}/{repo}"
        return None


def _split_fields(text: str, source: str) -> dict[str, str]:
    """Split DCF text into a mapping, joining continuation lines with spaces."""
    fields: dict[str, str] = {}
    current: str | None = None
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        if line[0] in " \t":
            if current is None:
                msg = f"{source}:{lineno}: continuation line without a field."
                raise ConfigError(msg)
            fields[current] = f"{fields[current]} {line.strip()}".strip()
            continue
        match = FIELD_PATTERN.match(line)
        if not match:
            msg = f"{source}:{lineno}: expected 'Field: value', got {line!r}."
            raise ConfigError(msg)
        current = match.group(1)
        fields[current] = match.group(2).strip()
    return fields


def _parse_authors(fields: dict[str, str]) -> tuple[str, ...]:
    """Return author names from ``Authors@R`` or the plain ``Author`` field."""
    authors_r = fields.get("Authors@R")
    if authors_r:
        names = []
        for given, family in PERSON_PATTERN.findall(authors_r):
            name = " ".join(part for part in (given, family) if part)
            if name:
                names.append(name)
        if names:
            return tuple(names)
    author = fields.get("Author", "")
    if not author:
        return ()
    cleaned = re.sub(r"\[[^\]]*\]|<[^>]*>|\([^)]*\)", "", author)
    parts = re.split(r",|\band\b", cleaned)
    return tuple(part.strip() for part in parts if part.strip())


def parse_descriptor(text: str, *, source: str = "DESCRIPTION") -> Descriptor:
    """Parse descriptor ``text``.

    Raises
    ------
    ConfigError
        If the text is not valid DCF or lacks ``Package``/``Version``.
    """
    fields = _split_fields(text, source)
    for required in ("Package", "Version"):
        if not fields.get(required):
            msg = f"{source} is missing the required '{required}' field."
            raise ConfigError(msg)
    return Descriptor(
        package=fields["Package"],
        version=fields["Version"],
        title=fields.get("Title", ""),
        description=fields.get("Description", ""),
        license=fields.get("License", ""),
        authors=_parse_authors(fields),
        fields=fields,
    )


def read_descriptor(path: Path) -> Descriptor:
    """Read and parse the descriptor at ``path``.

    Raises
    ------
    ConfigError
        If the file is absent, unreadable or unparseable.
    """
    if not path.is_file():
        msg = f"Package descriptor '{path}' not found."
        raise ConfigError(msg)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Could not read package descriptor '{path}': {exc}"
        raise ConfigError(msg) from exc
    return parse_descriptor(text, source=str(path))


__all__ = ["Descriptor", "parse_descriptor", "read_descriptor"]
