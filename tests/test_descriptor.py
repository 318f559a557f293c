from __future__ import annotations

import typing as typ

import pytest

from pkgdocs.descriptor import parse_descriptor, read_descriptor
from pkgdocs.errors import ConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_parse_descriptor_reads_core_fields(package_files: dict[str, str]) -> None:
    desc = parse_descriptor(package_files["DESCRIPTION"])

    assert desc.package == "demo"
    assert desc.version == "1.2.0"
    assert desc.title == "Tools for Demonstration Plots"
    assert desc.license == "MIT + file LICENSE"
    assert desc.description == (
        "Draws small demonstration plots used to exercise the documentation builder."
    )
    assert desc.authors == ("Ada Lovelace", "Grace Hopper")
    assert desc.github_url == "https://github.com/acme/demo"


def test_plain_author_field_is_split() -> None:
    desc = parse_descriptor(
        "Package: x\nVersion: 0.1\nAuthor: Ada Lovelace [aut], Grace Hopper <g@h.org>\n"
    )

    assert desc.authors == ("Ada Lovelace", "Grace Hopper")


def test_github_url_falls_back_to_bug_reports() -> None:
    desc = parse_descriptor(
        "Package: x\nVersion: 0.1\nURL: https://x.example.org\n"
        "BugReports: https://github.com/acme/x.git/issues\n"
    )

    assert desc.github_url == "https://github.com/acme/x"


@pytest.mark.parametrize(
    "text",
    [
        "Version: 1.0\n",
        "Package: x\n",
        "  indented: first line\n",
        "Package: x\nVersion: 1\nnot a field\n",
    ],
)
def test_invalid_descriptor_raises(text: str) -> None:
    with pytest.raises(ConfigError):
        parse_descriptor(text)


def test_missing_descriptor_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        read_descriptor(tmp_path / "DESCRIPTION")
