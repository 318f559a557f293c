from __future__ import annotations

import io
import logging
import typing as typ

import pytest
from rich.console import Console

from pkgdocs import cli
from pkgdocs.logging_utils import setup_logging

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_build_command_writes_site(demo_package: Path) -> None:
    cli.build(path=demo_package, quiet=True)

    docs = demo_package / "docs"
    assert (docs / "index.html").is_file()
    assert (docs / "pkgdocs.yml").is_file()


def test_invalid_configuration_exits_with_status_one(
    demo_package: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (demo_package / "_pkgdocs.yml").write_text("strict: maybe\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.app(["build", "--path", str(demo_package)])

    assert excinfo.value.code == 1
    assert "'strict' must be true or false." in capsys.readouterr().err


def test_strict_flag_turns_missing_vignettes_into_failure(demo_package: Path) -> None:
    (demo_package / "_pkgdocs.yml").write_text(
        "articles:\n  - title: Basics\n    contents: [intro]\n", encoding="utf-8"
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.articles(path=demo_package, quiet=True, strict=True)

    assert excinfo.value.code == 1
    assert not (demo_package / "docs" / "articles" / "index.html").exists()


def test_single_stage_command_only_writes_its_pages(demo_package: Path) -> None:
    cli.reference(path=demo_package, quiet=True)

    docs = demo_package / "docs"
    assert (docs / "reference" / "index.html").is_file()
    assert not (docs / "index.html").exists()


def test_clean_command_removes_generated_files_only(demo_package: Path) -> None:
    cli.build(path=demo_package, quiet=True)
    docs = demo_package / "docs"
    (docs / "CNAME").write_text("docs.example.org\n", encoding="utf-8")

    cli.clean(path=demo_package, quiet=True)

    assert sorted(p.name for p in docs.rglob("*") if p.is_file()) == ["CNAME"]


def test_setup_logging_quiet_hides_progress() -> None:
    stream = io.StringIO()
    logger = setup_logging(quiet=True, console=Console(file=stream, width=200))

    logging.getLogger("pkgdocs.site").info("Copying assets")
    logging.getLogger("pkgdocs.reference").warning("Topics missing from index: x")

    assert logger.propagate is False
    assert "Copying assets" not in stream.getvalue()
    assert "Topics missing from index: x" in stream.getvalue()
