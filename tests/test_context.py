from __future__ import annotations

import dataclasses as dc
import typing as typ

import pytest

from pkgdocs.context import discover_vignettes, load_package, read_front_matter
from pkgdocs.errors import ConfigError, PathError

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_load_package_collects_metadata(demo_package: Path) -> None:
    pkg = load_package(demo_package)

    assert pkg.package == "demo"
    assert pkg.version == "1.2.0"
    assert pkg.title == "demo"
    assert pkg.dst_path == demo_package.resolve() / "docs"
    assert [t.name for t in pkg.topics] == ["helper", "plot_bar", "plot_line", "summary"]
    assert pkg.repo_url == "https://github.com/acme/demo"


def test_alias_index_maps_every_alias_to_its_topic(demo_package: Path) -> None:
    pkg = load_package(demo_package)

    assert pkg.topic_index["bar_chart"] == "plot_bar"
    assert pkg.topic_href("bar_chart") == "plot_bar.html"
    assert pkg.topic_href("nope") is None


def test_vignette_depth_follows_directory_nesting(demo_package: Path) -> None:
    pkg = load_package(demo_package)
    by_name = {v.name: v for v in pkg.vignettes}

    assert [v.name for v in pkg.vignettes] == ["advanced/tuning", "intro"]
    assert by_name["intro"].depth == 0
    assert by_name["advanced/tuning"].depth == 1
    assert by_name["advanced/tuning"].file_out == "advanced/tuning.html"
    assert by_name["intro"].title == "Getting started"
    assert pkg.article_index == {
        "advanced/tuning": "advanced/tuning.html",
        "intro": "intro.html",
    }


def test_context_is_read_only(demo_package: Path) -> None:
    pkg = load_package(demo_package)

    with pytest.raises(dc.FrozenInstanceError):
        pkg.package = "other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        pkg.topic_index["new"] = "x"  # type: ignore[index]


def test_default_navbar_is_derived_from_content(demo_package: Path) -> None:
    pkg = load_package(demo_package)

    texts = [item.text for item in pkg.navbar.left or ()]
    assert texts == ["Reference", "Articles", "Changelog"]
    menu = (pkg.navbar.left or ())[1].menu
    assert [item.href for item in menu] == [
        "articles/advanced/tuning.html",
        "articles/intro.html",
    ]


def test_destination_override_and_config(demo_package: Path) -> None:
    (demo_package / "_pkgdocs.yml").write_text(
        "destination: public\ntitle: Demo\n", encoding="utf-8"
    )

    assert load_package(demo_package).dst_path.name == "public"
    assert load_package(demo_package).title == "Demo"
    override = demo_package / "elsewhere"
    assert load_package(demo_package, destination=override).dst_path == override


def test_hidden_and_underscore_vignette_dirs_are_skipped(
    tmp_path: Path, tree_writer: typ.Callable[..., Path]
) -> None:
    tree_writer(
        tmp_path,
        {
            "vignettes/a.Rmd": "# A\n",
            "vignettes/_drafts/b.Rmd": "# B\n",
            "vignettes/.cache/c.md": "# C\n",
            "vignettes/data.csv": "x,y\n",
        },
    )

    assert [v.name for v in discover_vignettes(tmp_path)] == ["a"]


def test_colliding_vignette_outputs_raise(
    tmp_path: Path, tree_writer: typ.Callable[..., Path]
) -> None:
    tree_writer(tmp_path, {"vignettes/a.Rmd": "# A\n", "vignettes/a.md": "# A\n"})

    with pytest.raises(ConfigError, match="both render"):
        discover_vignettes(tmp_path)


def test_duplicate_topic_names_raise(demo_package: Path) -> None:
    (demo_package / "man" / "copy.Rd").write_text(
        "\\name{summary}\\title{Again}\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError, match="defined in both"):
        load_package(demo_package)


def test_undecodable_sources_raise_config_error(demo_package: Path) -> None:
    (demo_package / "vignettes" / "latin1.Rmd").write_bytes(b"# Caf\xe9\n")

    with pytest.raises(ConfigError, match="latin1.Rmd"):
        load_package(demo_package)

    (demo_package / "vignettes" / "latin1.Rmd").unlink()
    (demo_package / "man" / "latin1.Rd").write_bytes(b"\\name{caf\xe9}\n")

    with pytest.raises(ConfigError, match="latin1.Rd"):
        load_package(demo_package)


def test_missing_package_path_raises(tmp_path: Path) -> None:
    with pytest.raises(PathError):
        load_package(tmp_path / "absent")


def test_read_front_matter() -> None:
    assert read_front_matter("---\ntitle: Hi\n---\nbody\n") == {"title": "Hi"}
    assert read_front_matter("no front matter") == {}
    assert read_front_matter("---\ntitle: [unclosed\n---\n") == {}
