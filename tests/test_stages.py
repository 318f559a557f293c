from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from pkgdocs.articles import (
    build_articles,
    build_articles_index,
    copy_vignette_resources,
    default_articles_index,
)
from pkgdocs.context import load_package
from pkgdocs.errors import IndexCompletenessError, RenderError
from pkgdocs.home import autolink_license, build_home, data_home_sidebar
from pkgdocs.news import build_news, link_github, parse_news
from pkgdocs.reference import build_reference
from pkgdocs.render import PageRenderer
from pkgdocs.selector import ExactName

if typ.TYPE_CHECKING:
    from pathlib import Path


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


class TestArticles:
    def test_default_index_lists_all_vignettes_in_discovery_order(
        self, demo_package: Path
    ) -> None:
        pkg = load_package(demo_package)

        (section,) = default_articles_index(pkg)

        assert section.title == "All vignettes"
        assert section.contents == tuple(ExactName(v.name) for v in pkg.vignettes)

    def test_index_page_links_every_vignette(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        path, index = build_articles_index(pkg, PageRenderer(pkg))

        assert path == pkg.dst_path / "articles" / "index.html"
        soup = _soup(path)
        links = {a.get_text(): a["href"] for a in soup.select("ul.articles a")}
        assert links == {
            "Tuning plots": "advanced/tuning.html",
            "Getting started": "intro.html",
        }
        assert [h.get_text() for h in soup.select(".section h2")] == ["All vignettes"]
        assert index.warnings == []

    def test_unlisted_vignette_warns_without_failing(self, demo_package: Path) -> None:
        (demo_package / "_pkgdocs.yml").write_text(
            "articles:\n  - title: Basics\n    contents: [intro]\n", encoding="utf-8"
        )
        pkg = load_package(demo_package)

        result = build_articles(pkg)

        messages = [str(w) for w in result.warnings]
        assert messages == ["Vignettes missing from index: advanced/tuning"]
        assert (pkg.dst_path / "articles" / "advanced" / "tuning.html").is_file()

    def test_strict_mode_fails_on_unlisted_vignette(self, demo_package: Path) -> None:
        (demo_package / "_pkgdocs.yml").write_text(
            "strict: true\narticles:\n  - title: Basics\n    contents: [intro]\n",
            encoding="utf-8",
        )
        pkg = load_package(demo_package)

        with pytest.raises(IndexCompletenessError) as excinfo:
            build_articles(pkg)

        assert excinfo.value.names == ["advanced/tuning"]
        assert build_articles(pkg, strict=False).warnings

    def test_nested_article_links_use_depth_prefix(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        build_articles(pkg)

        intro = _soup(pkg.dst_path / "articles" / "intro.html")
        tuning = _soup(pkg.dst_path / "articles" / "advanced" / "tuning.html")
        assert intro.select_one("link[rel=stylesheet]")["href"] == "../pkgdocs.css"
        assert tuning.select_one("link[rel=stylesheet]")["href"] == "../../pkgdocs.css"
        intro_links = [a["href"] for a in intro.select(".contents a")]
        assert "advanced/tuning.html" in intro_links
        assert "../reference/plot_bar.html" in intro_links

    def test_resources_are_copied_next_to_articles(self, demo_package: Path) -> None:
        (demo_package / "vignettes" / "img").mkdir()
        (demo_package / "vignettes" / "img" / "plot.png").write_bytes(b"\x89PNG")
        (demo_package / "vignettes" / "rsconnect").mkdir()
        (demo_package / "vignettes" / "rsconnect" / "deploy.dcf").write_text("x")
        (demo_package / "vignettes" / "_drafts").mkdir()
        (demo_package / "vignettes" / "_drafts" / "sketch.png").write_bytes(b"\x89PNG")
        (demo_package / "vignettes" / ".cache").mkdir()
        (demo_package / "vignettes" / ".cache" / "chunk.rds").write_bytes(b"RDX")
        (demo_package / "vignettes" / "img" / ".DS_Store").write_bytes(b"\0")
        pkg = load_package(demo_package)

        copied = copy_vignette_resources(pkg)

        assert copied == [pkg.dst_path / "articles" / "img" / "plot.png"]

    def test_no_vignettes_skips_stage(self, demo_package: Path) -> None:
        for path in (demo_package / "vignettes").rglob("*.Rmd"):
            path.unlink()
        pkg = load_package(demo_package)

        result = build_articles(pkg)

        assert result.skipped
        assert not (pkg.dst_path / "articles").exists()


class TestReference:
    def test_topic_pages_and_index(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        result = build_reference(pkg)

        names = sorted(p.name for p in result.written)
        assert names == [
            "helper.html",
            "index.html",
            "plot_bar.html",
            "plot_line.html",
            "summary.html",
        ]
        index = _soup(pkg.dst_path / "reference" / "index.html")
        listed = [a.get_text() for a in index.select("table.ref-index a")]
        assert listed == ["plot_bar", "plot_line", "summary"]
        assert result.warnings == []

    def test_topic_page_resolves_links_through_aliases(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        build_reference(pkg)

        page = _soup(pkg.dst_path / "reference" / "plot_bar.html")
        assert page.select_one(".page-header h1").get_text() == "Draw a bar plot"
        args = page.select("table.ref-arguments th")
        assert [th.get_text() for th in args] == ["x", "horizontal"]
        link = page.select_one("table.ref-arguments a")
        assert link["href"] == "plot_line.html"
        assert page.select_one("#examples + div.codehilite") is not None
        assert "plot_bar(big_data)" in page.get_text()

    def test_prefix_section_reports_unlisted_topic(self, demo_package: Path) -> None:
        (demo_package / "_pkgdocs.yml").write_text(
            "reference:\n  - title: Plotting\n    contents:\n"
            '      - starts_with("plot_")\n',
            encoding="utf-8",
        )
        pkg = load_package(demo_package)

        result = build_reference(pkg)

        index = _soup(pkg.dst_path / "reference" / "index.html")
        assert [a.get_text() for a in index.select("table.ref-index a")] == [
            "plot_bar",
            "plot_line",
        ]
        assert [str(w) for w in result.warnings] == ["Topics missing from index: summary"]


class TestHome:
    def test_home_page_uses_readme_and_sidebar(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        result = build_home(pkg)

        assert [p.name for p in result.written] == ["index.html", "LICENSE.html"]
        home = _soup(pkg.dst_path / "index.html")
        assert "Demonstration plots for everyone." in home.get_text()
        assert [li.get_text() for li in home.select("ul.authors li")] == [
            "Ada Lovelace",
            "Grace Hopper",
        ]
        license_links = [a["href"] for a in home.select("p.license a")]
        assert license_links == [
            "https://opensource.org/licenses/mit-license.php",
            "LICENSE.html",
        ]

    def test_plain_license_is_escaped_in_pre(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        build_home(pkg)

        page = (pkg.dst_path / "LICENSE.html").read_text(encoding="utf-8")
        assert "<pre>YEAR: 2024\nCOPYRIGHT HOLDER: Ada &lt;ada@example.com&gt;\n</pre>" in page

    def test_undecodable_license_raises_render_error(self, demo_package: Path) -> None:
        (demo_package / "LICENSE").write_bytes(b"COPYRIGHT HOLDER: Jos\xe9\n")
        pkg = load_package(demo_package)

        with pytest.raises(RenderError, match="LICENSE"):
            build_home(pkg)

    def test_author_overrides(self, demo_package: Path) -> None:
        (demo_package / "_pkgdocs.yml").write_text(
            "authors:\n  Ada Lovelace:\n    href: https://ada.example.org\n",
            encoding="utf-8",
        )
        pkg = load_package(demo_package)

        sidebar = data_home_sidebar(pkg)

        assert str(sidebar["authors"][0]) == (
            "<a href='https://ada.example.org'>Ada Lovelace</a>"
        )
        assert [link["text"] for link in sidebar["links"]] == [
            "Browse source code",
            "Report a bug",
        ]

    def test_autolink_license_escapes_text(self) -> None:
        assert autolink_license("GPL-2 | <custom>") == (
            "<a href='https://www.r-project.org/Licenses/GPL-2'>GPL-2</a> | &lt;custom&gt;"
        )


class TestNews:
    def test_parse_news_splits_on_level_one_headings(self) -> None:
        text = "Intro text\n\n# demo 1.1.0.9000\n\n## Sub\n\n* a\n\n# demo (development version)\n"

        entries = parse_news(text, package="demo")

        assert [e.version for e in entries] == ["1.1.0.9000", "unreleased"]
        assert entries[0].heading == "demo 1.1.0.9000"
        assert "<h2" in entries[0].html
        assert entries[0].bullets == ("a",)
        assert entries[0].anchor == "demo-1-1-0-9000"

    def test_parse_news_ignores_headings_inside_code_fences(self) -> None:
        text = (
            "# demo 1.0.0\n\n"
            "* Faster `plot_bar()`.\n\n"
            "```r\n"
            "# set up the data\n"
            "x <- 1:3\n"
            "```\n\n"
            "# demo 0.9.0\n\n"
            "* First release.\n"
        )

        entries = parse_news(text, package="demo")

        assert [e.version for e in entries] == ["1.0.0", "0.9.0"]
        assert "set up the data" in entries[0].html

    def test_parse_news_collects_top_level_bullets(self) -> None:
        text = (
            "# demo 1.0.0\n\n"
            "* `plot_bar()` gained\n"
            "  a `horizontal` argument ([#12](https://example.org/12)).\n"
            "    * nested detail\n"
            "- Docs were **rewritten**.\n"
        )

        (entry,) = parse_news(text, package="demo")

        assert entry.bullets == (
            "plot_bar() gained a horizontal argument (#12).",
            "Docs were rewritten.",
        )

    def test_parse_news_makes_repeated_anchors_unique(self) -> None:
        text = "# demo (dev)\n\n# demo 1.0\n\n# demo (old dev)\n\n# demo 1.0\n"

        anchors = [e.anchor for e in parse_news(text, package="demo")]

        assert anchors == [
            "demo-unreleased",
            "demo-1-0",
            "demo-unreleased-1",
            "demo-1-0-1",
        ]

    def test_link_github_needs_repo_url(self) -> None:
        assert link_github("@ada #1", None) == "@ada #1"
        linked = link_github("Thanks @ada (#12); mail ada@example.org", "https://github.com/acme/demo")
        assert "[@ada](https://github.com/ada)" in linked
        assert "[#12](https://github.com/acme/demo/issues/12)" in linked
        assert "ada@example.org" in linked
        assert "[@example" not in linked

    def test_news_page(self, demo_package: Path) -> None:
        pkg = load_package(demo_package)

        result = build_news(pkg)

        (path,) = result.written
        soup = _soup(path)
        assert [h.get_text() for h in soup.select(".section h2")] == [
            "demo 1.2.0",
            "demo 1.1.0",
        ]
        hrefs = [a["href"] for a in soup.select(".section a")]
        assert "https://github.com/ada" in hrefs
        assert "https://github.com/acme/demo/issues/12" in hrefs
        assert "../reference/plot_bar.html" in hrefs

    def test_missing_news_skips_stage(self, demo_package: Path) -> None:
        (demo_package / "NEWS.md").unlink()

        assert build_news(load_package(demo_package)).skipped
