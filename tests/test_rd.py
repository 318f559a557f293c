from __future__ import annotations

import pytest

from pkgdocs.errors import ConfigError
from pkgdocs.rd import parse_rd, rd_to_html


def test_parse_rd_extracts_topic_fields(package_files: dict[str, str]) -> None:
    doc = parse_rd(package_files["man/plot_bar.Rd"])

    assert doc.name == "plot_bar"
    assert doc.aliases == ("plot_bar", "bar_chart")
    assert doc.title == "Draw a bar plot"
    assert doc.usage.strip() == "plot_bar(x, horizontal = FALSE)"
    assert [name for name, _ in doc.arguments] == ["x", "horizontal"]
    assert not doc.internal


def test_examples_unwrap_dontrun_blocks(package_files: dict[str, str]) -> None:
    doc = parse_rd(package_files["man/plot_bar.Rd"])

    assert "dontrun" not in doc.examples
    assert "plot_bar(big_data)" in doc.examples
    assert "plot_bar(1:3)" in doc.examples


def test_internal_keyword_marks_topic_internal(package_files: dict[str, str]) -> None:
    assert parse_rd(package_files["man/helper.Rd"]).internal


def test_aliases_default_to_name() -> None:
    doc = parse_rd(r"\name{solo}\title{Alone}")

    assert doc.aliases == ("solo",)


def test_comments_are_ignored() -> None:
    doc = parse_rd("% \\name{wrong}\n\\name{right}\n\\title{50\\% off}\n")

    assert doc.name == "right"
    assert doc.title == "50% off"


@pytest.mark.parametrize("text", [r"\title{No name}", r"\name{open"])
def test_invalid_rd_raises(text: str) -> None:
    with pytest.raises(ConfigError):
        parse_rd(text)


def test_rd_to_html_resolves_links_through_resolver() -> None:
    known = {"plot_line": "plot_line.html"}

    html = rd_to_html(r"See \code{\link{plot_line}} and \link{unknown}.", known.get)

    assert "<a href='plot_line.html'><code>plot_line</code></a>" in html
    assert "<code>unknown</code>" in html
    assert "href='unknown" not in html


def test_rd_to_html_renders_paragraphs_lists_and_markup() -> None:
    html = rd_to_html(
        "First \\emph{para} with <tags>.\n\n"
        "\\itemize{\n\\item one\n\\item \\code{two}\n}\n\n"
        "Visit \\url{https://example.org}."
    )

    assert html.startswith("<p>First <em>para</em> with &lt;tags&gt;.</p>")
    assert "<ul><li>one</li><li><code>two</code></li></ul>" in html
    assert "<a href='https://example.org'>https://example.org</a>" in html


def test_link_options_pick_target_or_leave_label_unlinked() -> None:
    known = {"plot_bar": "plot_bar.html", "median": "median.html"}

    html = rd_to_html(r"Use \link[=plot_bar]{bars}, not \link[stats]{median}.", known.get)

    assert "<a href='plot_bar.html'><code>bars</code></a>" in html
    assert "<code>median</code>" in html
    assert "median.html" not in html
