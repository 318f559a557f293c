from __future__ import annotations

import pytest

from pkgdocs.errors import ConfigError
from pkgdocs.selector import (
    Candidate,
    Contains,
    EndsWith,
    ExactName,
    Matches,
    StartsWith,
    matches,
    parse_match_expression,
    select,
)

CANDIDATES = [
    Candidate("plot_bar", ("plot_bar", "bar_chart")),
    Candidate("plot_line"),
    Candidate("summary"),
    Candidate("helper", internal=True),
]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plot_bar", ExactName("plot_bar")),
        ("`[.demo`", ExactName("[.demo")),
        ('starts_with("plot_")', StartsWith("plot_")),
        ("ends_with('_line')", EndsWith("_line")),
        ('contains( "mar" )', Contains("mar")),
        ('matches("^plot_(bar|line)$")', Matches("^plot_(bar|line)$")),
        ({"starts_with": "plot_"}, StartsWith("plot_")),
        (2024, ExactName("2024")),
    ],
)
def test_parse_match_expression(value: object, expected: object) -> None:
    assert parse_match_expression(value) == expected


@pytest.mark.parametrize(
    "value",
    ['everything("x")', "", "   ", 'matches("(unclosed")', ["plot_bar"], None],
)
def test_parse_match_expression_rejects_invalid_values(value: object) -> None:
    with pytest.raises(ConfigError):
        parse_match_expression(value)


def test_expressions_render_back_to_config_syntax() -> None:
    assert str(StartsWith("plot_")) == 'starts_with("plot_")'
    assert str(ExactName("summary")) == "summary"


@pytest.mark.parametrize(
    ("expression", "value", "expected"),
    [
        (ExactName("summary"), "summary", True),
        (ExactName("summary"), "summary2", False),
        (StartsWith("plot_"), "plot_bar", True),
        (EndsWith("_bar"), "plot_bar", True),
        (Contains("ot_l"), "plot_line", True),
        (Contains("xyz"), "plot_line", False),
        (Matches("^plot_[a-z]+$"), "plot_bar", True),
        (Matches("bar"), "plot_bar", True),
    ],
)
def test_matches(expression: object, value: str, *, expected: bool) -> None:
    assert matches(expression, value) is expected  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "expression",
    [StartsWith("plot_"), EndsWith("e"), Contains("a"), ExactName("summary")],
)
def test_select_returns_exactly_the_satisfying_candidates(expression: object) -> None:
    visible = [c for c in CANDIDATES if not c.internal]
    expected = [
        index
        for index, candidate in enumerate(CANDIDATES)
        if not candidate.internal
        and any(matches(expression, name) for name in candidate.lookup_names)  # type: ignore[arg-type]
    ]
    result = select([expression], CANDIDATES)  # type: ignore[list-item]
    assert result.matched_indices == expected
    assert all(CANDIDATES[i] in visible for i in result.matched_indices)


def test_select_matches_aliases() -> None:
    result = select([ExactName("bar_chart")], CANDIDATES)
    assert result.matched_indices == [0]


def test_select_keeps_first_match_order_and_deduplicates() -> None:
    result = select([ExactName("summary"), StartsWith("plot_"), Contains("bar")], CANDIDATES)
    assert result.matched_indices == [2, 0, 1]
    assert result.unmatched_expressions == []


def test_select_reports_unmatched_expressions() -> None:
    result = select([StartsWith("map_"), ExactName("summary")], CANDIDATES)
    assert result.matched_indices == [2]
    assert result.unmatched_expressions == [StartsWith("map_")]


def test_select_skips_internal_candidates_unless_requested() -> None:
    assert select([ExactName("helper")], CANDIDATES).matched_indices == []
    included = select([ExactName("helper")], CANDIDATES, include_internal=True)
    assert included.matched_indices == [3]
