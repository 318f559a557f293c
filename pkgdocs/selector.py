"""Select named documentation items with a closed set of match expressions.

Index sections in ``_pkgdocs.yml`` list their contents as match expressions:
plain names, ``starts_with("prefix")``, ``ends_with("suffix")``,
``contains("word")`` or ``matches("regexp")``. This module parses those values
into frozen dataclasses and evaluates them with a single interpreter, so the
configuration never executes arbitrary code.

Example
-------
>>> from pkgdocs.selector import Candidate, StartsWith, select
>>> candidates = [Candidate("plot_bar"), Candidate("plot_line"), Candidate("summary")]
>>> select([StartsWith("plot_")], candidates).matched_indices
[0, 1]
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .errors import ConfigError

CALL_PATTERN = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\(\s*(['\"])(.*)\2\s*\)\s*$")


@dc.dataclass(frozen=True, slots=True)
class ExactName:
    """Match a candidate whose name or an alias equals ``name``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dc.dataclass(frozen=True, slots=True)
class StartsWith:
    """Match names or aliases beginning with ``prefix``."""

    prefix: str

    def __str__(self) -> str:
        return f'starts_with("{self.prefix}")'


@dc.dataclass(frozen=True, slots=True)
class EndsWith:
    """Match names or aliases ending with ``suffix``."""

    suffix: str

    def __str__(self) -> str:
        return f'ends_with("{self.suffix}")'


@dc.dataclass(frozen=True, slots=True)
class Contains:
    """Match names or aliases containing ``substring``."""

    substring: str

    def __str__(self) -> str:
        return f'contains("{self.substring}")'


@dc.dataclass(frozen=True, slots=True)
class Matches:
    """Match names or aliases where ``pattern`` is found by ``re.search``."""

    pattern: str

    def __str__(self) -> str:
        return f'matches("{self.pattern}")'


MatchExpression = ExactName | StartsWith | EndsWith | Contains | Matches

_CONSTRUCTORS: dict[str, typ.Callable[[str], MatchExpression]] = {
    "starts_with": StartsWith,
    "ends_with": EndsWith,
    "contains": Contains,
    "matches": Matches,
}


@dc.dataclass(frozen=True, slots=True)
class Candidate:
    """A named item that match expressions are evaluated against."""

    name: str
    aliases: tuple[str, ...] = ()
    internal: bool = False

    @property
    def lookup_names(self) -> tuple[str, ...]:
        """Return the name followed by any aliases that differ from it."""
        return (self.name, *(alias for alias in self.aliases if alias != self.name))


@dc.dataclass(slots=True)
class SelectionResult:
    """Outcome of :func:`select`.

    Attributes
    ----------
    matched_indices : list[int]
        Candidate indices in the order their expression first matched them.
    unmatched_expressions : list[MatchExpression]
        Expressions that matched no candidate, in input order.
    """

    matched_indices: list[int] = dc.field(default_factory=list)
    unmatched_expressions: list[MatchExpression] = dc.field(default_factory=list)


def parse_match_expression(value: object) -> MatchExpression:
    """Parse a configuration value into a :data:`MatchExpression`.

    Parameters
    ----------
    value : object
        Either a string (``"name"``, ``"`name`"`` or a call such as
        ``'starts_with("plot_")'``) or a single-key mapping such as
        ``{"starts_with": "plot_"}``.

    Returns
    -------
    MatchExpression
        The parsed expression.

    Raises
    ------
    ConfigError
        If the value names an unknown matcher, is empty, or carries an invalid
        regular expression.
    """
    match value:
        case dict() if len(value) == 1:
            (func, arg), = value.items()
            return _build_call(str(func), str(arg), value)
        case str():
            text = value.strip()
        case int() | float():
            text = str(value)
        case _:
            msg = f"Cannot interpret {value!r} as a match expression."
            raise ConfigError(msg)

    call = CALL_PATTERN.match(text)
    if call:
        return _build_call(call.group(1), call.group(3), value)
    if "(" in text and text.endswith(")") and not text.startswith("`"):
        msg = f"Unsupported match expression {text!r}."
        raise ConfigError(msg)
    name = text.strip("`")
    if not name:
        msg = "Match expressions must not be empty."
        raise ConfigError(msg)
    return ExactName(name)


def _build_call(func: str, arg: str, original: object) -> MatchExpression:
    """Return the matcher for ``func(arg)`` or raise for unknown functions."""
    constructor = _CONSTRUCTORS.get(func)
    if constructor is None:
        known = ", ".join(sorted(_CONSTRUCTORS))
        msg = f"Unknown matcher in {original!r}; expected one of: {known}."
        raise ConfigError(msg)
    if constructor is Matches:
        try:
            re.compile(arg)
        except re.error as exc:
            msg = f"Invalid regular expression in {original!r}: {exc}"
            raise ConfigError(msg) from exc
    return constructor(arg)


def matches(expression: MatchExpression, value: str) -> bool:
    """Return whether ``value`` satisfies ``expression``."""
    match expression:
        case ExactName(name=name):
            return value == name
        case StartsWith(prefix=prefix):
            return value.startswith(prefix)
        case EndsWith(suffix=suffix):
            return value.endswith(suffix)
        case Contains(substring=substring):
            return substring in value
        case Matches(pattern=pattern):
            return re.search(pattern, value) is not None
    msg = f"Unsupported match expression: {expression!r}"
    raise TypeError(msg)


def select(
    expressions: typ.Sequence[MatchExpression],
    candidates: typ.Sequence[Candidate],
    *,
    include_internal: bool = False,
) -> SelectionResult:
    """Resolve ``expressions`` into an ordered, deduplicated candidate subset.

    Each expression scans every candidate in order; a candidate matched by
    several expressions keeps the position of its first match. Internal
    candidates are skipped unless ``include_internal`` is set.
    """
    result = SelectionResult()
    seen: set[int] = set()
    for expression in expressions:
        hit = False
        for index, candidate in enumerate(candidates):
            if candidate.internal and not include_internal:
                continue
            if not any(matches(expression, name) for name in candidate.lookup_names):
                continue
            hit = True
            if index not in seen:
                seen.add(index)
                result.matched_indices.append(index)
        if not hit:
            result.unmatched_expressions.append(expression)
    return result


__all__ = [
    "Candidate",
    "Contains",
    "EndsWith",
    "ExactName",
    "MatchExpression",
    "Matches",
    "SelectionResult",
    "StartsWith",
    "matches",
    "parse_match_expression",
    "select",
]
