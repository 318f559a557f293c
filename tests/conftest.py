"""Shared fixtures that lay out small package source trees on disk."""

from __future__ import annotations

import logging
import textwrap
import typing as typ
from pathlib import Path

import pytest

DESCRIPTION = """\
Package: demo
Title: Tools for Demonstration Plots
Version: 1.2.0
Authors@R: c(
    person("Ada", "Lovelace", role = c("aut", "cre")),
    person("Grace", "Hopper", role = "aut"))
Description: Draws small demonstration plots
    used to exercise the documentation builder.
License: MIT + file LICENSE
URL: https://github.com/acme/demo
BugReports: https://github.com/acme/demo/issues
"""

PLOT_BAR_RD = r"""% Generated by roxygen2: do not edit by hand
\name{plot_bar}
\alias{plot_bar}
\alias{bar_chart}
\title{Draw a bar plot}
\usage{
plot_bar(x, horizontal = FALSE)
}
\arguments{
\item{x}{A numeric vector.}

\item{horizontal}{Draw bars sideways? See \code{\link{plot_line}}.}
}
\value{
Invisibly returns \code{x}.
}
\description{
Draws one bar for each value in \code{x}.
}
\examples{
plot_bar(1:3)
\dontrun{
plot_bar(big_data)
}
}
"""

PLOT_LINE_RD = r"""\name{plot_line}
\alias{plot_line}
\title{Draw a line plot}
\usage{
plot_line(x)
}
\description{
Connects the values of \code{x}. Use \link{summary} for totals.
}
"""

SUMMARY_RD = r"""\name{summary}
\alias{summary}
\title{Summarise demo data}
\description{
Returns counts.
}
"""

INTERNAL_RD = r"""\name{helper}
\alias{helper}
\title{Internal helper}
\keyword{internal}
\description{
Not for users.
}
"""

INTRO_RMD = """\
---
title: "Getting started"
output: rmarkdown::html_vignette
---

## Installing

Read [the tuning guide](advanced/tuning.Rmd) next, then try `plot_bar()`.

```{r setup}
library(demo)
plot_bar(1:3)
```
"""

TUNING_RMD = """\
---
title: "Tuning plots"
---

## Colours

Back to [the introduction](../intro.Rmd#installing).
"""

NEWS_MD = """\
# demo 1.2.0

* `plot_bar()` gained `horizontal` (@ada, #12).

# demo 1.1.0

* First public release.
"""

README_MD = """\
# demo

Demonstration plots for everyone.
"""


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path to contents) below ``root``."""
    for relative, contents in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(contents), encoding="utf-8")
    return root


@pytest.fixture
def tree_writer() -> typ.Callable[[Path, dict[str, str]], Path]:
    """Return the helper that writes a file mapping below a directory."""
    return write_tree


@pytest.fixture
def package_files() -> dict[str, str]:
    """Return the files of a complete demo package."""
    return {
        "DESCRIPTION": DESCRIPTION,
        "README.md": README_MD,
        "NEWS.md": NEWS_MD,
        "LICENSE": "YEAR: 2024\nCOPYRIGHT HOLDER: Ada <ada@example.com>\n",
        "man/plot_bar.Rd": PLOT_BAR_RD,
        "man/plot_line.Rd": PLOT_LINE_RD,
        "man/summary.Rd": SUMMARY_RD,
        "man/helper.Rd": INTERNAL_RD,
        "vignettes/intro.Rmd": INTRO_RMD,
        "vignettes/advanced/tuning.Rmd": TUNING_RMD,
    }


@pytest.fixture
def demo_package(tmp_path: Path, package_files: dict[str, str]) -> Path:
    """Return the root of a demo package written below ``tmp_path``."""
    return write_tree(tmp_path / "demo", package_files)


@pytest.fixture(autouse=True)
def _restore_pkgdocs_logger() -> typ.Iterator[None]:
    """Undo handler changes made by ``setup_logging`` during a test."""
    logger = logging.getLogger("pkgdocs")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers, logger.level, logger.propagate = saved
