"""Compose several rendered charts into one figure."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from matplotlib.figure import Figure

from ..errors import InvalidOption
from ..visualization.chart import Chart, RenderedFigure
from .render import draw

logger = logging.getLogger(__name__)

_ROMAN = [(10, "x"), (9, "ix"), (5, "v"), (4, "iv"), (1, "i")]


def _roman(n: int) -> str:
    out = ""
    for value, numeral in _ROMAN:
        while n >= value:
            out += numeral
            n -= value
    return out


def _letters(n: int) -> str:
    out = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out = chr(ord("a") + rem) + out
    return out


def panel_tags(n: int, tag_levels: Optional[str]) -> List[str]:
    """Tags for `n` panels: "A" -> A, B..., "a", "1", "I" and "i" likewise."""
    if tag_levels is None:
        return []
    if tag_levels == "A":
        return [_letters(i).upper() for i in range(1, n + 1)]
    if tag_levels == "a":
        return [_letters(i) for i in range(1, n + 1)]
    if tag_levels == "1":
        return [str(i) for i in range(1, n + 1)]
    if tag_levels == "I":
        return [_roman(i).upper() for i in range(1, n + 1)]
    if tag_levels == "i":
        return [_roman(i) for i in range(1, n + 1)]
    raise InvalidOption(f"unknown tag_levels '{tag_levels}' (expected one of: A, a, 1, I, i)")


def grid_shape(n: int, ncol: Optional[int] = None, nrow: Optional[int] = None) -> tuple:
    if ncol is None and nrow is None:
        ncol = math.ceil(math.sqrt(n))
    if ncol is None:
        ncol = math.ceil(n / nrow)
    if nrow is None:
        nrow = math.ceil(n / ncol)
    if ncol < 1 or nrow < 1 or ncol * nrow < n:
        raise InvalidOption(f"a {nrow}x{ncol} grid cannot hold {n} charts")
    return nrow, ncol


class ChartGrid(RenderedFigure):
    """Several charts redrawn side by side in one figure."""

    def __init__(self, figure: Figure, charts: Sequence[Chart], shape: tuple, tags: Sequence[str]) -> None:
        super().__init__(figure)
        self.charts = list(charts)
        self.shape = shape
        self.tags = list(tags)

    def describe(self) -> Dict[str, Any]:
        return {
            "shape": list(self.shape),
            "tags": self.tags,
            "charts": [c.describe() for c in self.charts],
        }


def arrange(
    charts: Sequence[Chart],
    ncol: Optional[int] = None,
    nrow: Optional[int] = None,
    tag_levels: Optional[str] = None,
    title: Optional[str] = None,
    width_in: Optional[float] = None,
    height_in: Optional[float] = None,
) -> ChartGrid:
    """Lay charts out row by row in an `nrow` x `ncol` grid.

    Each chart's recipe is drawn again into its own subfigure, so legends,
    themes and facets are kept per chart. The input charts are not modified.
    """
    charts = list(charts)
    if not charts:
        raise InvalidOption("arrange() needs at least one chart")
    nrow, ncol = grid_shape(len(charts), ncol, nrow)
    tags = panel_tags(len(charts), tag_levels)
    width = width_in or ncol * max(c.options.width_in for c in charts)
    height = height_in or nrow * max(c.options.height_in for c in charts)
    dpi = max(c.options.dpi for c in charts)
    figure = Figure(figsize=(width, height), dpi=dpi, layout="constrained")
    subfigs = figure.subfigures(nrow, ncol, squeeze=False)
    for k, chart in enumerate(charts):
        sub = subfigs[k // ncol][k % ncol]
        draw(sub, chart.recipe)
        if tags:
            sub.text(0.01, 0.99, tags[k], ha="left", va="top", fontweight="bold", fontsize=12)
    if title:
        figure.suptitle(title)
    logger.debug("arranged %d chart(s) in a %dx%d grid", len(charts), nrow, ncol)
    return ChartGrid(figure, charts, (nrow, ncol), tags)
