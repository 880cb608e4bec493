"""Chart recipe dispatcher: validate a recipe, lay out panels, draw, decorate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure, FigureBase
from matplotlib.dates import AutoDateLocator, ConciseDateFormatter
from matplotlib.ticker import FormatStrFormatter
from pandas.api.types import is_datetime64_any_dtype

from ..core.config import Aesthetics, ChartOptions, GeometrySpec
from ..core.registry import GeomInfo
from ..types import DatasetLike
from ..visualization.chart import Chart
from ..visualization.legends import place_legends
from ..visualization.scales import Scale, as_numeric, discrete_levels, is_discrete, train_scales
from ..visualization.styles import Theme, apply_theme, get_theme
from . import geoms as _geoms  # noqa: F401  (fills the geom dispatch table)
from . import stats
from .context import LayerContext, build_layer
from .validation import (
    check_channels,
    check_columns,
    check_dataset,
    check_label_formats,
    check_numeric,
    drop_missing,
    resolve_geometry,
)

logger = logging.getLogger(__name__)

AestheticsLike = Union[Aesthetics, Mapping[str, Any]]
GeometryLike = Union[GeometrySpec, Mapping[str, Any], str]
OptionsLike = Union[ChartOptions, Mapping[str, Any], None]

SCALED_CHANNELS = ("colour", "fill", "shape", "linetype", "size")
# geoms whose y axis shows a count or density instead of a mapped column
_DERIVED_Y = {"histogram": "count", "dotplot": "count", "density": "density"}
# geoms whose panels share bin edges unless x is free
_BINNED = ("histogram", "dotplot")
# geoms that may place a categorical column on the y axis
_DISCRETE_Y_OK = {"point", "line", "text", "segment"}


@dataclass(frozen=True)
class Recipe:
    """A validated recipe, ready to be drawn into any figure or subfigure."""

    frame: pd.DataFrame
    aesthetics: Aesthetics
    geometry: GeometrySpec
    options: ChartOptions
    info: GeomInfo
    columns: Dict[str, str]


def coerce_aesthetics(aesthetics: AestheticsLike) -> Aesthetics:
    if isinstance(aesthetics, Aesthetics):
        return aesthetics
    return Aesthetics.model_validate(dict(aesthetics or {}))


def coerce_geometry(geometry: GeometryLike) -> GeometrySpec:
    if isinstance(geometry, GeometrySpec):
        return geometry
    if isinstance(geometry, Mapping):
        return GeometrySpec.model_validate(dict(geometry))
    return GeometrySpec.model_validate(geometry)


def coerce_options(options: OptionsLike) -> ChartOptions:
    if options is None:
        return ChartOptions()
    if isinstance(options, ChartOptions):
        return options
    return ChartOptions.model_validate(dict(options))


def prepare(dataset: DatasetLike, aesthetics: AestheticsLike, geometry: GeometryLike, options: OptionsLike = None) -> Recipe:
    """Run every input check and return the recipe that `draw` consumes.

    Raises:
        InvalidDataset, EmptyDataset, UnknownColumn, IncompatibleStatistic,
        IncompatiblePosition, MissingAesthetic, NonNumericChannel, InvalidOption.
    """
    frame = check_dataset(dataset)
    aes = coerce_aesthetics(aesthetics)
    spec = coerce_geometry(geometry)
    opts = coerce_options(options)
    check_label_formats(opts)
    check_columns(frame, aes, opts.facet)
    spec = resolve_geometry(spec)
    info = check_channels(spec, aes)
    check_numeric(frame, spec, aes)
    columns = aes.columns()
    if spec.geom == "pie" and "fill" not in columns:
        # slices are coloured by category unless fill says otherwise
        columns["fill"] = columns["x"]
    frame = drop_missing(frame, columns, opts.facet)
    return Recipe(frame=frame, aesthetics=aes, geometry=spec, options=opts, info=info, columns=columns)


def render(dataset: DatasetLike, aesthetics: AestheticsLike, geometry_spec: GeometryLike, options: OptionsLike = None) -> Chart:
    """Render one chart recipe.

    Args:
        dataset: A DataFrame or a mapping of equal-length columns. Not mutated.
        aesthetics: Channel -> column name (or constant) mapping.
        geometry_spec: A `GeometrySpec`, a mapping, or a bare geom name.
        options: `ChartOptions` or a mapping of option values.

    Returns:
        A `Chart` holding the matplotlib figure and the encoded layer data.
    """
    recipe = prepare(dataset, aesthetics, geometry_spec, options)
    opts = recipe.options
    figure = Figure(figsize=(opts.width_in, opts.height_in), dpi=opts.dpi, layout="constrained")
    axes, data, scales = draw(figure, recipe)
    logger.debug(
        "rendered %s/%s/%s: %d encoded rows in %d panel(s)",
        recipe.geometry.geom, recipe.geometry.stat, recipe.geometry.position, len(data), len(axes),
    )
    return Chart(figure, axes, data, recipe.geometry, recipe.aesthetics, opts, scales, recipe)


def draw(container: FigureBase, recipe: Recipe) -> Tuple[List[Axes], pd.DataFrame, Dict[str, Scale]]:
    """Draw `recipe` into `container` (a Figure or SubFigure)."""
    frame, aes, spec, opts, info = recipe.frame, recipe.aesthetics, recipe.geometry, recipe.options, recipe.info
    theme = get_theme(opts.theme)
    if opts.base_size is not None:
        theme = theme.with_base_size(opts.base_size)
    scales = train_scales(
        frame,
        {ch: col for ch, col in recipe.columns.items() if ch in SCALED_CHANNELS},
        opts.palette,
        opts.continuous_cmap,
    )

    facet = opts.facet
    row_var = facet.rows if facet else None
    col_var = facet.cols if facet else None
    row_levels = discrete_levels(frame[row_var]) if row_var else [None]
    col_levels = discrete_levels(frame[col_var]) if col_var else [None]
    free_x = bool(facet) and facet.scales in ("free", "free_x")
    free_y = bool(facet) and facet.scales in ("free", "free_y")
    show_axes = spec.geom != "pie"
    binned = spec.geom in _BINNED
    shared_edges = _bin_edges(frame, recipe) if binned and not free_x else None

    grid = container.subplots(
        len(row_levels), len(col_levels), squeeze=False,
        sharex=show_axes and not free_x, sharey=show_axes and not free_y,
    )
    axes: List[Axes] = []
    encoded: List[pd.DataFrame] = []
    panel = 0
    for i, r in enumerate(row_levels):
        for j, c in enumerate(col_levels):
            panel += 1
            ax = grid[i][j]
            axes.append(ax)
            mask = np.ones(len(frame), dtype=bool)
            if row_var:
                mask &= (frame[row_var] == r).to_numpy()
            if col_var:
                mask &= (frame[col_var] == c).to_numpy()
            subset = frame[mask]
            level_source = subset if free_x else frame
            ctx = LayerContext(
                geom=spec.geom,
                stat=spec.stat,
                position=spec.position,
                aes=aes,
                options=opts,
                scales=scales,
                columns=recipe.columns,
                x_levels=_x_levels(level_source, recipe),
                y_levels=_y_levels(subset if free_y else frame, recipe),
                rng=np.random.default_rng([opts.seed, panel]),
                bin_edges=_bin_edges(subset, recipe) if binned and free_x and len(subset) else shared_edges,
            )
            if len(subset):
                layer = info.encoder(ax, build_layer(subset, recipe.columns), ctx)
                layer["PANEL"] = panel
                if row_var:
                    layer["facet_row"] = r
                if col_var:
                    layer["facet_col"] = c
                encoded.append(layer)
            if show_axes:
                _discrete_ticks(ax, ctx)
                _axis_formats(ax, ctx, recipe)
            if col_var and i == 0:
                ax.set_title(str(c), fontsize=theme.base_size)
            if row_var and j == len(col_levels) - 1:
                ax.text(1.02, 0.5, str(r), transform=ax.transAxes, rotation=-90, va="center", ha="left", fontsize=theme.base_size)

    data = pd.concat(encoded, ignore_index=True) if encoded else pd.DataFrame()
    apply_theme(axes, theme, show_axes=show_axes)
    container.set_facecolor(theme.plot_background)
    _labels(container, axes, recipe, theme, faceted=len(axes) > 1, show_axes=show_axes)
    titles = {ch: getattr(opts.labels, ch) for ch in SCALED_CHANNELS}
    place_legends(container, axes, spec.geom, scales, titles, opts.legend_position, theme)
    return axes, data, scales


def _bin_edges(frame: pd.DataFrame, recipe: Recipe) -> np.ndarray:
    opts = recipe.options
    return stats.bin_edges(as_numeric(frame[recipe.columns["x"]]), opts.bins, opts.binwidth)


def _x_levels(frame: pd.DataFrame, recipe: Recipe) -> Optional[List[Any]]:
    column = recipe.columns.get("x")
    if column is None:
        return None
    series = frame[column]
    if recipe.info.discrete_x or is_discrete(series):
        return discrete_levels(series)
    return None


def _y_levels(frame: pd.DataFrame, recipe: Recipe) -> Optional[List[Any]]:
    column = recipe.columns.get("y")
    if column is None or recipe.geometry.geom not in _DISCRETE_Y_OK:
        return None
    series = frame[column]
    return discrete_levels(series) if is_discrete(series) else None


def _discrete_ticks(ax: Axes, ctx: LayerContext) -> None:
    if ctx.x_levels is not None:
        n = len(ctx.x_levels)
        ax.set_xticks(range(n))
        ax.set_xticklabels([str(v) for v in ctx.x_levels])
        ax.set_xlim(-0.6, n - 0.4)
    if ctx.y_levels is not None:
        n = len(ctx.y_levels)
        ax.set_yticks(range(n))
        ax.set_yticklabels([str(v) for v in ctx.y_levels])
        ax.set_ylim(-0.6, n - 0.4)


def _is_datetime(recipe: Recipe, channel: str) -> bool:
    column = recipe.columns.get(channel)
    return column is not None and is_datetime64_any_dtype(recipe.frame[column].dtype)


def _axis_formats(ax: Axes, ctx: LayerContext, recipe: Recipe) -> None:
    opts = recipe.options
    x_fmt = opts.x_label_format or opts.axis_label_format
    y_fmt = opts.y_label_format or opts.axis_label_format
    for axis, channel, levels, fmt in ((ax.xaxis, "x", ctx.x_levels, x_fmt), (ax.yaxis, "y", ctx.y_levels, y_fmt)):
        if levels is not None:
            continue
        if _is_datetime(recipe, channel):
            # positions are matplotlib date numbers
            locator = AutoDateLocator()
            axis.set_major_locator(locator)
            axis.set_major_formatter(ConciseDateFormatter(locator))
        elif fmt and (channel != "x" or "x" in recipe.columns):
            axis.set_major_formatter(FormatStrFormatter(fmt))


def _axis_titles(recipe: Recipe) -> Tuple[Optional[str], Optional[str]]:
    labels = recipe.options.labels
    spec = recipe.geometry
    x_title = labels.x if labels.x is not None else recipe.columns.get("x")
    if labels.y is not None:
        y_title = labels.y
    elif spec.geom in _DERIVED_Y:
        y_title = _DERIVED_Y[spec.geom]
    elif spec.stat == "count":
        y_title = "count"
    else:
        y_title = recipe.columns.get("y")
    return x_title, y_title


def _labels(container: FigureBase, axes: List[Axes], recipe: Recipe, theme: Theme, faceted: bool, show_axes: bool) -> None:
    labels = recipe.options.labels
    if show_axes:
        x_title, y_title = _axis_titles(recipe)
        if faceted:
            if x_title:
                container.supxlabel(x_title, fontsize=theme.base_size, color=theme.text_colour)
            if y_title:
                container.supylabel(y_title, fontsize=theme.base_size, color=theme.text_colour)
        else:
            axes[0].set_xlabel(x_title or "")
            axes[0].set_ylabel(y_title or "")
    if labels.title:
        container.suptitle(labels.title, fontsize=theme.title_size, color=theme.text_colour)
    if labels.subtitle:
        axes[0].set_title(labels.subtitle, loc="left", fontsize=theme.base_size, color=theme.text_colour)
    if labels.caption:
        container.text(0.99, 0.005, labels.caption, ha="right", va="bottom", fontsize=theme.base_size * 0.8, color=theme.text_colour)
