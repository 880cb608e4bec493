"""Geometry encoders and the dispatch table that maps geom tags onto them.

Each encoder draws one panel's rows onto `ax` and returns the encoded layer
data (after the statistic and position adjustment). Statistical estimation
beyond counting and averaging is handed to seaborn or numpy.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection

from ..core.registry import register_geom
from ..errors import InvalidOption
from . import positions, stats
from .context import LayerContext

logger = logging.getLogger(__name__)

DEFAULT_INK = "#333333"
DEFAULT_FILL = "#595959"
POINT_SIZE = 4.5
LINE_WIDTH = 1.5

_SNS_MULTIPLE = {"identity": "layer", "stack": "stack", "dodge": "dodge", "fill": "fill"}


def _adjust(layer: pd.DataFrame, ctx: LayerContext, width: float) -> pd.DataFrame:
    if ctx.position == "jitter":
        x_res = positions.resolution(layer["xpos"], discrete=ctx.x_levels is not None)
        y_res = positions.resolution(layer["y"], discrete=ctx.y_levels is not None) if "y" in layer else 1.0
        return positions.jitter(
            layer, ctx.rng, ctx.options.jitter_width, ctx.options.jitter_height,
            y_res=y_res, x_res=x_res,
        )
    if ctx.position == "dodge":
        return positions.dodge(layer, width)
    if ctx.position == "stack":
        return positions.stack(layer)
    if ctx.position == "fill":
        return positions.fill(layer)
    return layer


def _mark_width(layer: pd.DataFrame, ctx: LayerContext) -> float:
    """Dodge width for point-like marks, in units of the x resolution."""
    res = positions.resolution(layer["xpos"], discrete=ctx.x_levels is not None)
    return ctx.options.width * 0.75 * res


def _edges(layer: pd.DataFrame, ctx: LayerContext) -> np.ndarray:
    if ctx.bin_edges is not None:
        return ctx.bin_edges
    return stats.bin_edges(layer["x"], ctx.options.bins, ctx.options.binwidth)


def _seaborn_hue(layer: pd.DataFrame, ctx: LayerContext) -> dict:
    channel = ctx.hue_channel
    if channel is None:
        constant = ctx.constant("fill", ctx.constant("colour"))
        return {"color": constant} if constant is not None else {}
    scale = ctx.scales[channel]
    return {"hue": channel, "hue_order": list(scale.levels), "palette": scale.mapping}


def _set_alpha(ax: Axes, alpha) -> None:
    if alpha is None:
        return
    for artist in list(ax.patches) + list(ax.collections):
        artist.set_alpha(alpha)


@register_geom("point", stats=("identity", "summary"), positions=("identity", "jitter", "dodge"), required={"*": ("x", "y")})
def encode_point(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    if ctx.stat == "summary":
        layer = stats.summarise(layer, ctx.keys())
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    if ctx.y_levels is not None:
        layer["y"] = ctx.ypos(layer["y"])
    layer = _adjust(layer, ctx, _mark_width(layer, ctx))
    colours = ctx.colours(layer)
    sizes = np.asarray(ctx.sizes(layer, POINT_SIZE)) ** 2
    shape_scale = ctx.scales.get("shape")
    if shape_scale is not None:
        markers = shape_scale.map(layer["shape"])
    else:
        markers = [ctx.constant("shape", "o")] * len(layer)
    for marker in pd.unique(pd.Series(markers, dtype=object)):
        mask = np.array([m == marker for m in markers])
        ax.scatter(
            layer.loc[mask, "xpos"], layer.loc[mask, "y"],
            c=[c for c, keep in zip(colours, mask) if keep],
            s=sizes[mask], marker=marker, alpha=ctx.alpha, edgecolors="none", zorder=2,
        )
    return layer


@register_geom("line", stats=("identity", "summary"), positions=("identity",), required={"*": ("x", "y")})
def encode_line(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    if ctx.stat == "summary":
        layer = stats.summarise(layer, ctx.keys())
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    if ctx.y_levels is not None:
        layer["y"] = ctx.ypos(layer["y"])
    layer = layer.sort_values(["group", "xpos"], kind="stable").reset_index(drop=True)
    colours = ctx.colours(layer)
    widths = ctx.sizes(layer, LINE_WIDTH)
    linetype_scale = ctx.scales.get("linetype")
    styles = linetype_scale.map(layer["linetype"]) if linetype_scale is not None else [ctx.constant("linetype", "-")] * len(layer)
    for _, idx in layer.groupby("group", sort=False).groups.items():
        first = layer.index.get_loc(idx[0])
        ax.plot(
            layer.loc[idx, "xpos"], layer.loc[idx, "y"],
            color=colours[first], linestyle=styles[first], linewidth=widths[first], alpha=ctx.alpha,
        )
    return layer


@register_geom(
    "bar",
    stats=("identity", "count", "summary"),
    positions=("stack", "dodge", "fill", "identity"),
    required={"count": ("x",), "*": ("x", "y")},
)
def encode_bar(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    if ctx.stat == "count":
        layer = stats.count(layer, ctx.keys())
    elif ctx.stat == "summary":
        # ymin/ymax become the bar extent; the standard error range moves aside
        layer = stats.summarise(layer, ctx.keys()).rename(columns={"ymin": "lower", "ymax": "upper"})
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    layer = layer.sort_values("xpos", kind="stable").reset_index(drop=True)
    res = positions.resolution(layer["xpos"], discrete=ctx.x_levels is not None)
    width = ctx.options.width * res
    if ctx.position in ("identity", "dodge"):
        layer = positions.from_zero(layer)
    if ctx.position != "identity":
        layer = _adjust(layer, ctx, width)
    if "width" not in layer:
        layer["width"] = width
    fills = ctx.colours(layer, prefer=("fill", "colour"), default=DEFAULT_FILL)
    # colour outlines the bars only when fill already decides the face colour
    has_fill = "fill" in ctx.scales or ctx.constant("fill") is not None
    edges = "none"
    if has_fill and "colour" in ctx.scales and "colour" in layer:
        edges = ctx.scales["colour"].map(layer["colour"])
    elif has_fill and ctx.constant("colour") is not None:
        edges = ctx.constant("colour")
    ax.bar(
        layer["xpos"], layer["ymax"] - layer["ymin"], bottom=layer["ymin"],
        width=layer["width"], color=fills, edgecolor=edges, alpha=ctx.alpha, align="center",
    )
    if "lower" in layer and ctx.position in ("identity", "dodge"):
        ax.vlines(layer["xpos"], layer["lower"], layer["upper"], colors=DEFAULT_INK, linewidth=LINE_WIDTH)
    return layer


@register_geom("boxplot", stats=("identity",), positions=("dodge", "identity"), required={"*": ("y",)}, discrete_x=True)
def encode_boxplot(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    return _categorical(sns.boxplot, ax, layer, ctx)


@register_geom("violin", stats=("identity",), positions=("dodge", "identity"), required={"*": ("y",)}, discrete_x=True)
def encode_violin(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    return _categorical(sns.violinplot, ax, layer, ctx, inner="box")


def _categorical(plotter, ax: Axes, layer: pd.DataFrame, ctx: LayerContext, **extra) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    kwargs = _seaborn_hue(layer, ctx)
    has_x = "x" in layer
    hue = kwargs.get("hue")
    dodge = ctx.position == "dodge" and hue is not None and not (has_x and ctx.columns.get(hue) == ctx.columns.get("x"))
    plotter(
        data=layer,
        x="x" if has_x else None,
        y="y",
        order=ctx.x_levels if has_x else None,
        dodge=dodge,
        width=ctx.options.width,
        legend=False,
        ax=ax,
        **kwargs,
        **extra,
    )
    _set_alpha(ax, ctx.alpha)
    if has_x:
        layer["xpos"] = ctx.xpos(layer["x"])
    return layer


@register_geom("histogram", stats=("count",), positions=("stack", "dodge", "fill", "identity"), required={"*": ("x",)})
def encode_histogram(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    kwargs = _seaborn_hue(layer, ctx)
    edges = _edges(layer, ctx)
    sns.histplot(
        data=layer, x="x", stat="count", bins=edges,
        multiple=_SNS_MULTIPLE[ctx.position], legend=False, ax=ax, **kwargs,
    )
    _set_alpha(ax, ctx.alpha)
    return layer


@register_geom("density", stats=("identity",), positions=("identity", "stack", "fill"), required={"*": ("x",)})
def encode_density(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    kwargs = _seaborn_hue(layer, ctx)
    filled = "fill" in ctx.scales or ctx.constant("fill") is not None
    if layer["x"].nunique() < 2:
        logger.warning("density needs at least two distinct x values; panel left empty")
        return layer
    sns.kdeplot(
        data=layer, x="x", multiple=_SNS_MULTIPLE[ctx.position], fill=filled,
        common_norm=False, legend=False, warn_singular=False, ax=ax, **kwargs,
    )
    _set_alpha(ax, ctx.alpha)
    return layer


@register_geom("dotplot", stats=("count",), positions=("identity",), required={"*": ("x",)})
def encode_dotplot(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    x = layer["x"].astype(float).to_numpy()
    edges = _edges(layer, ctx)
    idx = np.clip(np.digitize(x, edges[1:-1]), 0, len(edges) - 2)
    centers = (edges[:-1] + edges[1:]) / 2.0
    layer["xpos"] = centers[idx]
    layer["y"] = layer.groupby(pd.Series(idx, index=layer.index), sort=False).cumcount() + 1.0
    colours = ctx.colours(layer, prefer=("fill", "colour"), default=DEFAULT_INK)
    sizes = np.asarray(ctx.sizes(layer, POINT_SIZE * 1.5)) ** 2
    ax.scatter(layer["xpos"], layer["y"], c=colours, s=sizes, alpha=ctx.alpha, edgecolors="none")
    ax.set_ylim(0, float(layer["y"].max()) + 1.0)
    return layer


@register_geom(
    "pie",
    stats=("count", "identity"),
    positions=("stack", "identity"),
    required={"count": ("x",), "*": ("x", "y")},
    discrete_x=True,
)
def encode_pie(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    if ctx.stat == "count":
        layer = stats.count(layer, ctx.keys())
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    layer = layer.sort_values("xpos", kind="stable").reset_index(drop=True)
    values = layer["y"].astype(float)
    if (values < 0).any():
        raise InvalidOption("pie slices need non-negative values")
    total = float(values.sum())
    layer["fraction"] = values / total if total else 0.0
    colours = ctx.colours(layer, prefer=("fill", "colour"), default=DEFAULT_FILL)
    autopct = ctx.options.slice_label_format
    ax.pie(
        values, colors=colours, startangle=90, counterclock=False,
        wedgeprops={"edgecolor": "white", "alpha": ctx.alpha},
        autopct=(lambda pct: autopct % pct) if autopct else None,
    )
    ax.set_aspect("equal")
    return layer


@register_geom(
    "pointrange",
    stats=("summary", "identity"),
    positions=("identity", "dodge"),
    required={"identity": ("x", "y", "ymin", "ymax"), "*": ("x", "y")},
)
def encode_pointrange(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    if ctx.stat == "summary":
        layer = stats.summarise(layer, ctx.keys())
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    layer = _adjust(layer, ctx, _mark_width(layer, ctx))
    colours = ctx.colours(layer)
    sizes = ctx.sizes(layer, POINT_SIZE)
    ax.vlines(layer["xpos"], layer["ymin"], layer["ymax"], colors=colours, linewidth=LINE_WIDTH, alpha=ctx.alpha)
    ax.scatter(layer["xpos"], layer["y"], c=colours, s=np.asarray(sizes) ** 2, alpha=ctx.alpha, zorder=3, edgecolors="none")
    return layer


@register_geom("segment", stats=("identity",), positions=("identity",), required={"*": ("x", "y", "xend", "yend")})
def encode_segment(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    layer["xendpos"] = ctx.xpos(layer["xend"])
    layer["ypos"] = ctx.ypos(layer["y"])
    layer["yendpos"] = ctx.ypos(layer["yend"])
    segments = [
        [(x0, y0), (x1, y1)]
        for x0, y0, x1, y1 in layer[["xpos", "ypos", "xendpos", "yendpos"]].itertuples(index=False)
    ]
    linetype_scale = ctx.scales.get("linetype")
    styles = linetype_scale.map(layer["linetype"]) if linetype_scale is not None else ctx.constant("linetype", "-")
    collection = LineCollection(
        segments, colors=ctx.colours(layer), linewidths=ctx.sizes(layer, LINE_WIDTH),
        linestyles=styles, alpha=ctx.alpha,
    )
    ax.add_collection(collection)
    ax.autoscale_view()
    return layer


@register_geom("text", stats=("identity",), positions=("identity", "jitter"), required={"*": ("x", "y", "label")})
def encode_text(ax: Axes, layer: pd.DataFrame, ctx: LayerContext) -> pd.DataFrame:
    layer = ctx.with_group(layer)
    layer["xpos"] = ctx.xpos(layer["x"])
    if ctx.y_levels is not None:
        layer["y"] = ctx.ypos(layer["y"])
    layer = _adjust(layer, ctx, ctx.options.width)
    colours = ctx.colours(layer, default=DEFAULT_INK)
    sizes = ctx.sizes(layer, 9.0)
    labels = layer["label"] if "label" in layer else [ctx.constant("label", "")] * len(layer)
    for (x, y, text, colour, size) in zip(layer["xpos"], layer["y"], labels, colours, sizes):
        ax.text(x, y, str(text), color=colour, fontsize=size, ha="center", va="center", alpha=ctx.alpha)
    xy = layer[["xpos", "y"]].to_numpy(dtype=float)
    ax.update_datalim(xy)
    ax.autoscale_view()
    return layer
