from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from matplotlib.axes import Axes
from matplotlib.cm import ScalarMappable
from matplotlib.figure import FigureBase
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from .scales import ContinuousScale, DiscreteScale, Scale
from .styles import Theme

logger = logging.getLogger(__name__)

# Geometries whose legend keys are filled boxes rather than marks/lines
AREA_GEOMS = {"bar", "boxplot", "violin", "histogram", "density", "dotplot", "pie"}

_OUTSIDE = {
    "right": ("outside right upper", "outside right lower"),
    "left": ("outside left upper", "outside left lower"),
    "top": ("outside upper left", "outside upper right"),
    "bottom": ("outside lower left", "outside lower right"),
}

_COLORBAR_LOCATION = {"right": "right", "left": "left", "top": "top", "bottom": "bottom", "inside": "right"}


def _key_handle(geom: str, props: Dict[str, object]):
    colour = props.get("colour") or props.get("fill") or "#333333"
    if geom in AREA_GEOMS and "shape" not in props and "linetype" not in props:
        return Patch(facecolor=props.get("fill") or colour, edgecolor=props.get("colour") or "none")
    marker = props.get("shape")
    linestyle = props.get("linetype")
    if geom in ("line", "segment") or linestyle is not None:
        return Line2D([], [], color=colour, linestyle=linestyle or "-", marker=marker or "")
    markersize = props.get("size")
    return Line2D(
        [], [], color=colour, linestyle="", marker=marker or "o",
        markersize=float(markersize) if markersize is not None else 6.0,
    )


def _inside_legend(ax: Axes, handles, labels, **kwargs):
    previous = ax.get_legend()
    if previous is not None:
        # a second ax.legend() call replaces the first one
        ax.add_artist(previous)
    return ax.legend(handles, labels, loc="best", **kwargs)


def legend_groups(
    geom: str,
    scales: Mapping[str, Scale],
    titles: Mapping[str, Optional[str]],
) -> List[Tuple[str, list, List[str]]]:
    """Build (title, handles, labels) per discrete legend.

    Channels mapped to the same column with the same levels are merged into
    one legend, the way a single guide covers colour and shape together.
    """
    merged: Dict[Tuple[str, Tuple], List[DiscreteScale]] = {}
    for scale in scales.values():
        if isinstance(scale, DiscreteScale):
            merged.setdefault((scale.column, scale.levels), []).append(scale)
    groups = []
    for (column, levels), members in merged.items():
        title = next((titles.get(s.channel) for s in members if titles.get(s.channel)), None) or column
        handles = []
        for i, _ in enumerate(levels):
            props = {s.channel: s.values[i] for s in members}
            handles.append(_key_handle(geom, props))
        groups.append((title, handles, [str(lvl) for lvl in levels]))
    return groups


def _size_group(scale: ContinuousScale, titles: Mapping[str, Optional[str]]) -> Tuple[str, list, List[str]]:
    breaks = scale.breaks()
    handles = [
        Line2D([], [], color="#333333", linestyle="", marker="o", markersize=size)
        for size in scale.map(breaks)
    ]
    return titles.get("size") or scale.column, handles, [f"{b:g}" for b in breaks]


def _merge_groups(groups: Sequence[Tuple[str, list, List[str]]]) -> Tuple[list, List[str]]:
    """One legend body with each guide's title as an unmarked header row."""
    handles: list = []
    labels: List[str] = []
    for title, group_handles, group_labels in groups:
        handles.append(Patch(visible=False))
        labels.append(title)
        handles.extend(group_handles)
        labels.extend(group_labels)
    return handles, labels


def place_legends(
    container: FigureBase,
    axes: Sequence[Axes],
    geom: str,
    scales: Mapping[str, Scale],
    titles: Mapping[str, Optional[str]],
    position: str,
    theme: Theme,
) -> list:
    """Draw guides for every trained scale at `position`. Returns the legends.

    Each side has two outside slots; with more guides than slots they are
    merged into a single legend so none overlap.
    """
    if position == "none":
        return []
    groups = legend_groups(geom, scales, titles)
    groups += [
        _size_group(scale, titles) for scale in scales.values()
        if isinstance(scale, ContinuousScale) and scale.cmap is None
    ]
    kwargs = dict(fontsize=theme.legend_size, title_fontsize=theme.legend_size, frameon=False)
    drawn = []
    if position == "inside":
        for title, handles, labels in groups:
            drawn.append(_inside_legend(axes[0], handles, labels, title=title, **kwargs))
    else:
        slots = _OUTSIDE[position]
        merged = len(groups) > len(slots)
        if merged:
            handles, labels = _merge_groups(groups)
            groups = [(None, handles, labels)]
        for i, (title, handles, labels) in enumerate(groups):
            extra = {"ncols": len(handles)} if position in ("top", "bottom") and not merged else {}
            drawn.append(container.legend(handles, labels, title=title, loc=slots[i], **kwargs, **extra))
    for scale in scales.values():
        if isinstance(scale, ContinuousScale) and scale.cmap is not None:
            mappable = ScalarMappable(norm=scale.norm, cmap=scale.cmap)
            cbar = container.colorbar(mappable, ax=list(axes), location=_COLORBAR_LOCATION[position], shrink=0.8)
            cbar.set_label(titles.get(scale.channel) or scale.column, fontsize=theme.legend_size)
            drawn.append(cbar)
    logger.debug("placed %d guide(s) at %s", len(drawn), position)
    return drawn
