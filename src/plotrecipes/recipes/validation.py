"""Input checks run before anything is drawn."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from ..core.config import Aesthetics, ChartOptions, FacetSpec, GeometrySpec
from ..core.registry import GeomInfo, get_geom
from ..data.datasets import as_frame
from ..errors import (
    EmptyDataset,
    IncompatiblePosition,
    IncompatibleStatistic,
    InvalidOption,
    MissingAesthetic,
    NonNumericChannel,
    UnknownColumn,
)
from ..types import DatasetLike

logger = logging.getLogger(__name__)

# (geom, stat) -> channels that must hold numbers; "*" matches any stat
NUMERIC_CHANNELS: Dict[str, Dict[str, Sequence[str]]] = {
    "point": {"summary": ("y",)},
    "line": {"summary": ("y",)},
    "bar": {"identity": ("y",), "summary": ("y",)},
    "boxplot": {"*": ("y",)},
    "violin": {"*": ("y",)},
    "histogram": {"*": ("x",)},
    "density": {"*": ("x",)},
    "dotplot": {"*": ("x",)},
    "pie": {"identity": ("y",)},
    "pointrange": {"*": ("y", "ymin", "ymax")},
}

# geoms whose count statistic derives y itself
_COUNT_OWNS_Y = ("bar", "pie")


def check_dataset(dataset: DatasetLike) -> pd.DataFrame:
    frame = as_frame(dataset)
    if len(frame) == 0:
        raise EmptyDataset("dataset has zero rows")
    return frame


def check_columns(frame: pd.DataFrame, aes: Aesthetics, facet: Optional[FacetSpec] = None) -> None:
    """Raise UnknownColumn for the first mapped column missing from `frame`."""
    missing: List[str] = []
    first_channel = None
    for channel, column in aes.columns().items():
        if column not in frame.columns and column not in missing:
            missing.append(column)
            first_channel = first_channel or channel
    if facet is not None:
        for column in facet.variables():
            if column not in frame.columns and column not in missing:
                missing.append(column)
                first_channel = first_channel or "facet"
    if missing:
        raise UnknownColumn(missing[0], missing, channel=first_channel)


def resolve_geometry(spec: GeometrySpec) -> GeometrySpec:
    """Fill in the default statistic/position and check both against the geom."""
    info = get_geom(spec.geom)
    stat = spec.stat or info.default_stat
    if stat not in info.stats:
        raise IncompatibleStatistic(spec.geom, stat, info.stats)
    position = spec.position or info.default_position
    if position not in info.positions:
        raise IncompatiblePosition(spec.geom, position, info.positions)
    return GeometrySpec(geom=spec.geom, stat=stat, position=position)


def check_channels(spec: GeometrySpec, aes: Aesthetics) -> GeomInfo:
    info = get_geom(spec.geom)
    for channel in info.required_channels(spec.stat):
        if not aes.is_set(channel):
            raise MissingAesthetic(spec.geom, channel)
    if spec.stat == "count" and spec.geom in _COUNT_OWNS_Y and aes.is_set("y"):
        raise IncompatibleStatistic(
            spec.geom, "count", info.stats,
            reason="count derives y from the number of rows; remove the y mapping or use stat 'identity'",
        )
    return info


def check_numeric(frame: pd.DataFrame, spec: GeometrySpec, aes: Aesthetics) -> None:
    rules = NUMERIC_CHANNELS.get(spec.geom, {})
    channels = rules.get(spec.stat, rules.get("*", ()))
    for channel in channels:
        column = aes.column(channel)
        if column is None:
            continue
        series = frame[column]
        if is_bool_dtype(series.dtype) or not is_numeric_dtype(series.dtype):
            raise NonNumericChannel(spec.geom, channel, column)


def drop_missing(frame: pd.DataFrame, columns: Mapping[str, str], facet: Optional[FacetSpec] = None) -> pd.DataFrame:
    """Remove rows with missing values in any mapped or facet column."""
    used = list(dict.fromkeys(list(columns.values()) + (facet.variables() if facet else [])))
    kept = frame.dropna(subset=used) if used else frame
    removed = len(frame) - len(kept)
    if removed:
        logger.warning("Removed %d row(s) containing missing values in %s", removed, ", ".join(used))
    if len(kept) == 0:
        raise EmptyDataset(f"no rows left after dropping missing values in {', '.join(used)}")
    return kept


FORMAT_OPTIONS = ("axis_label_format", "x_label_format", "y_label_format", "slice_label_format")


def check_label_formats(options: ChartOptions) -> None:
    """Reject printf-style label formats that cannot format a number."""
    for name in FORMAT_OPTIONS:
        fmt = getattr(options, name)
        if fmt is None:
            continue
        try:
            fmt % 1.0
        except (TypeError, ValueError) as e:
            raise InvalidOption(f"invalid {name} '{fmt}': {e}") from e
