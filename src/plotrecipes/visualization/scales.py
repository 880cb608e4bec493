"""Scale training: data levels -> colours, markers, line styles and sizes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib import colormaps
from matplotlib.colors import Normalize, is_color_like, to_hex
from matplotlib.dates import date2num
from pandas.api.types import (
    is_bool_dtype,
    is_datetime64_any_dtype,
    is_numeric_dtype,
    is_timedelta64_dtype,
)

from ..errors import InvalidOption

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = "colorblind"
SHAPES = ("o", "^", "s", "D", "v", "P", "X", "*")
LINETYPES = ("-", "--", ":", "-.", (0, (5, 1)), (0, (3, 1, 1, 1, 1, 1)))
SIZE_RANGE = (2.0, 9.0)

PaletteSpec = Union[None, str, Sequence[str], Mapping[str, str]]


def is_temporal(series: pd.Series) -> bool:
    return is_datetime64_any_dtype(series.dtype) or is_timedelta64_dtype(series.dtype)


def is_discrete(series: pd.Series) -> bool:
    if is_temporal(series):
        return False
    if isinstance(series.dtype, pd.CategoricalDtype):
        return True
    if is_bool_dtype(series.dtype):
        return True
    return not is_numeric_dtype(series.dtype)


def as_numeric(values) -> np.ndarray:
    """Float positions for numeric, datetime (matplotlib date numbers) or timedelta (seconds) values."""
    series = values if isinstance(values, pd.Series) else pd.Series(values)
    if is_datetime64_any_dtype(series.dtype):
        if getattr(series.dt, "tz", None) is not None:
            series = series.dt.tz_convert("UTC").dt.tz_localize(None)
        out = np.full(len(series), np.nan)
        mask = series.notna().to_numpy()
        out[mask] = date2num(series[mask].to_numpy(dtype="datetime64[ns]"))
        return out
    if is_timedelta64_dtype(series.dtype):
        return series.dt.total_seconds().to_numpy(dtype=float)
    return pd.to_numeric(series, errors="coerce").to_numpy(dtype=float)


def discrete_levels(series: pd.Series) -> List[Any]:
    """Levels in stable input order, or category order for categoricals.

    Unused categories are dropped.
    """
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(series.dropna().unique())
        return [c for c in series.cat.categories if c in present]
    if is_discrete(series):
        return list(pd.unique(series.dropna()))
    return sorted(pd.unique(series.dropna()))


def resolve_palette(palette: PaletteSpec, levels: Sequence[Any]) -> Dict[Any, str]:
    """Map each level to a hex colour.

    - None or a name: delegated to seaborn's named palettes.
    - A list: used in order; it must have at least one colour per level.
    - A mapping: keyed by level (compared as strings); every level must appear.
    """
    n = len(levels)
    if n == 0:
        return {}
    if palette is None or isinstance(palette, str):
        name = palette or DEFAULT_PALETTE
        try:
            colours = sns.color_palette(name, n_colors=n)
        except (ValueError, KeyError) as e:
            raise InvalidOption(f"unknown palette '{name}'") from e
        return {lvl: to_hex(c) for lvl, c in zip(levels, colours)}
    if isinstance(palette, Mapping):
        lookup = {str(k): v for k, v in palette.items()}
        _check_colours(lookup.values())
        missing = [lvl for lvl in levels if str(lvl) not in lookup]
        if missing:
            raise InvalidOption(
                f"palette has no colour for level(s): {', '.join(str(m) for m in missing)}"
            )
        return {lvl: to_hex(lookup[str(lvl)]) for lvl in levels}
    colours = list(palette)
    _check_colours(colours)
    if len(colours) < n:
        raise InvalidOption(f"insufficient values in palette: {n} needed but only {len(colours)} provided")
    return {lvl: to_hex(c) for lvl, c in zip(levels, colours)}


def _check_colours(colours) -> None:
    bad = [c for c in colours if not is_color_like(c)]
    if bad:
        raise InvalidOption(f"invalid colour value(s): {', '.join(map(str, bad))}")


@dataclass(frozen=True)
class DiscreteScale:
    channel: str
    column: str
    levels: Tuple[Any, ...]
    values: Tuple[Any, ...]

    @property
    def mapping(self) -> Dict[Any, Any]:
        return dict(zip(self.levels, self.values))

    def map(self, series: pd.Series) -> List[Any]:
        lookup = self.mapping
        return [lookup.get(v) for v in series]


@dataclass(frozen=True)
class ContinuousScale:
    """Linear map from a numeric column onto a colormap or a size range."""

    channel: str
    column: str
    limits: Tuple[float, float]
    cmap: Optional[str] = None
    output_range: Tuple[float, float] = SIZE_RANGE

    @property
    def norm(self) -> Normalize:
        lo, hi = self.limits
        if lo == hi:
            hi = lo + 1.0
        return Normalize(vmin=lo, vmax=hi)

    def map(self, series: pd.Series) -> List[Any]:
        scaled = np.clip(self.norm(as_numeric(series)), 0.0, 1.0)
        if self.cmap is not None:
            cmap = colormaps[self.cmap]
            return [to_hex(cmap(v)) for v in scaled]
        lo, hi = self.output_range
        return [float(lo + (hi - lo) * v) for v in scaled]

    def breaks(self, n: int = 3) -> List[float]:
        lo, hi = self.limits
        if lo == hi:
            return [float(lo)]
        return [float(v) for v in np.linspace(lo, hi, n)]


Scale = Union[DiscreteScale, ContinuousScale]


def train_scales(frame: pd.DataFrame, columns: Mapping[str, str], palette: PaletteSpec, cmap: str) -> Dict[str, Scale]:
    """Train one scale per non-positional mapped channel.

    `columns` maps channel -> column name. Colour and fill mapped to the same
    discrete column share one colour assignment.
    """
    scales: Dict[str, Scale] = {}
    for channel in ("fill", "colour"):
        col = columns.get(channel)
        if col is None:
            continue
        series = frame[col]
        if is_discrete(series):
            levels = discrete_levels(series)
            mapping = resolve_palette(palette, levels)
            scales[channel] = DiscreteScale(channel, col, tuple(levels), tuple(mapping[lvl] for lvl in levels))
        else:
            if cmap not in colormaps:
                raise InvalidOption(f"unknown colormap '{cmap}'")
            scales[channel] = ContinuousScale(channel, col, _limits(series), cmap=cmap)
    for channel, choices in (("shape", SHAPES), ("linetype", LINETYPES)):
        col = columns.get(channel)
        if col is None:
            continue
        series = frame[col]
        if not is_discrete(series):
            raise InvalidOption(f"a continuous column ('{col}') cannot be mapped to {channel}")
        levels = discrete_levels(series)
        if len(levels) > len(choices):
            logger.warning(
                "%s scale has %d levels but only %d distinct values; values are recycled",
                channel, len(levels), len(choices),
            )
        values = tuple(choices[i % len(choices)] for i in range(len(levels)))
        scales[channel] = DiscreteScale(channel, col, tuple(levels), values)
    col = columns.get("size")
    if col is not None:
        series = frame[col]
        if is_discrete(series):
            levels = discrete_levels(series)
            lo, hi = SIZE_RANGE
            steps = np.linspace(lo, hi, max(len(levels), 2))[: len(levels)]
            scales["size"] = DiscreteScale("size", col, tuple(levels), tuple(float(s) for s in steps))
        else:
            scales["size"] = ContinuousScale("size", col, _limits(series))
    return scales


def _limits(series: pd.Series) -> Tuple[float, float]:
    values = as_numeric(series)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return (0.0, 1.0)
    return (float(values.min()), float(values.max()))
