from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.config import Aesthetics, ChartOptions
from ..types import GROUP_CHANNELS
from ..visualization.scales import DiscreteScale, Scale, as_numeric, is_temporal


def build_layer(frame: pd.DataFrame, columns: Mapping[str, str]) -> pd.DataFrame:
    """Copy the mapped columns of `frame` under their channel names."""
    layer = pd.DataFrame({channel: _column(frame[col]) for channel, col in columns.items()})
    layer.index = pd.RangeIndex(len(layer))
    return layer


def _column(series: pd.Series):
    # datetime columns keep their dtype (and timezone) so positions can use date units
    if is_temporal(series):
        return series.reset_index(drop=True)
    return series.to_numpy()


@dataclass
class LayerContext:
    """Everything an encoder needs besides the axes and the layer rows."""

    geom: str
    stat: str
    position: str
    aes: Aesthetics
    options: ChartOptions
    scales: Dict[str, Scale]
    columns: Dict[str, str]
    x_levels: Optional[List[Any]] = None
    y_levels: Optional[List[Any]] = None
    rng: np.random.Generator = field(default_factory=lambda: np.random.default_rng(0))
    bin_edges: Optional[np.ndarray] = None

    @property
    def group_channels(self) -> List[str]:
        """Discrete non-positional channels that split the data into groups."""
        return [
            ch for ch in GROUP_CHANNELS
            if isinstance(self.scales.get(ch), DiscreteScale) and ch in self.columns
        ]

    @property
    def hue_channel(self) -> Optional[str]:
        for ch in ("fill", "colour"):
            if isinstance(self.scales.get(ch), DiscreteScale):
                return ch
        return None

    def keys(self) -> List[str]:
        return ["x"] + self.group_channels

    def with_group(self, layer: pd.DataFrame) -> pd.DataFrame:
        out = layer.copy()
        groups = self.group_channels
        if groups and len(out):
            out["group"] = out.groupby(groups, sort=False, dropna=False, observed=True).ngroup()
        else:
            out["group"] = 0
        return out

    def xpos(self, values: Sequence[Any]) -> np.ndarray:
        return _positions(values, self.x_levels)

    def ypos(self, values: Sequence[Any]) -> np.ndarray:
        return _positions(values, self.y_levels)

    def colours(self, layer: pd.DataFrame, prefer: Sequence[str] = ("colour", "fill"), default: str = "#333333") -> List[Any]:
        for channel in prefer:
            scale = self.scales.get(channel)
            if scale is not None and channel in layer:
                return scale.map(layer[channel])
        constants = self.aes.constants()
        for channel in prefer:
            if channel in constants:
                return [constants[channel]] * len(layer)
        return [default] * len(layer)

    def sizes(self, layer: pd.DataFrame, default: float) -> List[float]:
        scale = self.scales.get("size")
        if scale is not None and "size" in layer:
            return [float(v) for v in scale.map(layer["size"])]
        constant = self.aes.constants().get("size")
        if constant is not None:
            return [float(constant)] * len(layer)
        if self.options.size is not None:
            return [float(self.options.size)] * len(layer)
        return [default] * len(layer)

    def constant(self, channel: str, default: Any = None) -> Any:
        return self.aes.constants().get(channel, default)

    @property
    def alpha(self) -> Optional[float]:
        return self.options.alpha


def _positions(values: Sequence[Any], levels: Optional[List[Any]]) -> np.ndarray:
    if levels is None:
        return as_numeric(values)
    index = {lvl: i for i, lvl in enumerate(levels)}
    return np.array([index.get(v, np.nan) for v in values], dtype=float)
