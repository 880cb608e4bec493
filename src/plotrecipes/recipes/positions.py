"""Position adjustments applied to encoded layer rows.

All functions expect a numeric `xpos` column and return a new frame.
"""

from __future__ import annotations

import numpy as np
import pandas as pd


def resolution(values, discrete: bool = False) -> float:
    """Smallest gap between distinct values (1.0 for discrete axes)."""
    if discrete:
        return 1.0
    arr = np.unique(np.asarray(values, dtype=float))
    arr = arr[np.isfinite(arr)]
    if arr.size < 2:
        return 1.0
    return float(np.min(np.diff(arr)))


def jitter(layer: pd.DataFrame, rng: np.random.Generator, width: float, height: float = 0.0, y_res: float = 1.0, x_res: float = 1.0) -> pd.DataFrame:
    out = layer.copy()
    n = len(out)
    if width > 0:
        out["xpos"] = out["xpos"] + rng.uniform(-width * x_res, width * x_res, n)
    if height > 0 and "y" in out:
        out["y"] = out["y"].astype(float) + rng.uniform(-height * y_res, height * y_res, n)
    return out


def dodge(layer: pd.DataFrame, width: float) -> pd.DataFrame:
    """Place the groups present at each x side by side within `width`."""
    out = layer.copy()
    offsets = np.zeros(len(out))
    widths = np.full(len(out), float(width))
    for _, idx in out.groupby("xpos", sort=False).groups.items():
        sub = out.loc[idx]
        groups = list(pd.unique(sub["group"]))
        n = len(groups)
        slot = width / n
        for g_i, g in enumerate(groups):
            rows = sub.index[sub["group"] == g]
            pos = out.index.get_indexer(rows)
            offsets[pos] = (g_i - (n - 1) / 2.0) * slot
            widths[pos] = slot
    out["xpos"] = out["xpos"] + offsets
    out["width"] = widths
    return out


def stack(layer: pd.DataFrame) -> pd.DataFrame:
    """Cumulative ymin/ymax per x in row order; negatives stack downwards."""
    out = layer.copy()
    y = out["y"].astype(float)
    pos = y.where(y >= 0, 0.0)
    neg = y.where(y < 0, 0.0)
    cpos = pos.groupby(out["xpos"], sort=False).cumsum()
    cneg = neg.groupby(out["xpos"], sort=False).cumsum()
    out["ymin"] = np.where(y >= 0, cpos - pos, cneg)
    out["ymax"] = np.where(y >= 0, cpos, cneg - neg)
    return out


def fill(layer: pd.DataFrame) -> pd.DataFrame:
    """Stack, then scale each x to a total height of one."""
    out = stack(layer)
    y = out["y"].astype(float)
    total_pos = y.where(y >= 0, 0.0).groupby(out["xpos"], sort=False).transform("sum")
    total_neg = (-y.where(y < 0, 0.0)).groupby(out["xpos"], sort=False).transform("sum")
    denom = np.where(y >= 0, total_pos, total_neg)
    denom = np.where(denom == 0, 1.0, denom)
    out["ymin"] = out["ymin"] / denom
    out["ymax"] = out["ymax"] / denom
    return out


def from_zero(layer: pd.DataFrame) -> pd.DataFrame:
    """Unstacked bars: each row spans zero to y."""
    out = layer.copy()
    if "y" in out:
        y = out["y"].astype(float)
        out["ymin"] = np.minimum(y, 0.0)
        out["ymax"] = np.maximum(y, 0.0)
    return out
