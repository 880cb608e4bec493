"""The simple statistics a recipe can request.

Estimators with real numerical content (binning, densities, quartiles) are
left to seaborn/numpy inside the encoders.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd


def count(layer: pd.DataFrame, keys: Sequence[str]) -> pd.DataFrame:
    """Rows per key combination, in order of first appearance."""
    counted = (
        layer.groupby(list(keys), sort=False, dropna=False, observed=True)
        .size()
        .reset_index(name="count")
    )
    counted["y"] = counted["count"].astype(float)
    return counted


def summarise(layer: pd.DataFrame, keys: Sequence[str]) -> pd.DataFrame:
    """Mean of y per key combination with a one standard error range.

    Single-row groups get a zero-width range.
    """
    grouped = layer.groupby(list(keys), sort=False, dropna=False, observed=True)["y"]
    out = grouped.agg(["mean", "std", "count"]).reset_index()
    se = (out["std"] / np.sqrt(out["count"])).fillna(0.0)
    out = out.rename(columns={"mean": "y", "count": "n"}).drop(columns=["std"])
    out["ymin"] = out["y"] - se
    out["ymax"] = out["y"] + se
    return out


def bin_edges(x, bins: Optional[int] = None, binwidth: Optional[float] = None) -> np.ndarray:
    """Histogram bin edges for `x`; `binwidth` wins over `bins`.

    Edges are meant to be computed once over every panel so faceted
    histograms share their bins.
    """
    values = np.asarray(x, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return np.array([0.0, 1.0])
    lo, hi = float(values.min()), float(values.max())
    if binwidth is not None:
        n = max(int(np.ceil((hi - lo) / binwidth)), 1)
        edges = lo + binwidth * np.arange(n + 1)
        if edges[-1] < hi:
            edges = np.append(edges, edges[-1] + binwidth)
        return edges
    return np.histogram_bin_edges(values, bins=bins or "auto")
