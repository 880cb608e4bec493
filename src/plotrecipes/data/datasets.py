from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from ..errors import InvalidDataset
from ..types import DatasetLike

logger = logging.getLogger(__name__)


def as_frame(dataset: DatasetLike) -> pd.DataFrame:
    """Return `dataset` as a DataFrame without copying an existing frame.

    - A mapping of column -> sequence must be rectangular (equal lengths).
    - Anything else is rejected with InvalidDataset.
    """
    if isinstance(dataset, pd.DataFrame):
        return dataset
    if isinstance(dataset, Mapping):
        lengths = {}
        for name, values in dataset.items():
            if np.ndim(values) == 0:
                raise InvalidDataset(f"column '{name}' is a scalar, expected a sequence")
            lengths[name] = len(values)
        if len(set(lengths.values())) > 1:
            detail = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise InvalidDataset(f"dataset is not rectangular: column lengths differ ({detail})")
        return pd.DataFrame({k: list(v) for k, v in dataset.items()})
    raise InvalidDataset(f"unsupported dataset type {type(dataset).__name__}; expected a DataFrame or a mapping of columns")


def load_table(path: Union[str, Path]) -> pd.DataFrame:
    """Load a CSV, TSV or Excel table from disk."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    suffix = p.suffix.lower()
    if suffix in {".xls", ".xlsx"}:
        df = pd.read_excel(p)
    elif suffix in {".tsv", ".tab"}:
        df = pd.read_csv(p, sep="\t", low_memory=False)
    else:
        df = pd.read_csv(p, low_memory=False)
    logger.debug("Loaded %s: %d rows x %d columns", p, len(df), len(df.columns))
    return df
