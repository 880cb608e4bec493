from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

import pandas as pd

# Anything `render` accepts as a dataset
DatasetLike = Union[pd.DataFrame, Mapping[str, Sequence[Any]]]

# discrete channels that split rows into groups
GROUP_CHANNELS = ("fill", "colour", "shape", "linetype")
