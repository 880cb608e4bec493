"""Rendered chart values and their export surface."""

from __future__ import annotations

import base64
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..errors import ChartSaveError
from .utils import SUPPORTED_FORMATS, format_from_suffix, save_figure_and_metadata

logger = logging.getLogger(__name__)


class RenderedFigure:
    """Shared export behaviour for single charts and arranged grids."""

    def __init__(self, figure: Figure) -> None:
        self.figure = figure

    def describe(self) -> Dict[str, Any]:
        raise NotImplementedError

    def save(
        self,
        path: Union[str, Path],
        width: Optional[float] = None,
        height: Optional[float] = None,
        resolution: Optional[int] = None,
        metadata: bool = False,
    ) -> Path:
        """Write the figure to `path`; the format follows the file suffix.

        Args:
            path: Destination file. Parent directories are created.
            width: Width in inches. Defaults to the rendered size.
            height: Height in inches. Defaults to the rendered size.
            resolution: Dots per inch for raster formats.
            metadata: Also write a JSON sidecar with `describe()`.

        Raises:
            ChartSaveError: On unsupported formats or filesystem failures.
        """
        out = Path(path)
        fmt = format_from_suffix(out)
        if fmt not in SUPPORTED_FORMATS:
            raise ChartSaveError(f"unsupported image format '{fmt}' for {out}")
        original_size = self.figure.get_size_inches().copy()
        w = width if width is not None else original_size[0]
        h = height if height is not None else original_size[1]
        dpi = resolution if resolution is not None else self.figure.get_dpi()
        meta = self.describe() if metadata else None
        try:
            self.figure.set_size_inches(w, h)
            return save_figure_and_metadata(self.figure, out, meta, fmt=fmt, dpi=dpi)
        except ChartSaveError:
            raise
        except (OSError, ValueError) as e:
            raise ChartSaveError(f"failed to save chart to {out}: {e}") from e
        finally:
            self.figure.set_size_inches(*original_size)

    def to_bytes(self, fmt: str = "png", resolution: Optional[int] = None) -> bytes:
        buf = io.BytesIO()
        self.figure.savefig(buf, format=fmt, dpi=resolution or self.figure.get_dpi(), bbox_inches="tight")
        return buf.getvalue()

    def to_data_uri(self, fmt: str = "png") -> str:
        mime = "image/svg+xml" if fmt == "svg" else f"image/{fmt}"
        payload = base64.b64encode(self.to_bytes(fmt)).decode("utf8")
        return f"data:{mime};base64,{payload}"


class Chart(RenderedFigure):
    """A rendered recipe.

    Attributes:
        figure: The matplotlib figure holding every panel.
        axes: Panel axes in row-major order.
        data: Encoded layer data after the statistic and position adjustment.
        geometry: Geometry spec with its statistic and position resolved.
        aesthetics: The validated aesthetic mapping.
        options: The validated chart options.
        scales: Trained non-positional scales keyed by channel.
    """

    def __init__(self, figure, axes, data, geometry, aesthetics, options, scales, recipe) -> None:
        super().__init__(figure)
        self.axes: List[Axes] = list(axes)
        self.data: pd.DataFrame = data
        self.geometry = geometry
        self.aesthetics = aesthetics
        self.options = options
        self.scales = scales
        # validated recipe, kept so arrange() can redraw the chart elsewhere
        self.recipe = recipe

    def __repr__(self) -> str:
        g = self.geometry
        return f"Chart(geom={g.geom!r}, stat={g.stat!r}, position={g.position!r}, rows={len(self.data)}, panels={len(self.axes)})"

    def describe(self) -> Dict[str, Any]:
        scales = {}
        for channel, scale in self.scales.items():
            entry: Dict[str, Any] = {"column": scale.column}
            if hasattr(scale, "levels"):
                entry["levels"] = [str(v) for v in scale.levels]
                entry["values"] = [str(v) for v in scale.values]
            else:
                entry["limits"] = list(scale.limits)
            scales[channel] = entry
        return {
            "geometry": self.geometry.model_dump(),
            "aesthetics": self.aesthetics.model_dump(exclude_none=True),
            "theme": self.options.theme,
            "legend_position": self.options.legend_position,
            "panels": len(self.axes),
            "scales": scales,
            "data": json.loads(self.data.to_json(orient="records", date_format="iso")),
        }
