from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


GeomName = Literal[
    "point",
    "line",
    "bar",
    "boxplot",
    "violin",
    "histogram",
    "density",
    "dotplot",
    "pie",
    "pointrange",
    "segment",
    "text",
]

StatName = Literal["identity", "count", "summary"]

PositionName = Literal["identity", "jitter", "dodge", "stack", "fill"]

ThemeName = Literal["grey", "bw", "minimal", "classic", "light", "dark", "void"]

LegendPosition = Literal["right", "left", "top", "bottom", "inside", "none"]

FacetScales = Literal["fixed", "free", "free_x", "free_y"]


class Constant(BaseModel):
    """A literal value set on a channel instead of a column reference."""

    model_config = ConfigDict(frozen=True)

    value: Union[bool, int, float, str]


def const(value: Any) -> Constant:
    return Constant(value=value)


ChannelValue = Union[str, int, float, Constant]

CHANNELS = (
    "x",
    "y",
    "colour",
    "fill",
    "shape",
    "linetype",
    "size",
    "label",
    "ymin",
    "ymax",
    "xend",
    "yend",
)


class Aesthetics(BaseModel):
    """Column-to-channel assignments.

    Strings name dataset columns; numbers and `Constant` values are literals.
    `color` is accepted as an alias of `colour`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    x: Optional[ChannelValue] = None
    y: Optional[ChannelValue] = None
    colour: Optional[ChannelValue] = Field(default=None, alias="color")
    fill: Optional[ChannelValue] = None
    shape: Optional[ChannelValue] = None
    linetype: Optional[ChannelValue] = None
    size: Optional[ChannelValue] = None
    label: Optional[ChannelValue] = None
    ymin: Optional[ChannelValue] = None
    ymax: Optional[ChannelValue] = None
    xend: Optional[ChannelValue] = None
    yend: Optional[ChannelValue] = None

    def columns(self) -> Dict[str, str]:
        """Return channel -> column name for every column-mapped channel."""
        out: Dict[str, str] = {}
        for channel in CHANNELS:
            value = getattr(self, channel)
            if isinstance(value, str):
                out[channel] = value
        return out

    def constants(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for channel in CHANNELS:
            value = getattr(self, channel)
            if isinstance(value, Constant):
                out[channel] = value.value
            elif value is not None and not isinstance(value, str):
                out[channel] = value
        return out

    def column(self, channel: str) -> Optional[str]:
        value = getattr(self, channel)
        return value if isinstance(value, str) else None

    def is_set(self, channel: str) -> bool:
        return getattr(self, channel) is not None


class GeometrySpec(BaseModel):
    """Geometry tag plus optional statistic and position adjustment.

    Omitted `stat` / `position` are resolved to the geometry's defaults by the
    dispatcher. A bare geometry name is accepted in place of a mapping.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    geom: GeomName
    stat: Optional[StatName] = None
    position: Optional[PositionName] = None

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"geom": data}
        return data


class FacetSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: Optional[str] = None
    cols: Optional[str] = None
    scales: FacetScales = "fixed"

    def variables(self) -> List[str]:
        return [v for v in (self.rows, self.cols) if v]


class Labels(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    title: Optional[str] = None
    subtitle: Optional[str] = None
    caption: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    colour: Optional[str] = Field(default=None, alias="color")
    fill: Optional[str] = None
    shape: Optional[str] = None
    linetype: Optional[str] = None
    size: Optional[str] = None


class ChartOptions(BaseModel):
    """Styling and layout hints for a single chart.

    The theme is part of the options value; nothing here touches matplotlib's
    global rcParams.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    palette: Optional[Union[str, List[str], Dict[str, str]]] = None
    continuous_cmap: str = "viridis"
    theme: ThemeName = "grey"
    base_size: Optional[float] = Field(default=None, gt=0)
    size: Optional[float] = Field(default=None, gt=0)
    bins: Optional[int] = Field(default=None, ge=1)
    binwidth: Optional[float] = Field(default=None, gt=0)
    width: float = Field(default=0.9, gt=0, le=1.0)
    alpha: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    labels: Labels = Labels()
    axis_label_format: Optional[str] = None
    x_label_format: Optional[str] = None
    y_label_format: Optional[str] = None
    slice_label_format: Optional[str] = None
    legend_position: LegendPosition = "right"
    facet: Optional[FacetSpec] = None
    width_in: float = Field(default=6.4, gt=0)
    height_in: float = Field(default=4.8, gt=0)
    dpi: int = Field(default=100, ge=1)
    jitter_width: float = Field(default=0.4, ge=0)
    jitter_height: float = Field(default=0.0, ge=0)
    seed: int = 0

    def merged(self, **overrides: Any) -> "ChartOptions":
        """Return a copy with `overrides` applied and re-validated."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ChartOptions.model_validate(data)


class OutputConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    resolution: Optional[int] = Field(default=None, ge=1)
    metadata: bool = False


class RecipeFile(BaseModel):
    """A recipe as stored in YAML: where the data lives and how to draw it."""

    model_config = ConfigDict(extra="forbid")

    data: str
    aesthetics: Aesthetics
    geometry: GeometrySpec
    options: ChartOptions = ChartOptions()
    output: Optional[OutputConfig] = None
