"""plotrecipes public API: declarative chart recipes rendered with matplotlib and seaborn."""

from .core.config import (
    Aesthetics,
    ChartOptions,
    Constant,
    FacetSpec,
    GeometrySpec,
    Labels,
    RecipeFile,
    const,
)
from .core.registry import get_geom, list_geoms
from .errors import (
    ChartSaveError,
    EmptyDataset,
    IncompatiblePosition,
    IncompatibleStatistic,
    InvalidDataset,
    InvalidOption,
    MissingAesthetic,
    NonNumericChannel,
    RecipeError,
    UnknownColumn,
)
from .data.datasets import as_frame, load_table
from .visualization.chart import Chart
from .recipes.render import render
from .recipes.arrange import ChartGrid, arrange
from .recipes.batch import RenderRequest, render_many
from .recipes.catalogue import RecipePreset, get_recipe, list_recipes, register_recipe, render_recipe
from .utils.config import load_config, load_recipe

__version__ = "0.1.0"

__all__ = [
    "Aesthetics",
    "ChartOptions",
    "Constant",
    "FacetSpec",
    "GeometrySpec",
    "Labels",
    "RecipeFile",
    "const",
    "get_geom",
    "list_geoms",
    "ChartSaveError",
    "EmptyDataset",
    "IncompatiblePosition",
    "IncompatibleStatistic",
    "InvalidDataset",
    "InvalidOption",
    "MissingAesthetic",
    "NonNumericChannel",
    "RecipeError",
    "UnknownColumn",
    "as_frame",
    "load_table",
    "Chart",
    "render",
    "ChartGrid",
    "arrange",
    "RenderRequest",
    "render_many",
    "RecipePreset",
    "get_recipe",
    "list_recipes",
    "register_recipe",
    "render_recipe",
    "load_config",
    "load_recipe",
]
