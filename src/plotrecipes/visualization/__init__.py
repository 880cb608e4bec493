"""
Visualization package for plotrecipes
Scales, themes, legends and the rendered chart objects
"""
from .chart import Chart, RenderedFigure
from .legends import place_legends
from .scales import ContinuousScale, DiscreteScale, discrete_levels, resolve_palette, train_scales
from .styles import THEMES, Theme, apply_theme, get_theme
from .utils import SUPPORTED_FORMATS, human_readable_bytes, save_figure_and_metadata

__all__ = [
    "Chart",
    "RenderedFigure",
    "place_legends",
    "ContinuousScale",
    "DiscreteScale",
    "discrete_levels",
    "resolve_palette",
    "train_scales",
    "THEMES",
    "Theme",
    "apply_theme",
    "get_theme",
    "SUPPORTED_FORMATS",
    "human_readable_bytes",
    "save_figure_and_metadata",
]
