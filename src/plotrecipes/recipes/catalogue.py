"""Named chart recipes: a geometry plus option defaults for common plot types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..core.config import ChartOptions, GeometrySpec
from ..types import DatasetLike
from ..visualization.chart import Chart
from .render import AestheticsLike, coerce_options, render


@dataclass(frozen=True)
class RecipePreset:
    name: str
    description: str
    geometry: GeometrySpec
    defaults: Dict[str, Any] = field(default_factory=dict)

    def options(self, overrides: Optional[Mapping[str, Any]] = None) -> ChartOptions:
        merged = dict(self.defaults)
        merged.update(overrides or {})
        return coerce_options(merged)


_REGISTRY: Dict[str, RecipePreset] = {}


def register_recipe(preset: RecipePreset) -> None:
    _REGISTRY[preset.name.lower()] = preset


def list_recipes() -> Dict[str, RecipePreset]:
    return dict(_REGISTRY)


def get_recipe(name: str) -> RecipePreset:
    try:
        return _REGISTRY[name.lower()]
    except KeyError:
        raise KeyError(f"unknown recipe '{name}' (known: {', '.join(sorted(_REGISTRY))})") from None


def render_recipe(name: str, dataset: DatasetLike, aesthetics: AestheticsLike, **options: Any) -> Chart:
    """Render the preset `name`; keyword arguments override its option defaults."""
    preset = get_recipe(name)
    return render(dataset, aesthetics, preset.geometry, preset.options(options))


def _builtin(name: str, description: str, geom: str, stat: Optional[str] = None, position: Optional[str] = None, **defaults: Any) -> None:
    register_recipe(RecipePreset(name, description, GeometrySpec(geom=geom, stat=stat, position=position), defaults))


_builtin("scatter", "Points for two continuous variables", "point")
_builtin("jitter_strip", "Jittered points of a continuous variable per category", "point", position="jitter", alpha=0.7, jitter_width=0.2)
_builtin("line", "Lines connecting observations in x order", "line")
_builtin("mean_line", "Line through the mean of y at each x", "line", stat="summary")
_builtin("count_bar", "Bars counting rows per category", "bar", stat="count")
_builtin("bar", "Bars with heights taken from y", "bar", stat="identity")
_builtin("stacked_bar", "Counts per category stacked by group", "bar", stat="count", position="stack")
_builtin("dodged_bar", "Counts per category side by side by group", "bar", stat="count", position="dodge")
_builtin("percent_bar", "Group proportions per category", "bar", stat="count", position="fill", y_label_format="%.2f")
_builtin("mean_bar", "Bars showing the mean of y per category", "bar", stat="summary", position="dodge")
_builtin("boxplot", "Box and whisker summary per category", "boxplot")
_builtin("violin", "Kernel density outline per category", "violin")
_builtin("histogram", "Binned counts of a continuous variable", "histogram")
_builtin("density", "Kernel density estimate of a continuous variable", "density", alpha=0.5)
_builtin("dotplot", "Stacked dots per bin", "dotplot")
_builtin("pie", "Category shares of a whole", "pie", stat="count", theme="void", slice_label_format="%.0f%%")
_builtin("mean_pointrange", "Mean with one standard error per category", "pointrange", stat="summary")
_builtin("segment", "Line segments between two points", "segment")
_builtin("labels", "Text labels at data positions", "text")
