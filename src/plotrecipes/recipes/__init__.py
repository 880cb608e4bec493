from .render import Recipe, draw, prepare, render
from .arrange import ChartGrid, arrange
from .batch import RenderRequest, render_many
from .catalogue import RecipePreset, get_recipe, list_recipes, register_recipe, render_recipe

__all__ = [
    "Recipe",
    "draw",
    "prepare",
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
]
