from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .data.datasets import load_table
from .errors import RecipeError
from .recipes.catalogue import list_recipes
from .recipes.render import render
from .utils.config import load_recipe

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="plotrecipes",
        description="Render declarative chart recipes to image files.",
    )
    p.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render a YAML recipe file")
    r.add_argument("recipe", type=Path, help="Path to the recipe YAML file")
    r.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output image path (default: output.path from the recipe)",
    )
    r.add_argument("--width", type=float, default=None, help="Width in inches")
    r.add_argument("--height", type=float, default=None, help="Height in inches")
    r.add_argument("--dpi", type=int, default=None, help="Resolution for raster formats")
    r.add_argument("--theme", default=None, help="Override the recipe theme")
    r.add_argument(
        "--metadata",
        action="store_true",
        help="Write a JSON sidecar describing the chart",
    )

    sub.add_parser("catalogue", help="List the built-in recipes")
    return p.parse_args(argv)


def run_render(args) -> Path:
    recipe = load_recipe(args.recipe)
    output = recipe.output
    out = args.out or (Path(output.path) if output else None)
    if out is None:
        raise SystemExit(f"{args.recipe}: no output path; pass --out or set output.path")
    if output and not out.is_absolute() and args.out is None:
        out = args.recipe.parent / out
    options = recipe.options
    if args.theme:
        options = options.merged(theme=args.theme)
    frame = load_table(recipe.data)
    logger.info("Loaded %s (%d rows)", recipe.data, len(frame))
    chart = render(frame, recipe.aesthetics, recipe.geometry, options)
    return chart.save(
        out,
        width=args.width or (output.width if output else None),
        height=args.height or (output.height if output else None),
        resolution=args.dpi or (output.resolution if output else None),
        metadata=args.metadata or bool(output and output.metadata),
    )


def run_catalogue() -> None:
    presets = list_recipes()
    width = max(len(name) for name in presets)
    for name, preset in presets.items():
        geometry = preset.geometry
        print(f"{name:<{width}}  {geometry.geom}/{geometry.stat or '-'}/{geometry.position or '-'}  {preset.description}")


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "catalogue":
        run_catalogue()
        return 0
    try:
        run_render(args)
    except (RecipeError, FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
