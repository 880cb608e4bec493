"""Loading recipe files and option defaults from YAML.

`load_config()` mirrors the forgiving behaviour used for optional settings
files (missing file -> empty dict), while `load_recipe()` is strict: a recipe
that cannot be read or validated raises.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from plotrecipes.core.config import ChartOptions, RecipeFile
from plotrecipes.utils.config_env import ENV_PREFIX, override_config_from_env

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path("plotrecipes.yaml")
RECIPE_SECTIONS = ("data", "aesthetics", "geometry", "options", "output")


def load_config(path: str | Path = DEFAULT_PATH, apply_env: bool = True) -> Dict[str, Any]:
    """Load YAML config from the provided file path and return a dict.

    Falls back to an empty dict on parse errors or missing file.
    """
    p = Path(path)
    if not p.exists():
        logger.debug("Config file not found: %s", p)
        return {}
    try:
        with p.open("r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse %s: %s", p, e)
        return {}
    if not isinstance(cfg, dict):
        return {}
    if apply_env:
        override_config_from_env(cfg, prefix=ENV_PREFIX)
    return cfg


def default_options(cfg: Optional[Dict[str, Any]] = None) -> ChartOptions:
    """Build ChartOptions from the `defaults` section of a settings file.

    The result is meant to be passed explicitly to each render call.
    """
    section = (cfg or {}).get("defaults") or {}
    return ChartOptions.model_validate(section)


def load_recipe(path: str | Path, apply_env: bool = True) -> RecipeFile:
    """Read and validate a recipe file.

    A relative `data` path is resolved against the recipe file's directory.

    Raises:
        FileNotFoundError: The recipe file does not exist.
        yaml.YAMLError: The file is not valid YAML.
        pydantic.ValidationError: The recipe does not match the schema.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    with p.open("r", encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{p}: a recipe file must contain a mapping, got {type(cfg).__name__}")
    if apply_env:
        override_config_from_env(cfg, prefix=ENV_PREFIX, allowed_top=RECIPE_SECTIONS)
    data = cfg.get("data")
    if isinstance(data, str) and not Path(data).is_absolute():
        cfg["data"] = str((p.parent / data).resolve())
    return RecipeFile.model_validate(cfg)
