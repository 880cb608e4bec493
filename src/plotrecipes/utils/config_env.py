"""Environment overrides for YAML-loaded configuration.

`PLOTRECIPES_OPTIONS_THEME=minimal` sets `cfg["options"]["theme"]`. Key
segments are matched against existing keys first so option names that
contain underscores (`legend_position`) resolve correctly.
"""
from __future__ import annotations

import json
import os
from typing import Any, Iterable, List, Mapping, Optional

ENV_PREFIX = "PLOTRECIPES_"


def _parse_env_value(v: str):
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    s = v.strip()
    if (s.startswith("[") and s.endswith("]")) or (s.startswith("{") and s.endswith("}")):
        try:
            return json.loads(s)
        except json.JSONDecodeError:
            pass
    low = s.lower()
    if low in {"true", "yes", "y"}:
        return True
    if low in {"false", "no", "n"}:
        return False
    if low in {"null", "none", "~"}:
        return None
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        pass
    return s


def _match_key(cur: Mapping[str, Any], parts: List[str]) -> tuple:
    """Longest run of `parts` naming an existing key of `cur` (case-insensitive)."""
    lookup = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
    for n in range(len(parts), 0, -1):
        candidate = "_".join(parts[:n]).lower()
        if candidate in lookup:
            return lookup[candidate], parts[n:]
    return None, parts


def override_config_from_env(
    cfg: dict,
    prefix: str = ENV_PREFIX,
    allowed_top: Optional[Iterable[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict:
    """Apply `<prefix>SECTION_KEY=value` variables onto `cfg` in place.

    Only top-level sections in `allowed_top` (default: the keys already in
    `cfg`) are touched.
    """
    if not isinstance(cfg, dict):
        return cfg
    env = os.environ if environ is None else environ
    allowed = {k.lower() for k in (allowed_top if allowed_top is not None else cfg.keys())}
    for k in sorted(env):
        if not k.startswith(prefix):
            continue
        parts = [p for p in k[len(prefix):].lower().split("_") if p]
        if not parts:
            continue
        top = parts[0]
        if top not in allowed:
            continue
        value = _parse_env_value(env[k])
        rest = parts[1:]
        if not rest:
            cfg[top] = value
            continue
        cur = cfg.get(top)
        if not isinstance(cur, dict):
            cur = {}
            cfg[top] = cur
        while rest:
            key, tail = _match_key(cur, rest)
            if key is None:
                cur["_".join(rest)] = value
                break
            if not tail:
                cur[key] = value
                break
            if not isinstance(cur[key], dict):
                cur[key] = {}
            cur = cur[key]
            rest = tail
    return cfg
