from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple


@dataclass(frozen=True)
class GeomInfo:
    """Dispatch-table entry for one geometry.

    The first entry of `stats` / `positions` is the default used when a
    recipe leaves the tag out.
    """

    name: str
    encoder: Callable[..., Any]
    stats: Tuple[str, ...]
    positions: Tuple[str, ...]
    required: Dict[str, Tuple[str, ...]]
    discrete_x: bool = False

    @property
    def default_stat(self) -> str:
        return self.stats[0]

    @property
    def default_position(self) -> str:
        return self.positions[0]

    def required_channels(self, stat: str) -> Tuple[str, ...]:
        return self.required.get(stat, self.required.get("*", ()))


_GEOMS: Dict[str, GeomInfo] = {}


def register_geom(
    name: str,
    *,
    stats: Tuple[str, ...],
    positions: Tuple[str, ...],
    required: Dict[str, Tuple[str, ...]],
    discrete_x: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        _GEOMS[name.lower()] = GeomInfo(
            name=name.lower(),
            encoder=fn,
            stats=tuple(stats),
            positions=tuple(positions),
            required=dict(required),
            discrete_x=discrete_x,
        )
        return fn
    return deco


def get_geom(name: str) -> GeomInfo:
    return _GEOMS[name.lower()]


def list_geoms() -> Dict[str, GeomInfo]:
    return dict(_GEOMS)
