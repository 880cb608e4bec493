"""Render many independent recipes on a thread pool."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..types import DatasetLike
from ..visualization.chart import Chart
from .render import AestheticsLike, GeometryLike, OptionsLike, render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    dataset: DatasetLike
    aesthetics: AestheticsLike
    geometry: GeometryLike
    options: OptionsLike = None


RequestLike = Union[RenderRequest, Mapping[str, Any], tuple]


def _as_request(item: RequestLike) -> RenderRequest:
    if isinstance(item, RenderRequest):
        return item
    if isinstance(item, Mapping):
        return RenderRequest(**item)
    return RenderRequest(*item)


def render_many(requests: Iterable[RequestLike], max_workers: Optional[int] = None) -> List[Chart]:
    """Render every request and return the charts in request order.

    Requests share nothing, so no coordination is needed between workers.
    The first failing request's exception is re-raised after all workers finish.
    """
    work = [_as_request(r) for r in requests]
    if not work:
        return []
    logger.info("Rendering %d chart(s) (max_workers=%s)", len(work), max_workers)
    results: Dict[int, Chart] = {}
    errors: Dict[int, BaseException] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(render, req.dataset, req.aesthetics, req.geometry, req.options): i
            for i, req in enumerate(work)
        }
        for future in as_completed(futures):
            i = futures[future]
            try:
                results[i] = future.result()
            except Exception as e:
                logger.error("Chart %d failed: %s", i, e)
                errors[i] = e
    if errors:
        raise errors[min(errors)]
    return [results[i] for i in range(len(work))]
