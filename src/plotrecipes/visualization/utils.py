from pathlib import Path
import json
import logging
from typing import Optional

from matplotlib.figure import Figure

logger = logging.getLogger(__name__)

# matplotlib's savefig formats that may be chosen from a file suffix
SUPPORTED_FORMATS = ("png", "pdf", "svg", "jpg", "jpeg", "tif", "tiff", "eps", "ps", "webp")


def human_readable_bytes(nbytes: Optional[int]) -> str:
    if nbytes is None:
        return '0 B'
    try:
        val = float(nbytes)
    except (TypeError, ValueError):
        return '0 B'
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if val < 1024.0:
            return f"{val:3.1f} {unit}"
        val /= 1024.0
    return f"{val:.1f} PB"


def format_from_suffix(path: Path, default: str = 'png') -> str:
    fmt = path.suffix.lower().lstrip('.')
    return fmt or default


def save_figure_and_metadata(fig: Figure, out_file: Path, metadata: Optional[dict], fmt: str = 'png', dpi: int = 300) -> Path:
    """Save a matplotlib figure and, when `metadata` is given, a JSON sidecar.

    The sidecar sits next to the image as `<name>.<ext>.metadata.json`.
    """
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(str(out_file), format=fmt, dpi=dpi, bbox_inches='tight')
    if metadata is not None:
        meta_file = out_file.with_suffix(out_file.suffix + '.metadata.json')
        with open(meta_file, 'w', encoding='utf-8') as fh:
            json.dump(metadata, fh, indent=2, default=str)
    logger.info("Saved %s (%s)", out_file, human_readable_bytes(out_file.stat().st_size))
    return out_file
