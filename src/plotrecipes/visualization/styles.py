"""Theme presets applied per chart.

A theme is a plain value handed to the renderer; applying it only touches the
artists of the chart being drawn, never matplotlib's global rcParams.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional

from matplotlib.axes import Axes


@dataclass(frozen=True)
class Theme:
    name: str
    panel_background: str = "#EBEBEB"
    plot_background: str = "#FFFFFF"
    grid: bool = True
    grid_colour: str = "#FFFFFF"
    grid_linewidth: float = 0.8
    axis_line: bool = False
    panel_border: Optional[str] = None
    ticks: bool = True
    axis_text: bool = True
    text_colour: str = "#1A1A1A"
    tick_colour: str = "#4D4D4D"
    base_size: float = 10.0
    title_size: float = 12.0
    legend_size: float = 9.0

    def with_base_size(self, base_size: float) -> "Theme":
        scale = base_size / self.base_size
        return replace(
            self,
            base_size=base_size,
            title_size=self.title_size * scale,
            legend_size=self.legend_size * scale,
        )


THEMES: Dict[str, Theme] = {
    "grey": Theme(name="grey"),
    "bw": Theme(
        name="bw",
        panel_background="#FFFFFF",
        grid_colour="#EBEBEB",
        panel_border="#333333",
    ),
    "minimal": Theme(
        name="minimal",
        panel_background="#FFFFFF",
        grid_colour="#EBEBEB",
        ticks=False,
    ),
    "classic": Theme(
        name="classic",
        panel_background="#FFFFFF",
        grid=False,
        axis_line=True,
        tick_colour="#000000",
    ),
    "light": Theme(
        name="light",
        panel_background="#FFFFFF",
        grid_colour="#DEDEDE",
        grid_linewidth=0.5,
        panel_border="#B3B3B3",
        tick_colour="#B3B3B3",
    ),
    "dark": Theme(
        name="dark",
        panel_background="#7F7F7F",
        grid_colour="#6B6B6B",
        grid_linewidth=0.5,
    ),
    "void": Theme(
        name="void",
        panel_background="#FFFFFF",
        grid=False,
        ticks=False,
        axis_text=False,
    ),
}


def get_theme(name: str) -> Theme:
    try:
        return THEMES[name]
    except KeyError:
        raise KeyError(f"unknown theme '{name}' (expected one of: {', '.join(THEMES)})") from None


def apply_theme(axes: Iterable[Axes], theme: Theme, *, show_axes: bool = True) -> None:
    """Style each panel axes in place.

    `show_axes=False` is used for geometries without position scales (pie).
    """
    for ax in axes:
        if not show_axes or not theme.axis_text:
            ax.set_axis_off()
            continue
        ax.set_facecolor(theme.panel_background)
        ax.set_axisbelow(True)
        if theme.grid:
            ax.grid(True, color=theme.grid_colour, linewidth=theme.grid_linewidth)
        else:
            ax.grid(False)
        for side, spine in ax.spines.items():
            if theme.panel_border is not None:
                spine.set_visible(True)
                spine.set_color(theme.panel_border)
            elif theme.axis_line and side in ("left", "bottom"):
                spine.set_visible(True)
                spine.set_color(theme.tick_colour)
            else:
                spine.set_visible(False)
        ax.tick_params(
            colors=theme.tick_colour,
            labelcolor=theme.text_colour,
            labelsize=theme.base_size * 0.9,
            length=3.5 if theme.ticks else 0,
        )
        ax.xaxis.label.set_color(theme.text_colour)
        ax.yaxis.label.set_color(theme.text_colour)
        ax.xaxis.label.set_fontsize(theme.base_size)
        ax.yaxis.label.set_fontsize(theme.base_size)
