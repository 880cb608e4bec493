"""Exception hierarchy raised by the chart recipe dispatcher."""

from __future__ import annotations

from typing import Optional, Sequence


class RecipeError(Exception):
    """Base class for every error raised while building or saving a chart."""


class InvalidDataset(RecipeError, ValueError):
    """The dataset is not a rectangular table."""


class EmptyDataset(RecipeError, ValueError):
    """No rows are left to draw."""

    def __init__(self, message: str = "dataset has no rows to draw") -> None:
        super().__init__(message)


class UnknownColumn(RecipeError, KeyError):
    """An aesthetic or facet references a column that is not in the dataset."""

    def __init__(self, column: str, columns: Optional[Sequence[str]] = None, channel: Optional[str] = None) -> None:
        self.column = column
        self.columns = tuple(columns) if columns else (column,)
        self.channel = channel
        super().__init__(column)

    def __str__(self) -> str:
        where = f" (mapped to '{self.channel}')" if self.channel else ""
        if len(self.columns) > 1:
            others = ", ".join(repr(c) for c in self.columns)
            return f"Column(s) not found: {others}{where}"
        return f"Column not found: '{self.column}'{where}"


class IncompatibleStatistic(RecipeError, ValueError):
    def __init__(self, geom: str, stat: str, allowed: Sequence[str] = (), reason: Optional[str] = None) -> None:
        self.geom = geom
        self.stat = stat
        self.allowed = tuple(allowed)
        msg = f"stat '{stat}' is not defined for geom '{geom}'"
        if reason:
            msg += f": {reason}"
        elif self.allowed:
            msg += f" (expected one of: {', '.join(self.allowed)})"
        super().__init__(msg)


class IncompatiblePosition(RecipeError, ValueError):
    def __init__(self, geom: str, position: str, allowed: Sequence[str] = ()) -> None:
        self.geom = geom
        self.position = position
        self.allowed = tuple(allowed)
        msg = f"position '{position}' is not defined for geom '{geom}'"
        if self.allowed:
            msg += f" (expected one of: {', '.join(self.allowed)})"
        super().__init__(msg)


class MissingAesthetic(RecipeError, ValueError):
    def __init__(self, geom: str, channel: str) -> None:
        self.geom = geom
        self.channel = channel
        super().__init__(f"geom '{geom}' requires the '{channel}' aesthetic")


class InvalidOption(RecipeError, ValueError):
    """A styling option (palette, format string, ...) cannot be applied."""


class ChartSaveError(RecipeError, OSError):
    """Writing a rendered chart to disk failed."""


class NonNumericChannel(RecipeError, TypeError):
    """A channel that feeds a continuous computation is mapped to a non-numeric column."""

    def __init__(self, geom: str, channel: str, column: str) -> None:
        self.geom = geom
        self.channel = channel
        self.column = column
        super().__init__(f"geom '{geom}' needs a numeric column on '{channel}', but '{column}' is not numeric")
