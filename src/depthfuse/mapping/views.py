"""
The six orthographic views and their signed axis permutations.

Every view maps a triple of image-space sources (primary depth index, u, v)
onto grid axes (x, y, z). Each grid axis reads one source, optionally
mirrored as ``N - 1 - value``. The rules are kept as data so they can be
inspected and tested without iterating pixels.
"""

from enum import Enum
from typing import Dict, NamedTuple, Tuple

import numpy as np

# Source indices into the (primary, u, v) triple
PRIMARY = 0
U = 1
V = 2


class AxisRule(NamedTuple):
    """Which source feeds a grid axis and whether it is mirrored."""

    source: int
    mirrored: bool


class View(Enum):
    """Cardinal view directions in the fixed processing order."""

    NX = "nx"
    NY = "ny"
    NZ = "nz"
    PX = "px"
    PY = "py"
    PZ = "pz"

    @property
    def suffix(self) -> str:
        """Filename suffix used to locate this view's image."""
        return self.value

    @property
    def rule(self) -> Tuple[AxisRule, AxisRule, AxisRule]:
        """Axis rules for (x, y, z)."""
        return VIEW_AXIS_RULES[self]

    @classmethod
    def from_suffix(cls, suffix: str) -> "View":
        try:
            return cls(suffix.lower())
        except ValueError:
            raise ValueError(f"Unknown view suffix: {suffix!r}") from None


VIEW_AXIS_RULES: Dict[View, Tuple[AxisRule, AxisRule, AxisRule]] = {
    View.NX: (AxisRule(PRIMARY, True), AxisRule(V, False), AxisRule(U, False)),
    View.NY: (AxisRule(U, True), AxisRule(V, True), AxisRule(PRIMARY, False)),
    View.NZ: (AxisRule(V, True), AxisRule(PRIMARY, True), AxisRule(U, False)),
    View.PX: (AxisRule(PRIMARY, False), AxisRule(V, True), AxisRule(U, False)),
    View.PY: (AxisRule(U, True), AxisRule(V, False), AxisRule(PRIMARY, True)),
    View.PZ: (AxisRule(V, False), AxisRule(PRIMARY, False), AxisRule(U, False)),
}

VIEW_ORDER = tuple(View)


def apply_axis_rule(
    view: View, primary: np.ndarray, u: np.ndarray, v: np.ndarray, grid_size: int
) -> np.ndarray:
    """
    Apply a view's signed permutation to arrays of sources.

    Args:
        view: View whose rule is applied
        primary: Depth-derived indices, shape (M,)
        u: Fast image axis indices, shape (M,)
        v: Slow image axis indices, shape (M,)
        grid_size: Edge length N of the grid

    Returns:
        Integer grid coordinates, shape (M, 3)
    """
    sources = (np.asarray(primary), np.asarray(u), np.asarray(v))
    axes = []
    for rule in view.rule:
        values = sources[rule.source]
        if rule.mirrored:
            values = (grid_size - 1) - values
        axes.append(values)
    return np.stack(axes, axis=-1).astype(np.int64)
