"""
Spiral Placement
New thoughts without a stored position are laid out on an outward spiral
around the scene center, one slot per node already on screen.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

DEFAULT_SPACING = 150.0
ANGLE_STEP = 0.5    # rad per node
RADIUS_STEP = 20.0  # px per node


def spiral_position(
    index: int,
    center: tuple[float, float],
    spacing: float = DEFAULT_SPACING,
    angle_step: float = ANGLE_STEP,
    radius_step: float = RADIUS_STEP,
) -> tuple[float, float]:
    """
    Position of the `index`-th node on the spiral.

    Args:
        index: Number of nodes already placed (0 for the first one).
        center: Spiral origin in scene coordinates.
        spacing: Radius of the first slot.

    Returns:
        (x, y) in scene coordinates.

    Raises:
        ValueError: If index is negative.
    """
    if index < 0:
        raise ValueError(f"Spiral index must be non-negative, got {index}.")
    angle = index * angle_step
    radius = spacing + index * radius_step
    cx, cy = center
    return cx + math.cos(angle) * radius, cy + math.sin(angle) * radius


def spiral_positions(
    count: int,
    center: tuple[float, float],
    spacing: float = DEFAULT_SPACING,
    start: int = 0,
    angle_step: float = ANGLE_STEP,
    radius_step: float = RADIUS_STEP,
) -> npt.NDArray[np.float64]:
    """
    Vectorised spiral_position for slots start .. start + count - 1.

    Returns:
        (count, 2) array of (x, y) positions.
    """
    if count < 0 or start < 0:
        raise ValueError("count and start must be non-negative.")
    idx = np.arange(start, start + count, dtype=np.float64)
    angle = idx * angle_step
    radius = spacing + idx * radius_step
    return np.column_stack([
        center[0] + np.cos(angle) * radius,
        center[1] + np.sin(angle) * radius,
    ])
