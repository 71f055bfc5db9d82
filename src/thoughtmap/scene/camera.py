"""
Camera
Position plus a clamped scale. The view turns this into a QTransform.

`scale` follows the camera convention: 2.0 shows twice as much of the
world as 1.0, i.e. the content appears at half size.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0


@dataclass
class Camera:
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM

    def __post_init__(self) -> None:
        if self.min_zoom <= 0 or self.min_zoom > self.max_zoom:
            raise ValueError(f"Invalid zoom bounds [{self.min_zoom}, {self.max_zoom}].")
        self.scale = self._clamp(self.scale)

    @property
    def position(self) -> tuple[float, float]:
        return self.x, self.y

    @property
    def zoom(self) -> float:
        """Magnification of the content on screen."""
        return 1.0 / self.scale

    def pan(self, dx: float, dy: float) -> None:
        """
        Move by a gesture translation given in view pixels.

        The camera travels opposite to the finger so the content follows it.
        Pixels are converted to scene units with the current scale.
        """
        self.x -= dx * self.scale
        self.y -= dy * self.scale

    def pinch(self, factor: float) -> float:
        """
        Apply an incremental pinch factor (>1 spreads the fingers, zooming in).

        Returns:
            The new, clamped scale.
        """
        if factor <= 0:
            raise ValueError(f"Pinch factor must be positive, got {factor}.")
        new_scale = self._clamp(self.scale / factor)
        if new_scale != self.scale:
            logger.debug(f"Camera scale {self.scale:.3f} -> {new_scale:.3f}")
        self.scale = new_scale
        return self.scale

    def reset(self, center: tuple[float, float]) -> None:
        self.x, self.y = center
        self.scale = self._clamp(1.0)

    def _clamp(self, value: float) -> float:
        return float(np.clip(value, self.min_zoom, self.max_zoom))
