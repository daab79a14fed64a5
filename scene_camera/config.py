"""Configuration values for the camera controller and the pygame viewer.

Both containers are frozen so nothing can tweak them half-way through a
session; ``main.py`` builds them from command-line flags.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CameraConfig:
    """Tunables for ``CameraController``.

    Attributes:
        min_scale: Lowest camera scale a pinch may reach (most zoomed in).
        reset_scale: Scale applied by a double-tap.
        clamp_reset_scale: Clamp ``reset_scale`` into ``[min_scale, max_scale]``
            on double-tap. Off by default so the reset lands on the literal value.
        pan_factor: Multiplier applied to pan translation on top of the scale.
    """

    min_scale: float = 0.5
    reset_scale: float = 1.0
    clamp_reset_scale: bool = False
    pan_factor: float = 2.0

    def __post_init__(self) -> None:
        for name in ("min_scale", "reset_scale", "pan_factor"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")


@dataclass(frozen=True)
class ViewerSettings:
    """Window, background and recognizer settings for the demo host."""

    window_size: Tuple[int, int] = (960, 720)
    background_size: Tuple[int, int] = (2400, 1600)
    fps: int = 60
    caption: str = "Scene View Camera"
    wheel_zoom_step: float = 1.1
    double_tap_interval: float = 0.3  # Seconds between the two clicks.
    tap_slop: float = 8.0  # Pixels a press may drift and still count as a tap.
    touch_pinch_sensitivity: float = 4.0
    grid_spacing: int = 100
