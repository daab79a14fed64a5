"""Small value types describing the viewport, the world bounds and clamps."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from pygame import Vector2


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def all_finite(values: Iterable[float]) -> bool:
    return all(math.isfinite(v) for v in values)


@dataclass(frozen=True)
class Viewport:
    """Size of the on-screen scene frame in viewport pixels."""

    width: float
    height: float


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned world rectangle, ``(x, y)`` being its minimum corner.

    World space is y-up, so ``max_y`` is the top edge of the background.
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def centered(cls, width: float, height: float, center: tuple[float, float] = (0.0, 0.0)) -> "Bounds":
        """Build bounds around ``center``, the way a centre-anchored sprite sits."""

        return cls(center[0] - width / 2, center[1] - height / 2, width, height)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class AxisRange:
    """Allowed interval for one coordinate of the camera position.

    A range can come out inverted (``lower > upper``) when the scaled viewport
    is wider than the bounds on that axis. Clamping then pins the value to the
    midpoint, which equals the centre of the bounds on that axis.
    """

    lower: float
    upper: float

    @property
    def inverted(self) -> bool:
        return self.lower > self.upper

    @property
    def midpoint(self) -> float:
        return (self.lower + self.upper) / 2

    def clamp(self, value: float) -> float:
        if self.inverted:
            return self.midpoint
        return clamp(value, self.lower, self.upper)

    def contains(self, value: float, tolerance: float = 1e-9) -> bool:
        if self.inverted:
            return math.isclose(value, self.midpoint, abs_tol=tolerance)
        return self.lower - tolerance <= value <= self.upper + tolerance


@dataclass(frozen=True)
class PositionConstraint:
    """Pair of axis ranges the camera centre has to stay inside."""

    x_range: AxisRange
    y_range: AxisRange

    def clamp(self, point: Vector2) -> Vector2:
        return Vector2(self.x_range.clamp(point.x), self.y_range.clamp(point.y))

    def contains(self, point: Vector2, tolerance: float = 1e-9) -> bool:
        return self.x_range.contains(point.x, tolerance) and self.y_range.contains(point.y, tolerance)
