"""Gesture-driven 2D camera constrained to a background image.

``CameraController`` consumes pinch, pan and double-tap events and keeps the
camera transform inside the world bounds: the scale stays between
``min_scale`` and ``max_scale`` and the position stays where the scaled
viewport does not reveal anything past the background edges. Every mutation
re-clamps immediately, so whatever the renderer reads is always valid.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from pygame import Vector2

from scene_camera.config import CameraConfig
from scene_camera.control_types import GestureEvent, GestureKind, GestureSource, GestureState, Point, PointTransform
from scene_camera.geometry import AxisRange, Bounds, PositionConstraint, Viewport, all_finite, clamp
from scene_camera.gesture_session import GestureSession

logger = logging.getLogger(__name__)


class SceneSetupError(ValueError):
    """Raised by ``initialize`` when viewport and bounds cannot host a camera."""


@dataclass
class CameraTransform:
    """Camera centre in world space plus a uniform scale.

    A scale of ``2.0`` shows twice as much world as the viewport has pixels.
    """

    position: Vector2 = field(default_factory=Vector2)
    scale: float = 1.0


class CameraController:
    """Binds gestures to a camera and keeps it inside the world bounds."""

    def __init__(
        self,
        config: Optional[CameraConfig] = None,
        point_transform: Optional[PointTransform] = None,
        transform: Optional[CameraTransform] = None,
    ) -> None:
        self.config = config or CameraConfig()
        # Host conversion from viewport to world space; view_to_world otherwise.
        self.point_transform = point_transform
        self.transform = transform
        self.viewport: Optional[Viewport] = None
        self.bounds: Optional[Bounds] = None
        self.min_scale = self.config.min_scale
        self.max_scale = 0.0
        self.constraint: Optional[PositionConstraint] = None
        self._pinch: GestureSession[float] = GestureSession(GestureKind.PINCH)
        self._pan: GestureSession[Vector2] = GestureSession(GestureKind.PAN)
        self._handlers: Dict[GestureKind, Callable[[GestureEvent], None]] = {
            GestureKind.PINCH: lambda event: self.on_pinch(event.state, event.scale),
            GestureKind.PAN: lambda event: self.on_pan(event.state, event.translation),
            GestureKind.DOUBLE_TAP: lambda event: self.on_double_tap(event.state, event.location),
        }

    @property
    def initialized(self) -> bool:
        return self.constraint is not None

    @property
    def position(self) -> Vector2:
        self._require_initialized()
        return Vector2(self.transform.position)

    @property
    def scale(self) -> float:
        self._require_initialized()
        return self.transform.scale

    def initialize(self, viewport: Viewport, bounds: Bounds) -> PositionConstraint:
        """Validate the scene, derive the scale range and clamp the camera.

        Raises:
            SceneSetupError: if either frame is degenerate, the bounds are
                smaller than the viewport, or ``min_scale`` exceeds the
                derived ``max_scale``.
        """

        dims = (viewport.width, viewport.height, bounds.width, bounds.height)
        if not all_finite(dims + (bounds.x, bounds.y)):
            raise SceneSetupError(f"viewport {viewport} and bounds {bounds} must be finite")
        if viewport.width <= 0 or viewport.height <= 0:
            raise SceneSetupError(f"viewport must have a positive size, got {viewport}")
        if bounds.width < viewport.width or bounds.height < viewport.height:
            raise SceneSetupError(f"bounds {bounds} must cover the viewport {viewport}")

        # The camera may zoom out until the viewport spans the background on
        # its tighter axis.
        max_scale = min(bounds.width / viewport.width, bounds.height / viewport.height)
        if self.config.min_scale > max_scale:
            raise SceneSetupError(f"min_scale {self.config.min_scale} exceeds max_scale {max_scale}")

        self.viewport = viewport
        self.bounds = bounds
        self.min_scale = self.config.min_scale
        self.max_scale = max_scale
        if self.transform is None:
            self.transform = CameraTransform(position=bounds.center, scale=self.config.reset_scale)
        self._pinch.reset()
        self._pan.reset()

        constraint = self.recompute_constraint()
        logger.info(
            "Camera initialized: viewport %sx%s, bounds %sx%s, scale range [%.3f, %.3f]",
            viewport.width,
            viewport.height,
            bounds.width,
            bounds.height,
            self.min_scale,
            self.max_scale,
        )
        return constraint

    def recompute_constraint(self) -> PositionConstraint:
        """Derive the position ranges for the current scale and clamp into them."""

        if self.viewport is None or self.bounds is None or self.transform is None:
            raise RuntimeError("initialize() must be called before using the camera")

        # Half the scaled viewport is the distance from camera centre to the
        # visible edge; the centre has to stay that far inside the bounds.
        half_width = self.viewport.width * self.transform.scale / 2
        half_height = self.viewport.height * self.transform.scale / 2
        self.constraint = PositionConstraint(
            x_range=AxisRange(self.bounds.min_x + half_width, self.bounds.max_x - half_width),
            y_range=AxisRange(self.bounds.min_y + half_height, self.bounds.max_y - half_height),
        )
        self.transform.position = self.constraint.clamp(self.transform.position)
        return self.constraint

    def handle(self, event: GestureEvent) -> None:
        """Route a recognizer event to the matching gesture handler."""

        self._handlers[event.kind](event)

    def pump(self, source: GestureSource) -> int:
        """Drain ``source`` and return how many events were handled."""

        events = source.read()
        for event in events:
            self.handle(event)
        return len(events)

    def on_pinch(self, state: GestureState, scale_factor: Optional[float]) -> None:
        """Zoom relative to the scale the camera had when the pinch began.

        Spreading the fingers reports a factor above ``1.0``; the camera scale
        shrinks by the same ratio so the content grows on screen.
        """

        self._require_initialized()
        start_scale = self._pinch.update(state, lambda: self.transform.scale)
        if state.finished:
            return
        if start_scale is None:
            logger.debug("Ignoring %s %s without a began event", self._pinch.kind.value, state.value)
            return
        if scale_factor is None or not math.isfinite(scale_factor) or scale_factor <= 0:
            logger.warning("Rejecting pinch %s with scale factor %r", state.value, scale_factor)
            return

        candidate = start_scale * (1 / scale_factor)
        self._set_scale(clamp(candidate, self.min_scale, self.max_scale))
        logger.debug("Pinch %s factor=%.3f -> scale=%.3f", state.value, scale_factor, self.transform.scale)

    def on_pan(self, state: GestureState, translation: Optional[Point]) -> None:
        """Drag the camera against the finger, relative to the pan start.

        The translation is scaled by the current camera scale times
        ``pan_factor``; x moves opposite to the finger and y is flipped
        because viewport pixels grow downward while world space grows upward.
        """

        self._require_initialized()
        start_position = self._pan.update(state, lambda: Vector2(self.transform.position))
        if state.finished:
            return
        if start_position is None:
            logger.debug("Ignoring %s %s without a began event", self._pan.kind.value, state.value)
            return
        if translation is None or not all_finite(translation):
            logger.warning("Rejecting pan %s with translation %r", state.value, translation)
            return

        factor = self.transform.scale * self.config.pan_factor
        dx = translation[0] * factor
        dy = translation[1] * factor
        self._set_position(Vector2(start_position.x - dx, start_position.y + dy))
        logger.debug("Pan %s translation=%s -> position=%s", state.value, translation, self.transform.position)

    def on_double_tap(self, state: GestureState, location: Optional[Point]) -> None:
        """Centre the camera on the tapped point and reset the zoom."""

        self._require_initialized()
        if state is not GestureState.ENDED:
            return
        if location is None or not all_finite(location):
            logger.warning("Rejecting double-tap at %r", location)
            return

        # Convert before touching the transform; the default conversion
        # depends on the current camera.
        if self.point_transform is not None:
            target = Vector2(self.point_transform(location))
        else:
            target = self.view_to_world(location)

        scale = self.config.reset_scale
        if self.config.clamp_reset_scale:
            scale = clamp(scale, self.min_scale, self.max_scale)
        elif not self.min_scale <= scale <= self.max_scale:
            logger.warning(
                "Double-tap reset scale %.3f is outside [%.3f, %.3f]", scale, self.min_scale, self.max_scale
            )

        self.transform.position = target
        self.transform.scale = scale
        self.recompute_constraint()
        logger.debug("Double-tap at %s -> position=%s scale=%.3f", location, self.transform.position, scale)

    def move_to(self, point: Point) -> Vector2:
        """Move the camera centre to ``point`` (world space), clamped."""

        self._require_initialized()
        self._set_position(Vector2(point))
        return Vector2(self.transform.position)

    def zoom_to(self, scale: float) -> float:
        """Set the scale directly, clamped to the allowed range."""

        self._require_initialized()
        self._set_scale(clamp(scale, self.min_scale, self.max_scale))
        return self.transform.scale

    def view_to_world(self, point: Point) -> Vector2:
        """Map a viewport pixel (origin top-left, y down) into world space."""

        self._require_initialized()
        scale = self.transform.scale
        return Vector2(
            self.transform.position.x + (point[0] - self.viewport.width / 2) * scale,
            self.transform.position.y - (point[1] - self.viewport.height / 2) * scale,
        )

    def world_to_view(self, point: Point) -> Vector2:
        """Inverse of ``view_to_world``."""

        self._require_initialized()
        scale = self.transform.scale
        return Vector2(
            (point[0] - self.transform.position.x) / scale + self.viewport.width / 2,
            (self.transform.position.y - point[1]) / scale + self.viewport.height / 2,
        )

    def visible_frame(self) -> Bounds:
        """World rectangle currently shown through the viewport."""

        self._require_initialized()
        width = self.viewport.width * self.transform.scale
        height = self.viewport.height * self.transform.scale
        return Bounds.centered(width, height, center=(self.transform.position.x, self.transform.position.y))

    def _set_scale(self, scale: float) -> None:
        self.transform.scale = scale
        self.recompute_constraint()

    def _set_position(self, position: Vector2) -> None:
        self.transform.position = self.constraint.clamp(position)

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise RuntimeError("initialize() must be called before using the camera")
