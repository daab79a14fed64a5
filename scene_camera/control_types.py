"""Gesture events passed from a recognizer to ``CameraController``.

A recognizer reports one ``GestureEvent`` per callback: which gesture, which
phase, and the payload measured since the gesture began. The controller only
ever sees these events, never mouse or touch input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

Point = Tuple[float, float]
PointTransform = Callable[[Point], Point]


class GestureKind(Enum):
    """The three gestures the camera reacts to."""

    PINCH = "pinch"
    PAN = "pan"
    DOUBLE_TAP = "double_tap"


class GestureState(Enum):
    """Recognizer lifecycle, matching the usual touch-toolkit phases."""

    BEGAN = "began"
    CHANGED = "changed"
    ENDED = "ended"
    CANCELLED = "cancelled"

    @property
    def finished(self) -> bool:
        return self in (GestureState.ENDED, GestureState.CANCELLED)


@dataclass(frozen=True)
class GestureEvent:
    """A single recognizer callback.

    Only the payload matching ``kind`` is meaningful; the others stay ``None``.

    Attributes:
        kind: Which gesture produced the event.
        state: Lifecycle phase of the gesture.
        scale: Pinch magnification relative to the gesture start (``1.0`` at
            ``began``).
        translation: Pan offset relative to the gesture start, in viewport
            pixels (x right, y down).
        location: Double-tap point in viewport pixels.
    """

    kind: GestureKind
    state: GestureState
    scale: Optional[float] = None
    translation: Optional[Point] = None
    location: Optional[Point] = None

    @classmethod
    def pinch(cls, state: GestureState, scale: float) -> "GestureEvent":
        return cls(GestureKind.PINCH, state, scale=scale)

    @classmethod
    def pan(cls, state: GestureState, translation: Point) -> "GestureEvent":
        return cls(GestureKind.PAN, state, translation=translation)

    @classmethod
    def double_tap(cls, state: GestureState, location: Point) -> "GestureEvent":
        return cls(GestureKind.DOUBLE_TAP, state, location=location)


class GestureSource(Protocol):
    """Anything ``CameraController.pump`` can drain once per frame."""

    def read(self) -> List[GestureEvent]:
        """Return the events recognized since the last call."""
        ...

    def close(self) -> None:
        """Stop recognizing; an unfinished gesture may be reported as cancelled."""
        ...
