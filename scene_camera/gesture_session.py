"""Per-gesture start snapshots, kept as a tiny explicit state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from scene_camera.control_types import GestureKind, GestureState

T = TypeVar("T")


class SessionPhase(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class GestureSession(Generic[T]):
    """Tracks one gesture from ``began`` to ``ended``.

    Recognizers report pinch scale and pan translation relative to the moment
    the gesture started, so the camera value at that moment has to be kept
    around. The session moves ``IDLE -> ACTIVE(snapshot) -> IDLE``:

    * ``began`` captures a fresh snapshot (restarting an active session);
    * ``changed`` hands back the snapshot, or ``None`` while idle;
    * ``ended`` / ``cancelled`` drop the snapshot.
    """

    kind: GestureKind
    snapshot: Optional[T] = None

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.IDLE if self.snapshot is None else SessionPhase.ACTIVE

    def update(self, state: GestureState, capture: Callable[[], T]) -> Optional[T]:
        """Advance the session and return the snapshot deltas apply against."""

        if state is GestureState.BEGAN:
            self.snapshot = capture()
            return self.snapshot
        if state is GestureState.CHANGED:
            return self.snapshot

        self.snapshot = None
        return None

    def reset(self) -> None:
        self.snapshot = None
