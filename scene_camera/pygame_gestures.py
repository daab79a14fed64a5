"""Turns raw pygame input into pinch, pan and double-tap gesture events.

The recognizer is deliberately a plain event translator: the viewer feeds it
every pygame event together with a timestamp and later drains the resulting
``GestureEvent`` list. Keeping the clock injected makes double-tap timing easy
to unit test without a window.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pygame

from scene_camera.config import ViewerSettings
from scene_camera.control_types import GestureEvent, GestureSource, GestureState, Point

logger = logging.getLogger(__name__)

LEFT_BUTTON = 1


class PygameGestureSource(GestureSource):
    """Mouse, wheel and touch recognizer feeding a ``CameraController``.

    * Left-button drag -> pan, translation relative to the press point.
    * Two left clicks close in time and space -> double-tap.
    * Wheel tick -> a complete pinch (began / changed / ended).
    * Touch ``MULTIGESTURE`` -> pinch with an accumulated factor, ended by
      ``FINGERUP``. A touch pinch cancels any pan the emulated mouse started
      and swallows that press until the next button-down.
    """

    def __init__(self, settings: Optional[ViewerSettings] = None) -> None:
        self.settings = settings or ViewerSettings()
        self._pending: List[GestureEvent] = []
        self._press_pos: Optional[Point] = None
        self._panning = False
        self._last_tap_time: Optional[float] = None
        self._last_tap_pos: Optional[Point] = None
        self._touch_pinch: Optional[float] = None

    def feed(self, event: pygame.event.Event, *, now: float) -> None:
        """Translate one pygame event; ``now`` is the event time in seconds."""

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == LEFT_BUTTON:
            self._press_pos = tuple(event.pos)
        elif event.type == pygame.MOUSEMOTION and self._press_pos is not None:
            self._on_drag(tuple(event.pos))
        elif event.type == pygame.MOUSEBUTTONUP and event.button == LEFT_BUTTON:
            self._on_release(tuple(event.pos), now)
        elif event.type == pygame.MOUSEWHEEL and event.y:
            factor = self.settings.wheel_zoom_step ** event.y
            self._pending.extend(
                [
                    GestureEvent.pinch(GestureState.BEGAN, 1.0),
                    GestureEvent.pinch(GestureState.CHANGED, factor),
                    GestureEvent.pinch(GestureState.ENDED, factor),
                ]
            )
        elif event.type == pygame.MULTIGESTURE:
            self._on_multigesture(event.pinched)
        elif event.type == pygame.FINGERUP and self._touch_pinch is not None:
            self._pending.append(GestureEvent.pinch(GestureState.ENDED, self._touch_pinch))
            self._touch_pinch = None

    def read(self) -> List[GestureEvent]:
        events, self._pending = self._pending, []
        return events

    def close(self) -> None:
        if self._panning:
            self._pending.append(GestureEvent.pan(GestureState.CANCELLED, (0.0, 0.0)))
        self._press_pos = None
        self._panning = False
        self._touch_pinch = None

    def _translation(self, pos: Point) -> Point:
        return (pos[0] - self._press_pos[0], pos[1] - self._press_pos[1])

    def _on_drag(self, pos: Point) -> None:
        translation = self._translation(pos)
        if self._panning:
            self._pending.append(GestureEvent.pan(GestureState.CHANGED, translation))
            return
        if self._touch_pinch is not None:
            return
        # Small jitter during a click should not start a pan.
        if pygame.Vector2(translation).length() > self.settings.tap_slop:
            self._panning = True
            self._pending.append(GestureEvent.pan(GestureState.BEGAN, translation))

    def _on_release(self, pos: Point, now: float) -> None:
        if self._press_pos is None:
            return
        if self._panning:
            self._pending.append(GestureEvent.pan(GestureState.ENDED, self._translation(pos)))
            self._panning = False
        else:
            self._on_tap(pos, now)
        self._press_pos = None

    def _on_tap(self, pos: Point, now: float) -> None:
        is_double = (
            self._last_tap_time is not None
            and self._last_tap_pos is not None
            and now - self._last_tap_time <= self.settings.double_tap_interval
            and pygame.Vector2(pos).distance_to(self._last_tap_pos) <= self.settings.tap_slop
        )
        if is_double:
            self._pending.append(GestureEvent.double_tap(GestureState.ENDED, pos))
            # A third click starts a new pair instead of firing again.
            self._last_tap_time = None
            self._last_tap_pos = None
        else:
            self._last_tap_time = now
            self._last_tap_pos = pos

    def _on_multigesture(self, pinched: float) -> None:
        if self._touch_pinch is None:
            if self._panning:
                self._pending.append(GestureEvent.pan(GestureState.CANCELLED, (0.0, 0.0)))
                self._panning = False
                logger.debug("Touch pinch started, cancelling mouse pan")
            # The emulated press belongs to the pinch now; it must not turn
            # into a pan or a tap once the second finger lifts.
            self._press_pos = None
            self._touch_pinch = 1.0
            self._pending.append(GestureEvent.pinch(GestureState.BEGAN, 1.0))
        # ``pinched`` is the change in normalized finger distance since the last event.
        self._touch_pinch = max(0.05, self._touch_pinch + pinched * self.settings.touch_pinch_sensitivity)
        self._pending.append(GestureEvent.pinch(GestureState.CHANGED, self._touch_pinch))
