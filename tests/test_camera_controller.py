import logging
import math
from typing import List

import pytest
from pygame import Vector2

from scene_camera.camera_controller import CameraController, CameraTransform, SceneSetupError
from scene_camera.config import CameraConfig
from scene_camera.control_types import GestureEvent, GestureState
from scene_camera.geometry import Bounds, Viewport


def make_controller(
    viewport: Viewport = Viewport(100, 100),
    bounds: Bounds = Bounds.centered(1000, 1000),
    position: tuple = (0.0, 0.0),
    scale: float = 1.0,
    **kwargs,
) -> CameraController:
    controller = CameraController(transform=CameraTransform(Vector2(position), scale), **kwargs)
    controller.initialize(viewport, bounds)
    return controller


def assert_point(actual: Vector2, expected: tuple) -> None:
    assert math.isclose(actual.x, expected[0], abs_tol=1e-9)
    assert math.isclose(actual.y, expected[1], abs_tol=1e-9)


class ListSource:
    def __init__(self, events: List[GestureEvent]) -> None:
        self.events = events

    def read(self) -> List[GestureEvent]:
        events, self.events = self.events, []
        return events

    def close(self) -> None:
        return


def test_max_scale_uses_tighter_axis() -> None:
    controller = make_controller(viewport=Viewport(50, 50), bounds=Bounds(0, 0, 200, 100), position=(100, 50))
    assert controller.max_scale == 2.0
    assert controller.min_scale == 0.5


def test_default_camera_starts_centred() -> None:
    controller = CameraController()
    controller.initialize(Viewport(100, 50), Bounds(0, 0, 400, 300))
    assert_point(controller.position, (200, 150))
    assert controller.scale == 1.0


def test_pinch_is_relative_to_start_scale_and_clamped() -> None:
    controller = make_controller(viewport=Viewport(50, 50), bounds=Bounds(0, 0, 200, 100), position=(100, 50))

    controller.on_pinch(GestureState.BEGAN, 1.0)
    assert controller.scale == 1.0
    controller.on_pinch(GestureState.CHANGED, 2.0)
    assert controller.scale == 0.5
    # Candidate 1.0 / 0.25 = 4.0 lands above max_scale.
    controller.on_pinch(GestureState.CHANGED, 0.25)
    assert controller.scale == 2.0
    # Still measured against the start scale, not the previous event.
    controller.on_pinch(GestureState.CHANGED, 4.0)
    assert controller.scale == 0.5


def test_pinch_sequence_keeps_scale_and_position_in_range() -> None:
    controller = make_controller(viewport=Viewport(80, 60), bounds=Bounds(-100, -50, 400, 200), position=(90, 40))
    factors = [1.0, 1.3, 0.9, 0.6, 0.31, 0.2, 0.7, 1.8, 3.5, 10.0]

    controller.on_pinch(GestureState.BEGAN, factors[0])
    for factor in factors[1:]:
        controller.on_pinch(GestureState.CHANGED, factor)
        assert controller.min_scale <= controller.scale <= controller.max_scale
        assert controller.constraint.contains(controller.position)


def test_pinch_end_leaves_transform_alone() -> None:
    controller = make_controller()
    controller.on_pinch(GestureState.BEGAN, 1.0)
    controller.on_pinch(GestureState.CHANGED, 2.0)
    controller.on_pinch(GestureState.ENDED, 4.0)
    assert controller.scale == 0.5
    # The session is closed, so stray changes are dropped.
    controller.on_pinch(GestureState.CHANGED, 1.5)
    assert controller.scale == 0.5


def test_pan_doubles_translation_and_flips_y() -> None:
    controller = make_controller()

    controller.on_pan(GestureState.BEGAN, (0.0, 0.0))
    controller.on_pan(GestureState.CHANGED, (10.0, 10.0))
    assert_point(controller.position, (-20, 20))

    # Translation is relative to the start, not cumulative.
    controller.on_pan(GestureState.CHANGED, (-5.0, 0.0))
    assert_point(controller.position, (10, 0))


def test_pan_follows_current_scale() -> None:
    controller = make_controller()
    controller.zoom_to(0.5)

    controller.on_pan(GestureState.BEGAN, (0.0, 0.0))
    controller.on_pan(GestureState.CHANGED, (10.0, -4.0))
    assert_point(controller.position, (-10, -4))


def test_pan_is_clamped_to_current_range() -> None:
    controller = make_controller()

    controller.on_pan(GestureState.BEGAN, (0.0, 0.0))
    controller.on_pan(GestureState.CHANGED, (1000.0, -1000.0))
    assert_point(controller.position, (-450, -450))

    for translation in [(-300.0, 120.0), (40.0, 40.0), (-900.0, 900.0)]:
        controller.on_pan(GestureState.CHANGED, translation)
        assert controller.constraint.contains(controller.position)
        frame = controller.visible_frame()
        assert frame.min_x >= controller.bounds.min_x - 1e-9
        assert frame.max_y <= controller.bounds.max_y + 1e-9


def test_pinch_out_pulls_position_back_inside() -> None:
    controller = make_controller(position=(400, 400))
    assert_point(controller.position, (400, 400))

    controller.on_pinch(GestureState.BEGAN, 1.0)
    controller.on_pinch(GestureState.CHANGED, 0.25)
    # Scale 4.0 shows 400x400 world units, so the centre must sit within 300.
    assert controller.scale == 4.0
    assert_point(controller.position, (300, 300))


def test_double_tap_resets_scale_and_centres_on_point() -> None:
    controller = make_controller(
        position=(200, -100),
        scale=0.5,
        point_transform=lambda point: (point[0] + 1, point[1] + 2),
    )

    controller.on_double_tap(GestureState.ENDED, (10, 20))
    assert controller.scale == 1.0
    assert_point(controller.position, (11, 22))


def test_double_tap_uses_view_conversion_by_default() -> None:
    controller = make_controller()
    controller.on_double_tap(GestureState.ENDED, (75, 25))
    assert_point(controller.position, (25, 25))


def test_double_tap_only_fires_on_ended() -> None:
    controller = make_controller(scale=0.5)
    controller.on_double_tap(GestureState.BEGAN, (75, 25))
    controller.on_double_tap(GestureState.CANCELLED, (75, 25))
    assert controller.scale == 0.5
    assert_point(controller.position, (0, 0))


def test_reset_scale_outside_range_is_kept_and_position_centres(caplog: pytest.LogCaptureFixture) -> None:
    controller = make_controller(
        viewport=Viewport(100, 100),
        bounds=Bounds.centered(200, 100),
        config=CameraConfig(reset_scale=3.0),
    )
    assert controller.max_scale == 1.0

    with caplog.at_level(logging.WARNING, logger="scene_camera"):
        controller.on_double_tap(GestureState.ENDED, (90, 10))

    assert controller.scale == 3.0
    assert controller.constraint.x_range.inverted
    assert_point(controller.position, (0, 0))
    assert "outside" in caplog.text


def test_reset_scale_can_be_clamped() -> None:
    controller = make_controller(
        viewport=Viewport(100, 100),
        bounds=Bounds.centered(200, 100),
        config=CameraConfig(reset_scale=3.0, clamp_reset_scale=True),
    )
    controller.on_double_tap(GestureState.ENDED, (50, 50))
    assert controller.scale == 1.0


def test_recompute_constraint_is_idempotent() -> None:
    controller = make_controller(position=(30, -70), scale=1.7)
    first = controller.recompute_constraint()
    second = controller.recompute_constraint()
    assert first == second
    assert_point(controller.position, (30, -70))


def test_matching_aspect_ratio_collapses_ranges_at_max_scale() -> None:
    controller = make_controller(viewport=Viewport(50, 50), bounds=Bounds(0, 0, 100, 100), position=(50, 50))
    controller.zoom_to(10.0)

    assert controller.scale == 2.0
    constraint = controller.constraint
    assert math.isclose(constraint.x_range.lower, constraint.x_range.upper)
    assert math.isclose(constraint.y_range.lower, constraint.y_range.upper)
    assert_point(controller.position, (50, 50))


@pytest.mark.parametrize(
    "viewport, bounds",
    [
        (Viewport(0, 100), Bounds(0, 0, 200, 200)),
        (Viewport(100, -5), Bounds(0, 0, 200, 200)),
        (Viewport(100, 100), Bounds(0, 0, 99, 200)),
        (Viewport(100, 100), Bounds(0, 0, 200, float("nan"))),
    ],
)
def test_initialize_rejects_degenerate_scenes(viewport: Viewport, bounds: Bounds) -> None:
    with pytest.raises(SceneSetupError):
        CameraController().initialize(viewport, bounds)


def test_initialize_rejects_min_scale_above_max_scale() -> None:
    controller = CameraController(CameraConfig(min_scale=1.5))
    with pytest.raises(SceneSetupError, match="min_scale"):
        controller.initialize(Viewport(100, 100), Bounds(0, 0, 120, 120))


def test_config_rejects_non_positive_values() -> None:
    with pytest.raises(ValueError):
        CameraConfig(min_scale=0.0)
    with pytest.raises(ValueError):
        CameraConfig(pan_factor=float("inf"))


def test_gestures_require_initialize() -> None:
    with pytest.raises(RuntimeError):
        CameraController().on_pan(GestureState.BEGAN, (0.0, 0.0))


def test_bad_payloads_are_ignored() -> None:
    controller = make_controller()

    controller.on_pinch(GestureState.BEGAN, 1.0)
    controller.on_pinch(GestureState.CHANGED, float("nan"))
    controller.on_pinch(GestureState.CHANGED, 0.0)
    assert controller.scale == 1.0

    controller.on_pan(GestureState.BEGAN, (0.0, 0.0))
    controller.on_pan(GestureState.CHANGED, (float("inf"), 1.0))
    controller.on_double_tap(GestureState.ENDED, (float("nan"), 0.0))
    assert_point(controller.position, (0, 0))


def test_changed_without_began_is_ignored() -> None:
    controller = make_controller()
    controller.on_pan(GestureState.CHANGED, (10.0, 10.0))
    controller.on_pinch(GestureState.CHANGED, 2.0)
    assert_point(controller.position, (0, 0))
    assert controller.scale == 1.0


def test_pump_dispatches_events_by_kind() -> None:
    controller = make_controller()
    source = ListSource(
        [
            GestureEvent.pinch(GestureState.BEGAN, 1.0),
            GestureEvent.pinch(GestureState.CHANGED, 2.0),
            GestureEvent.pinch(GestureState.ENDED, 2.0),
            GestureEvent.pan(GestureState.BEGAN, (0.0, 0.0)),
            GestureEvent.pan(GestureState.CHANGED, (10.0, 10.0)),
            GestureEvent.pan(GestureState.ENDED, (10.0, 10.0)),
        ]
    )

    assert controller.pump(source) == 6
    assert controller.scale == 0.5
    assert_point(controller.position, (-10, 10))
    assert controller.pump(source) == 0


def test_view_and_world_conversions_are_inverse() -> None:
    controller = make_controller(position=(120, -40), scale=1.5)
    world = controller.view_to_world((10, 90))
    assert_point(world, (120 - 40 * 1.5, -40 - 40 * 1.5))
    assert_point(controller.world_to_view(world), (10, 90))


def test_stray_changes_log_the_gesture_kind(caplog: pytest.LogCaptureFixture) -> None:
    controller = make_controller()
    with caplog.at_level(logging.DEBUG, logger="scene_camera"):
        controller.on_pinch(GestureState.CHANGED, 2.0)
        controller.on_pan(GestureState.CHANGED, (1.0, 1.0))
    assert "Ignoring pinch changed" in caplog.text
    assert "Ignoring pan changed" in caplog.text
