"""Entry point wiring together the viewer, the recognizer and the camera."""

from __future__ import annotations

import argparse
import logging
from contextlib import ExitStack
from typing import List, Optional

import pygame

from scene_camera.camera_controller import CameraController
from scene_camera.config import CameraConfig, ViewerSettings
from scene_camera.logging_config import setup_logging
from scene_camera.viewer import SceneViewer

logger = logging.getLogger(__name__)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = ViewerSettings()
    camera_defaults = CameraConfig()
    parser = argparse.ArgumentParser(
        prog="scene-camera-demo",
        description="Pan, pinch and double-tap around a large background with a constrained camera.",
    )
    parser.add_argument("--window", type=int, nargs=2, metavar=("W", "H"), default=defaults.window_size)
    parser.add_argument("--background", type=int, nargs=2, metavar=("W", "H"), default=defaults.background_size)
    parser.add_argument(
        "--min-scale",
        type=float,
        default=camera_defaults.min_scale,
        help="Smallest camera scale a pinch may reach (lower = closer).",
    )
    parser.add_argument(
        "--reset-scale",
        type=float,
        default=camera_defaults.reset_scale,
        help="Scale applied by a double-tap.",
    )
    parser.add_argument(
        "--clamp-reset-scale",
        action="store_true",
        help="Clamp the double-tap reset scale into the allowed range.",
    )
    parser.add_argument(
        "--pan-factor",
        type=float,
        default=camera_defaults.pan_factor,
        help="Multiplier applied to drag distance on top of the camera scale.",
    )
    parser.add_argument(
        "--wheel-step",
        type=float,
        default=defaults.wheel_zoom_step,
        help="Pinch factor emitted per mouse-wheel tick.",
    )
    parser.add_argument("--fps", type=int, default=defaults.fps)
    parser.add_argument("--debug", action="store_true", help="Log every gesture the camera handles.")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> tuple[CameraConfig, ViewerSettings]:
    camera_config = CameraConfig(
        min_scale=args.min_scale,
        reset_scale=args.reset_scale,
        clamp_reset_scale=args.clamp_reset_scale,
        pan_factor=args.pan_factor,
    )
    settings = ViewerSettings(
        window_size=tuple(args.window),
        background_size=tuple(args.background),
        fps=args.fps,
        wheel_zoom_step=args.wheel_step,
    )
    return camera_config, settings


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_cli_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)
    camera_config, settings = build_config(args)
    logger.info("Starting viewer (window=%s, background=%s)", settings.window_size, settings.background_size)

    # ExitStack keeps teardown localized so pygame shuts down even if the loop raises.
    with ExitStack() as stack:
        stack.callback(pygame.quit)
        viewer = SceneViewer(CameraController(camera_config), settings)
        stack.callback(viewer.close)
        viewer.run()


if __name__ == "__main__":
    main()
