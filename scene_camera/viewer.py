"""Pygame host that shows a large background through the gesture camera.

The viewer owns the window, the frame loop and rendering. Input is translated
by ``PygameGestureSource`` and handed to the ``CameraController``; each frame
the viewer reads the resulting transform and crops the matching part of the
background onto the screen.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Tuple

import numpy as np
import pygame

from scene_camera.camera_controller import CameraController
from scene_camera.config import ViewerSettings
from scene_camera.geometry import Bounds, Viewport
from scene_camera.pygame_gestures import PygameGestureSource

logger = logging.getLogger(__name__)


def build_background(size: Tuple[int, int], grid_spacing: int) -> np.ndarray:
    """Return a ``(width, height, 3)`` gradient with grid lines as uint8.

    Layout matches ``pygame.surfarray`` (x first). The grid makes panning and
    zooming easy to follow; the brighter border marks the background edges.
    """

    width, height = size
    xs = np.linspace(0.0, 1.0, width)[:, None]
    ys = np.linspace(0.0, 1.0, height)[None, :]
    pixels = np.empty((width, height, 3), dtype=float)
    pixels[..., 0] = 30 + 120 * xs
    pixels[..., 1] = 40 + 90 * ys
    pixels[..., 2] = 90 + 60 * (1 - xs) * ys

    if grid_spacing > 0:
        pixels[::grid_spacing, :, :] = (200, 200, 220)
        pixels[:, ::grid_spacing, :] = (200, 200, 220)
    pixels[:4, :, :] = pixels[-4:, :, :] = (255, 210, 90)
    pixels[:, :4, :] = pixels[:, -4:, :] = (255, 210, 90)
    return pixels.astype(np.uint8)


def background_crop(frame: Bounds, bounds: Bounds) -> pygame.Rect:
    """Pixel rect of the background image covered by the world ``frame``.

    Image rows grow downward while world y grows upward, so the top of the
    frame (``max_y``) maps to the smallest row.
    """

    left = frame.min_x - bounds.min_x
    top = bounds.max_y - frame.max_y
    return pygame.Rect(round(left), round(top), max(1, round(frame.width)), max(1, round(frame.height)))


class SceneViewer:
    """Window plus render loop for a ``CameraController``."""

    def __init__(self, controller: CameraController, settings: Optional[ViewerSettings] = None) -> None:
        self.settings = settings or ViewerSettings()
        # Validate the scene before opening a window so a bad size never
        # leaves pygame initialized.
        self.bounds = Bounds.centered(*self.settings.background_size)
        self.controller = controller
        self.controller.initialize(Viewport(*self.settings.window_size), self.bounds)

        pygame.init()
        pygame.display.set_caption(self.settings.caption)
        self.screen = pygame.display.set_mode(self.settings.window_size)
        self.clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("montserrat", 20, bold=True)

        # Built once; cropping a cached surface keeps per-frame work small.
        pixels = build_background(self.settings.background_size, self.settings.grid_spacing)
        self.background = pygame.surfarray.make_surface(pixels)

        self.gestures = PygameGestureSource(self.settings)
        self.fps_display = 0.0

    def run(self) -> None:
        """Main loop: events -> recognizer -> controller -> render."""

        running = True
        while running:
            self.clock.tick(self.settings.fps)
            instantaneous_fps = self.clock.get_fps() or 0.0
            self.fps_display = 0.9 * self.fps_display + 0.1 * instantaneous_fps

            now = time.monotonic()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_r:
                    self.controller.zoom_to(self.controller.config.reset_scale)
                    self.controller.move_to(self.bounds.center)
                    logger.info("Camera recentred")
                else:
                    self.gestures.feed(event, now=now)

            self.controller.pump(self.gestures)
            self._draw()
            pygame.display.flip()

    def close(self) -> None:
        self.gestures.close()
        pygame.quit()

    def _draw(self) -> None:
        """Crop the visible world out of the background and scale it to the window."""

        crop = background_crop(self.controller.visible_frame(), self.bounds)
        # Blit onto a crop-sized canvas so an oversized frame shows black
        # borders instead of stretching whatever part overlaps the image.
        canvas = pygame.Surface(crop.size)
        canvas.blit(self.background, (-crop.x, -crop.y))
        self.screen.blit(pygame.transform.smoothscale(canvas, self.settings.window_size), (0, 0))
        self._draw_hud()

    def _draw_hud(self) -> None:
        """Render scale, position and FPS with a soft shadow for readability."""

        def draw_text(text: str, pos: Tuple[int, int]) -> None:
            shadow = self.hud_font.render(text, True, (0, 0, 0))
            main = self.hud_font.render(text, True, (240, 240, 255))
            self.screen.blit(shadow, (pos[0] + 2, pos[1] + 2))
            self.screen.blit(main, pos)

        position = self.controller.position
        width = self.settings.window_size[0]
        draw_text(f"Scale: {self.controller.scale:.2f}", (20, 12))
        draw_text(f"Pos: ({position.x:.0f}, {position.y:.0f})", (width // 2 - 80, 12))
        draw_text(f"{self.fps_display:5.1f} FPS", (width - 140, 12))
