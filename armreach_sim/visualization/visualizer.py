"""
Real-time Pygame window for the arm-reaching simulation.

Blits rendered frames, overlays the target and joint-angle status text,
and forwards key presses to the keyboard teleop so the target can be moved
while the arm animates.

Classes:
    SimVisualizer: Live rendering window with HUD overlay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from armreach_sim.control.control_loop import StatusReport
from armreach_sim.teleop.keyboard_teleop import KeyboardTeleop
from armreach_sim.utils.constants import COLOR_TEXT

logger = logging.getLogger(__name__)

_LOADING_TEXT = "Loading model..."


@dataclass
class SimVisualizer:
    """Pygame-based window for the interactive simulation.

    Call ``render_frame`` once per animation frame with the rendered image
    and the frame's status report.  Key presses received while pumping
    events are handed to ``teleop``.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        fps: Target frames per second.
        window_title: Caption displayed in the title bar.
        teleop: Receives key-down events; events are only drained when
            *None*.
    """

    width: int = 640
    height: int = 480
    fps: int = 60
    window_title: str = "Arm Reach Simulation"
    teleop: Optional[KeyboardTeleop] = None
    _screen: Optional[Any] = None
    _clock: Optional[Any] = None
    _font: Optional[Any] = None

    # ------------------------------------------------------------------
    # Initialisation / teardown
    # ------------------------------------------------------------------

    def init_display(self) -> None:
        """Create the Pygame window, clock and HUD font.

        Raises:
            ImportError: If Pygame is not installed.
        """
        try:
            import pygame
        except ImportError as exc:
            raise ImportError("Pygame required: pip install pygame") from exc
        pygame.init()
        self._screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.window_title)
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 16)
        logger.info("Opened %dx%d window", self.width, self.height)

    def close(self) -> None:
        """Destroy the Pygame window and quit Pygame."""
        import pygame

        pygame.quit()
        self._screen = None

    # ------------------------------------------------------------------
    # Live rendering
    # ------------------------------------------------------------------

    def _blit_image(self, image: np.ndarray) -> None:
        """Blit an (H, W, 3) uint8 image scaled to the window."""
        import pygame

        surface = pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))
        scaled = pygame.transform.scale(surface, (self.width, self.height))
        self._screen.blit(scaled, (0, 0))

    def _draw_hud_text(self, text: str, y_offset: int) -> None:
        """Draw a single line of HUD text at the given y-offset."""
        rendered = self._font.render(text, True, COLOR_TEXT)
        self._screen.blit(rendered, (8, y_offset))

    @staticmethod
    def hud_lines(status: Optional[StatusReport]) -> List[str]:
        """Return the HUD text lines for *status*.

        Args:
            status: Latest report, or *None* while the model is loading.

        Returns:
            Target line followed by the joint-angle lines.
        """
        if status is None:
            return [_LOADING_TEXT]
        return [status.format_target(), *status.format_angles().split("\n")]

    def _draw_hud(self, status: Optional[StatusReport]) -> None:
        for index, line in enumerate(self.hud_lines(status)):
            self._draw_hud_text(line, 4 + 18 * index)

    def render_frame(self, image: np.ndarray, status: Optional[StatusReport] = None) -> bool:
        """Blit one frame to the window with HUD overlay.

        Args:
            image: (H, W, 3) uint8 RGB image.
            status: Status report shown in the HUD.

        Returns:
            True if still running, False if user closed the window.
        """
        if self._screen is None:
            self.init_display()
        self._blit_image(image)
        self._draw_hud(status)
        return self._flip_display()

    def _pump_events(self) -> bool:
        """Process Pygame events and return False if user quit."""
        import pygame

        if self.teleop is not None:
            return self.teleop.process_pygame_events()
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
        return True

    def _flip_display(self) -> bool:
        """Update the display, pump events, and tick the clock."""
        import pygame

        pygame.display.flip()
        alive = self._pump_events()
        if self._clock is not None:
            self._clock.tick(self.fps)
        return alive
