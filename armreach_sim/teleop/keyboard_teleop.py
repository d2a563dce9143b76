"""
Keyboard teleoperation of the target position.

Translates key presses into fixed signed displacements of the target.
Keys are identified by DOM-style ``KeyboardEvent.code`` strings
(``'ArrowUp'``, ``'KeyW'``, ...).  Pygame key events and single-character
terminal commands are converted to the same codes so every front end
shares one binding table.

Classes:
    KeyEvent: A key press that can be marked as consumed.
    KeyboardTeleop: Maps key events to target displacements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from armreach_sim.control.target_state import TargetState
from armreach_sim.utils.constants import KEY_BINDINGS, TARGET_STEP

logger = logging.getLogger(__name__)

# Terminal character -> key code
_TERMINAL_KEYS: Dict[str, str] = {
    "w": "KeyW",
    "s": "KeyS",
    "a": "KeyA",
    "d": "KeyD",
    "q": "KeyQ",
    "e": "KeyE",
}
_TERMINAL_QUIT: str = "x"


@dataclass
class KeyEvent:
    """A single key-down event.

    Attributes:
        code: Physical key identifier, e.g. ``'KeyQ'``.
        default_prevented: Set once some handler has consumed the event.
    """

    code: str
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass
class KeyboardTeleop:
    """Moves the target by ``step_size`` along one axis per recognised key.

    Attributes:
        target: The target state to displace.
        step_size: Magnitude of each displacement.
        bindings: Key code -> (axis, sign) table.
    """

    target: TargetState
    step_size: float = TARGET_STEP
    bindings: Dict[str, Tuple[str, float]] = field(
        default_factory=lambda: dict(KEY_BINDINGS)
    )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def displacement_for(self, code: str) -> Optional[Tuple[str, float]]:
        """Return ``(axis, delta)`` for *code*, or *None* if unbound."""
        binding = self.bindings.get(code)
        if binding is None:
            return None
        axis, sign = binding
        return axis, sign * self.step_size

    def handle_key(self, event: KeyEvent) -> bool:
        """Apply the displacement bound to *event*.

        Events already consumed elsewhere are ignored.  A recognised event
        moves the target exactly once and is marked consumed; unknown keys
        leave both the target and the event untouched.

        Args:
            event: The key-down event.

        Returns:
            True if the event was consumed.
        """
        if event.default_prevented:
            return False
        displacement = self.displacement_for(event.code)
        if displacement is None:
            return False
        axis, delta = displacement
        position = self.target.apply_displacement(axis, delta)
        event.prevent_default()
        logger.debug("%s -> target %s", event.code, position)
        return True

    def handle_code(self, code: str) -> bool:
        """Convenience wrapper building a fresh ``KeyEvent`` for *code*."""
        return self.handle_key(KeyEvent(code))

    def process_pygame_events(self) -> bool:
        """Pump Pygame events and apply every key-down.

        Returns:
            *False* if a QUIT event was received; *True* otherwise.

        Raises:
            ImportError: If Pygame is not installed.
        """
        try:
            import pygame
        except ImportError as exc:
            raise ImportError(
                "Pygame required for real-time teleop: pip install pygame"
            ) from exc
        alive = True
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                alive = False
            elif event.type == pygame.KEYDOWN:
                code = pygame_key_to_code(event.key, pygame)
                if code is not None:
                    self.handle_code(code)
        return alive

    def process_terminal_input(self, char: str) -> bool:
        """Apply a single-character terminal command.

        Supported characters: ``w``/``s`` (forward/back), ``a``/``d``
        (left/right), ``q``/``e`` (up/down), ``x`` (quit).

        Args:
            char: Character read from stdin.

        Returns:
            *False* if the quit character was received; *True* otherwise.
        """
        char = char.strip().lower()
        if char == _TERMINAL_QUIT:
            return False
        code = _TERMINAL_KEYS.get(char)
        if code is not None:
            self.handle_code(code)
        return True


def pygame_key_to_code(key: int, pygame_module: object) -> Optional[str]:
    """Translate a Pygame key constant into a ``KeyboardEvent.code`` string.

    Args:
        key: ``event.key`` of a Pygame KEYDOWN event.
        pygame_module: The ``pygame`` module (passed to avoid re-import).

    Returns:
        The matching code, or *None* for keys without a binding.
    """
    pg = pygame_module
    key_map = {
        pg.K_UP: "ArrowUp",
        pg.K_DOWN: "ArrowDown",
        pg.K_LEFT: "ArrowLeft",
        pg.K_RIGHT: "ArrowRight",
        pg.K_w: "KeyW",
        pg.K_s: "KeyS",
        pg.K_a: "KeyA",
        pg.K_d: "KeyD",
        pg.K_q: "KeyQ",
        pg.K_e: "KeyE",
    }
    return key_map.get(key)
