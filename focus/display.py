#!/usr/bin/python3
"""
Grayscale display control for focus.

The color matrix is changed through xrandr's CTM property. Changes are
launched and not waited on, so a slow display tool never stalls the daemon.
"""
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Union

from focus.errors import ExternalCommandError

logger = logging.getLogger(__name__)

# Color transformation matrices (row-major 3x3)
MATRIX_GRAYSCALE = "0.2126, 0.7152, 0.0722, 0.2126, 0.7152, 0.0722, 0.2126, 0.7152, 0.0722"
MATRIX_NORMAL = "1, 0, 0, 0, 1, 0, 0, 0, 1"


@dataclass(frozen=True)
class NoOp:
    pass


@dataclass(frozen=True)
class Apply:
    target: bool


def reconcile_display(target: bool, last_applied: Optional[bool]) -> Union[NoOp, Apply]:
    """Apply only when the state is unknown or differs from the target."""
    if last_applied is None or last_applied != target:
        return Apply(target)
    return NoOp()


class XrandrDisplay:
    """Display backend driving xrandr on an X server"""

    def __init__(self, command: str = "xrandr", display_env: str = ":0"):
        self.command = command
        self.display_env = display_env

    def _env(self):
        env = dict(os.environ)
        env["DISPLAY"] = self.display_env
        return env

    def list_displays(self) -> List[str]:
        """Names of connected outputs, e.g. ['eDP-1', 'HDMI-1']"""
        try:
            result = subprocess.run(
                [self.command, '--current'],
                capture_output=True, text=True, env=self._env()
            )
        except OSError as e:
            raise ExternalCommandError(f"Cannot run {self.command}: {e}") from e
        if result.returncode != 0:
            raise ExternalCommandError(
                f"{self.command} --current failed: {result.stderr.strip()}"
            )

        screens = []
        for line in result.stdout.splitlines():
            if " connected" in line:
                screens.append(line.split()[0])
        return screens

    def set_grayscale(self, screen: str, enabled: bool):
        matrix = MATRIX_GRAYSCALE if enabled else MATRIX_NORMAL
        try:
            subprocess.Popen(
                [self.command, '--output', screen, '--set', 'CTM', matrix],
                env=self._env(),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ExternalCommandError(f"Cannot launch {self.command} for {screen}: {e}") from e


class DisplayController:
    """
    Remembers the last applied grayscale state so the backend is only called
    on transitions. `last_applied` is None when unknown, which forces the next
    update to apply.
    """

    def __init__(self, backend):
        self.backend = backend
        self.last_applied: Optional[bool] = None

    def update(self, target: bool) -> bool:
        """Apply `target` if it differs from the last state. True if applied."""
        action = reconcile_display(target, self.last_applied)
        if isinstance(action, NoOp):
            return False
        self.force(action.target)
        return True

    def force(self, target: bool):
        """Apply `target` to every connected display regardless of state."""
        try:
            screens = self.backend.list_displays()
        except ExternalCommandError:
            self.last_applied = None
            raise

        failed = []
        for screen in screens:
            try:
                self.backend.set_grayscale(screen, target)
            except ExternalCommandError as e:
                logger.error(f"Error setting grayscale on {screen}: {e}")
                failed.append(screen)

        if failed:
            self.last_applied = None
            raise ExternalCommandError(f"Grayscale change failed for: {', '.join(failed)}")

        self.last_applied = target
        logger.info(f"Display grayscale {'on' if target else 'off'} ({len(screens)} screen(s))")
