"""Non-blocking single-key input for the live timer."""

from __future__ import annotations

import sys


class KeyboardHandler:
    """Reads single keypresses from a POSIX terminal without blocking."""

    def __init__(self):
        self.fd = sys.stdin.fileno()
        self.old_settings = None
        self._setup()

    def _setup(self) -> None:
        import termios
        import tty

        try:
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error:
            # stdin is not a tty (piped input, test runner)
            self.old_settings = None

    def get_key(self) -> str | None:
        """Return the pressed key lowercased, or None if nothing is waiting."""
        import select

        if self.old_settings is None:
            return None
        if select.select([sys.stdin], [], [], 0)[0]:
            return sys.stdin.read(1).lower()
        return None

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is not None:
            import termios

            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None


class WindowsKeyboardHandler:
    """Keyboard handler for Windows using msvcrt."""

    def __init__(self):
        import msvcrt

        self.msvcrt = msvcrt

    def get_key(self) -> str | None:
        if self.msvcrt.kbhit():
            key = self.msvcrt.getwch()
            return key.lower()
        return None

    def stop(self) -> None:
        pass


def create_keyboard_handler() -> KeyboardHandler | WindowsKeyboardHandler:
    if sys.platform == "win32":
        return WindowsKeyboardHandler()
    return KeyboardHandler()
