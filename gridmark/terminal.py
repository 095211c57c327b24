"""Terminal interface using Blessed for display and Curtsies for input."""

import blessed
from typing import Optional
import sys
import select


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        # Last frame written, for minimal redraws
        self._last_lines: list[str] | None = None
        self._last_status: str | None = None

    def setup(self):
        """Enter fullscreen mode and start reading keys through curtsies."""
        print(self.term.enter_fullscreen)
        print(self.term.hide_cursor)
        print(self.term.clear)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            try:
                from curtsies import Input  # type: ignore
                self._curtsies_input = Input(keynames='curtsies')  # type: ignore
                self._curtsies_input.__enter__()
            except Exception:
                # Justification: curtsies can fail to enter raw mode when
                # stdin is not a terminal; the editor then runs without input.
                self._curtsies_input = None

    def cleanup(self):
        """Exit fullscreen mode and restore the terminal."""
        if self.is_fullscreen:
            print(self.term.exit_fullscreen)
            print(self.term.normal_cursor)
            self.is_fullscreen = False
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)  # type: ignore
            finally:
                self._curtsies_input = None

    def invalidate_frame(self) -> None:
        """Force a full repaint on the next update."""
        self._last_lines = None
        self._last_status = None

    def _compose_line(self, line: str, highlight: Optional[tuple[int, int]]) -> str:
        text = line[:self.width].ljust(self.width)
        if not highlight:
            return text
        start, end = highlight
        return text[:start] + self.term.reverse + text[start:end] + self.term.normal + text[end:]

    def update_frame(
        self,
        lines: list[str],
        cursor_y: int,
        cursor_x: int,
        highlights: Optional[list] = None,
        status: str = "",
        prompt: bool = False,
    ) -> None:
        """Write the lines that changed since the last frame.

        When ``prompt`` is set the cursor is parked at the end of the status
        line, where the user is typing.
        """
        rows = self.height
        padded = list(lines[:rows]) + [""] * max(0, rows - len(lines))
        if self._last_lines is None or len(self._last_lines) != len(padded):
            print(self.term.home + self.term.clear, end='')
            self._last_lines = [None] * len(padded)
            self._last_status = None

        for y, line in enumerate(padded):
            highlight = highlights[y] if highlights and y < len(highlights) else None
            composed = self._compose_line(line, highlight)
            if composed != self._last_lines[y]:
                print(self.term.move(y, 0) + composed, end='')
                self._last_lines[y] = composed

        status_text = status.ljust(self.term.width)[:self.term.width]
        if status_text != self._last_status:
            print(self.term.move(self.term.height - 1, 0) + self.term.reverse
                  + status_text + self.term.normal, end='')
            self._last_status = status_text

        if prompt:
            print(self.term.move(self.term.height - 1, len(status)) + self.term.normal_cursor,
                  end='', flush=True)
        else:
            print(self.term.move(cursor_y, cursor_x) + self.term.normal_cursor, end='', flush=True)

    def draw_error_message(self, message1: str, message2: str = ""):
        """Draw a centered error box, e.g. when the terminal is too small."""
        print(self.term.home + self.term.clear, end='')
        center_y = self.term.height // 2
        box_width = max(len(message1), len(message2)) + 4
        left_margin = max(0, (self.term.width - box_width) // 2)

        print(self.term.move(center_y - 2, left_margin) + "╔" + "═" * (box_width - 2) + "╗", end='')
        print(self.term.move(center_y - 1, left_margin) + "║ " + message1.center(box_width - 4) + " ║", end='')
        bottom = center_y
        if message2:
            print(self.term.move(center_y, left_margin) + "║ " + message2.center(box_width - 4) + " ║", end='')
            bottom += 1
        print(self.term.move(bottom, left_margin) + "╚" + "═" * (box_width - 2) + "╝", end='')

        help_text = "Ctrl-Q to quit | Resize terminal to continue"
        print(self.term.move(self.term.height - 1, max(0, (self.term.width - len(help_text)) // 2))
              + help_text, end='', flush=True)
        self.invalidate_frame()

    def get_key(self, timeout=None):
        """Read one key name from curtsies, or None on timeout / no input."""
        if self._curtsies_input is None:
            return None
        if timeout is not None:
            ready, _, _ = select.select([sys.stdin], [], [], float(timeout))
            if not ready:
                return None
        return str(next(self._curtsies_input))

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows (excluding status line)."""
        return self.term.height - 1
