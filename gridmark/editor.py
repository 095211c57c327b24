"""Terminal grid editor built on GridDocument."""

import os
import sys
import select
import signal
import termios
import tempfile
import errno
import logging
from typing import Callable, Optional

from .terminal import TerminalInterface
from .document import GridDocument
from .config import GridConfig
from .errors import ConfigurationError
from .view import GridView, CellCursor
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .navigation import Direction, SelectionState
from .constants import GridConstants
from .commands import CommandRegistry
from . import settings_persistence
from .settings_persistence import get_persistence

logger = logging.getLogger(__name__)

HELP_LINES = [
    "",
    "FILE                          NAVIGATION",
    "  Ctrl-S    Save                Arrows        Move (crosses cells at edges)",
    "  Ctrl-Q    Quit                Tab/Shift-Tab Next/previous cell",
    "  F1        Help                Ctrl-A/Home   Start of cell",
    "                                Ctrl-E/End    End of cell",
    "",
    "STRUCTURE                     EDITING",
    "  Enter     Row below           Backspace     Delete char before",
    "  Alt-Enter Row above           Ctrl-D/Del    Delete char after",
    "  Ctrl-O    Row below (stay)",
    "  Alt-O     Row above (stay)",
    "  Ctrl-N    Column right",
    "  Alt-N     Column left",
    "  Ctrl-K    Delete row",
    "  Alt-K     Delete column",
    "  Alt-X     Delete all",
]


class Editor:
    """Terminal front end: owns the cursor, prompts and file handling."""

    def __init__(self, config: Optional[GridConfig] = None, warn_on_delete: bool = True):
        self.terminal = TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.view = GridView()
        self.config = config or GridConfig()
        self.document = GridDocument("", self.config, on_change=self._on_document_change)
        self.cursor = CellCursor()
        self.command_registry = CommandRegistry()
        self.warn_on_delete = warn_on_delete
        self.running = False
        self.error_mode = False  # True when terminal is too narrow
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        self.filename = None
        self.modified = False
        self.status_message = None
        self.prompt_mode = None  # None, 'save_filename', 'save_filename_quit', 'quit_confirm', 'delete_confirm'
        self.prompt_input = ""
        self._pending_delete: Optional[Callable[[bool], bool]] = None
        self._delete_prompt = ""
        self.help_visible = False

    def _on_document_change(self, text: str):
        self.modified = True
        self._clamp_cursor()

    def _clamp_cursor(self):
        self.cursor.row = max(0, min(self.cursor.row, self.document.height - 1))
        self.cursor.col = max(0, min(self.cursor.col, self.document.width - 1))
        self.cursor.caret = max(0, min(self.cursor.caret, len(self.current_text())))

    def current_text(self) -> str:
        return self.document.get_cell(self.cursor.row, self.cursor.col)

    # --- Cursor movement ---

    def move(self, direction: Direction):
        """Arrow-key movement.

        Up/down always change cell. Left/right move the caret inside the
        cell and only cross into the neighbouring cell from its edge.
        """
        row, col = self.cursor.row, self.cursor.col
        if direction in (Direction.UP, Direction.DOWN):
            target = self.document.resolve_vertical_target(row, col, direction)
        else:
            placement = self.document.classify_cursor_position(
                self.current_text(), SelectionState.caret(self.cursor.caret)
            )
            target = self.document.resolve_horizontal_target(row, col, direction, placement)
            if target is None:
                step = -1 if direction is Direction.LEFT else 1
                self.cursor.caret = max(0, min(self.cursor.caret + step, len(self.current_text())))
                return
        self.cursor.row, self.cursor.col = target.address.row, target.address.col
        if target.caret is not None:
            self.cursor.caret = target.caret

    def move_to_adjacent_cell(self, step: int):
        """Move to the next (step=1) or previous (step=-1) cell in reading order."""
        width = self.document.width
        index = self.cursor.row * width + self.cursor.col + step
        if not 0 <= index < width * self.document.height:
            return
        self.cursor.row, self.cursor.col = divmod(index, width)
        self.cursor.caret = len(self.current_text())

    # --- Cell editing ---

    def insert_text(self, text: str):
        value = self.current_text()
        caret = self.cursor.caret
        self.document.set_cell(self.cursor.row, self.cursor.col, value[:caret] + text + value[caret:])
        self.cursor.caret = caret + len(text)

    def delete_backward(self) -> bool:
        value = self.current_text()
        caret = self.cursor.caret
        if caret == 0:
            return False
        self.cursor.caret = caret - 1
        self.document.set_cell(self.cursor.row, self.cursor.col, value[:caret - 1] + value[caret:])
        return True

    def delete_forward(self) -> bool:
        value = self.current_text()
        caret = self.cursor.caret
        if caret >= len(value):
            return False
        self.document.set_cell(self.cursor.row, self.cursor.col, value[:caret] + value[caret + 1:])
        return True

    # --- Structural edits ---

    def insert_row_on_enter(self, shift_held: bool = False):
        address = self.document.insert_row_on_enter(self.cursor.row, self.cursor.col, shift_held)
        self.cursor.row, self.cursor.col = address.row, address.col
        self.cursor.caret = 0

    def add_row(self, before: bool = False):
        if before:
            self.document.add_row_before(self.cursor.row)
            self.cursor.row += 1
        else:
            self.document.add_row_after(self.cursor.row)

    def add_column(self, before: bool = False):
        if before:
            self.document.add_column_before(self.cursor.col)
            self.cursor.col += 1
        else:
            self.document.add_column_after(self.cursor.col)

    def _request_delete(self, prompt: str, action: Callable[[bool], bool]):
        if not self.warn_on_delete:
            action(True)
            return
        self._pending_delete = action
        self._delete_prompt = prompt
        self.prompt_mode = 'delete_confirm'

    def request_delete_row(self):
        if self.document.height <= 1:
            self.status_message = "Cannot delete the only row"
            return
        row = self.cursor.row
        self._request_delete(GridConstants.DELETE_ROW_WARNING,
                             lambda confirmed: self.document.delete_row(row, confirmed=confirmed))

    def request_delete_column(self):
        if self.document.width <= 1:
            self.status_message = "Cannot delete the only column"
            return
        col = self.cursor.col
        self._request_delete(GridConstants.DELETE_COLUMN_WARNING,
                             lambda confirmed: self.document.delete_column(col, confirmed=confirmed))

    def request_clear_all(self):
        self._request_delete(GridConstants.DELETE_ALL_WARNING,
                             lambda confirmed: self.document.clear_all(confirmed=confirmed))

    # --- Main loop ---

    def _handle_resize(self, signum, frame):
        del signum, frame # Unused
        os.write(self._resize_pipe_w, GridConstants.RESIZE_PIPE_MARKER)

    def run(self):
        """Run the main editor loop."""
        self.terminal.setup()
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        old_settings = None
        try:
            with self.terminal.term.cbreak():
                try:
                    old_settings = termios.tcgetattr(sys.stdin)
                    new_settings = list(old_settings)
                    # Disable IXON/IXOFF so Ctrl-S and Ctrl-Q reach the editor
                    new_settings[0] &= ~(termios.IXON | termios.IXOFF)
                    termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
                except (termios.error, AttributeError, OSError):
                    old_settings = None

                need_draw = True
                while self.running:
                    if need_draw:
                        self._draw()
                        need_draw = False

                    ready, _, _ = select.select([0, self._resize_pipe_r], [], [])
                    if self._resize_pipe_r in ready:
                        os.read(self._resize_pipe_r, 1024)
                        self.terminal.invalidate_frame()
                        need_draw = True
                    elif 0 in ready:
                        key_event = self.keyboard.get_key_event(timeout=0)
                        if key_event:
                            self._handle_key_event(key_event)
                            need_draw = True

                if old_settings:
                    try:
                        termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
                    except (termios.error, OSError):
                        pass
        except KeyboardInterrupt:
            pass
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()

    def _status_text(self) -> str:
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            return f" File to save in: {self.prompt_input}"
        if self.prompt_mode == 'quit_confirm':
            return " Save file? (y, n) "
        if self.prompt_mode == 'delete_confirm':
            return " " + self._delete_prompt
        if self.status_message:
            return f" {self.status_message}"
        name = self.filename or "[new file]"
        flag = " *" if self.modified else ""
        return (f" {name}{flag}  {self.document.height}x{self.document.width}"
                f"  R{self.cursor.row + 1}C{self.cursor.col + 1}   F1 for help")

    def _draw(self):
        if self.help_visible:
            self._draw_help()
            return
        if self.terminal.width < GridConstants.MIN_TERMINAL_WIDTH:
            self.error_mode = True
            self.terminal.draw_error_message(
                GridConstants.TERMINAL_TOO_NARROW_MESSAGE.format(GridConstants.MIN_TERMINAL_WIDTH),
                GridConstants.CURRENT_WIDTH_MESSAGE.format(self.terminal.width),
            )
            return
        self.error_mode = False
        self.view.num_rows = self.terminal.height
        self.view.num_columns = self.terminal.width
        self.view.render(self.document.rows, self.cursor)
        self.terminal.update_frame(
            self.view.lines,
            self.view.visual_cursor_y,
            self.view.visual_cursor_x,
            highlights=self.view.highlights,
            status=self._status_text(),
            prompt=self.prompt_mode is not None,
        )

    def _draw_help(self):
        term = self.terminal.term
        print(term.clear(), end='')
        title = "GRIDMARK HELP"
        print(f"{term.move(1, max(0, (term.width - len(title)) // 2))}{term.bold}{title}{term.normal}", end='')
        top = max(3, (term.height - len(HELP_LINES)) // 2)
        left = max(0, (term.width - max(len(line) for line in HELP_LINES)) // 2)
        for i, line in enumerate(HELP_LINES):
            print(f"{term.move(top + i, left)}{line}", end='')
        print(f"{term.move(term.height - 1, 0)} Press any key to continue", end='')
        print(term.hide_cursor, end='', flush=True)

    def show_help(self):
        self.help_visible = True

    def hide_help(self):
        self.help_visible = False
        self.terminal.invalidate_frame()

    def _handle_key_event(self, key_event: KeyEvent):
        """Dispatch a key event to prompts or the command registry."""
        if self.help_visible:
            self.hide_help()
            return
        if self.status_message and not self.prompt_mode:
            self.status_message = None
        if self._handle_prompt_mode(key_event):
            return
        if self.error_mode:
            return
        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape':
            return
        if self.command_registry.execute(self, key_event):
            self.modified = True

    def _handle_prompt_mode(self, key_event: KeyEvent) -> bool:
        """Returns True if in prompt mode and the event was consumed."""
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            self._handle_filename_prompt(key_event)
            return True
        if self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
            return True
        if self.prompt_mode == 'delete_confirm':
            self._handle_delete_confirm(key_event)
            return True
        return False

    def _handle_delete_confirm(self, key_event: KeyEvent):
        confirmed = key_event.key_type == KeyType.REGULAR and key_event.value.lower() == 'y'
        action, self._pending_delete = self._pending_delete, None
        self.prompt_mode = None
        if action is not None and not action(confirmed):
            self.status_message = "Nothing deleted"

    def _handle_filename_prompt(self, key_event: KeyEvent):
        if (key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape') or \
           (key_event.key_type == KeyType.CTRL and key_event.value == 'g'):  # ESC or Ctrl-G
            self.prompt_mode = None
            self.prompt_input = ""
        elif key_event.key_type == KeyType.SPECIAL and key_event.value == 'enter':
            if self.prompt_input:
                if self.save_file(self.prompt_input):
                    self.status_message = f"Saved to {self.prompt_input}"
                    if self.prompt_mode == 'save_filename_quit':
                        self.running = False
                self.prompt_mode = None
                self.prompt_input = ""
        elif key_event.key_type == KeyType.SPECIAL and key_event.value == 'backspace':
            self.prompt_input = self.prompt_input[:-1]
        elif key_event.key_type == KeyType.REGULAR and ord(key_event.value[0]) >= 32:
            self.prompt_input += key_event.value

    def _handle_quit_confirm(self, key_event: KeyEvent):
        char = key_event.value.lower() if key_event.key_type == KeyType.REGULAR else ''
        if char == 'y':
            if self.filename:
                if self.save_file(self.filename):
                    self.running = False
                self.prompt_mode = None
            else:
                self.prompt_mode = 'save_filename_quit'
                self.prompt_input = ""
        elif char == 'n':
            self.running = False
        else:
            self.prompt_mode = None

    # --- Files ---

    def load_file(self, filename: str):
        """Load a delimited-text file; a missing file starts an empty grid.

        Stored per-document settings fill in options not given explicitly.

        Raises:
            ConfigurationError: if the file exists but cannot be read.
        """
        self.filename = filename
        stored = get_persistence().load_settings(filename)
        if self.config.auto_detect and stored.get(settings_persistence.DELIMITER):
            self.config = GridConfig(
                delimiter=stored[settings_persistence.DELIMITER],
                quote_char=stored.get(settings_persistence.QUOTE_CHAR) or self.config.quote_char,
                skip_empty_lines=self.config.skip_empty_lines,
            )
        if stored.get(settings_persistence.WARN_ON_DELETE) is False:
            self.warn_on_delete = False

        try:
            # newline='' hands \r\n through to the codec untouched
            with open(filename, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
        except FileNotFoundError:
            content = ""
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot open {filename}: {e}") from e

        self.document = GridDocument(content, self.config, on_change=self._on_document_change)
        self.cursor = CellCursor()
        self.modified = False
        if self.document.diagnostics:
            problems = [d for d in self.document.diagnostics if d.code != "UndetectableDelimiter"]
            if problems:
                self.status_message = GridConstants.PARSE_WARNINGS_MESSAGE.format(len(problems))

    def save_file(self, filename: str) -> bool:
        """Save the current grid to a file atomically.

        Returns:
            True if save succeeded, False otherwise
        """
        content = self.document.get_text()
        dir_name = os.path.dirname(filename) or '.'
        suffix = os.path.splitext(filename)[1]
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', newline='',
                                             dir=dir_name, suffix=suffix,
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_filename, filename)
        except OSError as e:
            if isinstance(e, PermissionError):
                self.status_message = f"Error: Permission denied saving {filename}"
            elif e.errno == errno.ENOSPC:
                self.status_message = "Error: No space left on device"
            else:
                self.status_message = f"Error: Cannot save to {filename}"
            logger.warning("Saving %s failed: %s", filename, e)
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass
            return False

        self.filename = filename
        self.modified = False
        metadata = self.document.metadata
        settings = {
            settings_persistence.QUOTE_CHAR: metadata.quote_char,
            settings_persistence.WARN_ON_DELETE: self.warn_on_delete,
        }
        # A detected delimiter is detected again on the next load
        if not self.config.auto_detect:
            settings[settings_persistence.DELIMITER] = metadata.delimiter
        get_persistence().save_settings(filename, settings)
        return True

    def _handle_save(self):
        """Handle Ctrl-S."""
        if self.filename:
            if self.save_file(self.filename):
                self.status_message = f"Saved to {self.filename}"
        else:
            self.prompt_mode = 'save_filename'
            self.prompt_input = ""
