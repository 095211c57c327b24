"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING
from .keyboard import KeyType
from .navigation import Direction

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._move(editor, key_event)
        return False

    @abstractmethod
    def _move(self, editor: 'Editor', key_event: 'KeyEvent'):
        pass


class ArrowCommand(MovementCommand):
    def __init__(self, direction: Direction):
        self.direction = direction

    def _move(self, editor, key_event):
        editor.move(self.direction)


class NextCellCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.move_to_adjacent_cell(1)


class PreviousCellCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.move_to_adjacent_cell(-1)


class CellStartCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.cursor.caret = 0


class CellEndCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.cursor.caret = len(editor.current_text())


class EditCommand(EditorCommand):
    """Base class for commands that change the document right away."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        return self._edit(editor, key_event) is not False

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent') -> Optional[bool]:
        """Perform the edit; return False if nothing changed."""
        pass


class BackspaceCommand(EditCommand):
    def _edit(self, editor, key_event):
        return editor.delete_backward()


class DeleteCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        return editor.delete_forward()


class InsertTextCommand(EditCommand):
    def _edit(self, editor, key_event):
        char = key_event.value
        # Filter out control characters
        if not char or ord(char[0]) < 32:
            return False
        editor.insert_text(char)


class InsertRowOnEnterCommand(EditCommand):
    def __init__(self, before: bool = False):
        self.before = before

    def _edit(self, editor, key_event):
        editor.insert_row_on_enter(shift_held=self.before)


class AddRowCommand(EditCommand):
    def __init__(self, before: bool = False):
        self.before = before

    def _edit(self, editor, key_event):
        editor.add_row(before=self.before)


class AddColumnCommand(EditCommand):
    def __init__(self, before: bool = False):
        self.before = before

    def _edit(self, editor, key_event):
        editor.add_column(before=self.before)


class SystemCommand(EditorCommand):
    """Commands that don't change the document directly.

    Deletes live here too: they only ask for confirmation, and the document
    changes when the prompt is answered.
    """

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        pass


class DeleteRowCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.request_delete_row()


class DeleteColumnCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.request_delete_column()


class ClearAllCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.request_clear_all()


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        if editor.modified:
            editor.prompt_mode = 'quit_confirm'
        else:
            editor.running = False


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor._handle_save()


class HelpCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.show_help()


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        # Navigation
        for direction in Direction:
            self.register((KeyType.SPECIAL, direction.value), ArrowCommand(direction))
        self.register((KeyType.SPECIAL, 'tab'), NextCellCommand())
        self.register((KeyType.SHIFT_SPECIAL, 'tab'), PreviousCellCommand())
        self.register((KeyType.SPECIAL, 'home'), CellStartCommand())
        self.register((KeyType.SPECIAL, 'end'), CellEndCommand())
        self.register((KeyType.CTRL, 'a'), CellStartCommand())
        self.register((KeyType.CTRL, 'e'), CellEndCommand())

        # Cell editing
        self.register((KeyType.SPECIAL, 'backspace'), BackspaceCommand())
        self.register((KeyType.SPECIAL, 'delete'), DeleteCharCommand())
        self.register((KeyType.CTRL, 'd'), DeleteCharCommand())

        # Structure
        self.register((KeyType.SPECIAL, 'enter'), InsertRowOnEnterCommand())
        self.register((KeyType.ALT, 'enter'), InsertRowOnEnterCommand(before=True))
        self.register((KeyType.CTRL, 'o'), AddRowCommand())
        self.register((KeyType.ALT, 'o'), AddRowCommand(before=True))
        self.register((KeyType.CTRL, 'n'), AddColumnCommand())
        self.register((KeyType.ALT, 'n'), AddColumnCommand(before=True))
        self.register((KeyType.CTRL, 'k'), DeleteRowCommand())
        self.register((KeyType.ALT, 'k'), DeleteColumnCommand())
        self.register((KeyType.ALT, 'x'), ClearAllCommand())

        # System
        self.register((KeyType.CTRL, 'q'), QuitCommand())
        self.register((KeyType.CTRL, 's'), SaveCommand())
        self.register((KeyType.SPECIAL, 'f1'), HelpCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        return self._commands.get((key_type, value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the document was modified
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command:
            return command.execute(editor, key_event)
        if key_event.key_type == KeyType.REGULAR:
            return InsertTextCommand().execute(editor, key_event)
        return False
