"""Key handling in the terminal editor, driven through parsed key events."""

import pytest

from gridmark.editor import Editor
from gridmark.keyboard import KeyboardHandler
from gridmark.settings_persistence import SettingsPersistence


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    persistence = SettingsPersistence(config_dir=tmp_path / "config")
    monkeypatch.setattr("gridmark.editor.get_persistence", lambda: persistence)
    return persistence


def make_editor(text="", warn_on_delete=True):
    editor = Editor(warn_on_delete=warn_on_delete)
    editor.document.set_text(text)
    editor.modified = False
    return editor


def press(editor, *keys):
    parser = KeyboardHandler(None)
    for key in keys:
        editor._handle_key_event(parser.parse_key(key))


def position(editor):
    return (editor.cursor.row, editor.cursor.col, editor.cursor.caret)


def test_typing_edits_current_cell():
    editor = make_editor("a,b\n1,2")
    press(editor, '<Ctrl-e>', 'x', 'y')
    assert editor.document.get_text() == "axy,b\n1,2"
    assert editor.modified
    press(editor, '<BACKSPACE>', '<Ctrl-a>', '<DELETE>')
    assert editor.document.get_cell(0, 0) == "x"


def test_backspace_at_cell_start_does_nothing():
    editor = make_editor("a,b")
    press(editor, '<BACKSPACE>')
    assert editor.document.get_text() == "a,b"
    assert not editor.modified


def test_down_and_up_jump_to_end_of_cell():
    editor = make_editor("a,b\nlonger,2")
    press(editor, '<DOWN>')
    assert position(editor) == (1, 0, 6)
    press(editor, '<DOWN>')
    assert position(editor) == (1, 0, 6)
    press(editor, '<UP>')
    assert position(editor) == (0, 0, 1)


def test_left_right_move_caret_then_cross_cells():
    editor = make_editor("ab,cd")
    assert position(editor) == (0, 0, 0)
    press(editor, '<RIGHT>')
    assert position(editor) == (0, 0, 1)
    press(editor, '<RIGHT>')
    assert position(editor) == (0, 0, 2)
    press(editor, '<RIGHT>')
    assert position(editor) == (0, 1, 0)
    press(editor, '<LEFT>')
    assert position(editor) == (0, 0, 2)


def test_right_at_last_column_stays():
    editor = make_editor("ab,cd")
    press(editor, '<TAB>', '<RIGHT>', '<RIGHT>')
    assert position(editor) == (0, 1, 2)


def test_tab_walks_cells_in_reading_order():
    editor = make_editor("a,b\nc,d")
    press(editor, '<TAB>', '<TAB>')
    assert position(editor) == (1, 0, 1)
    press(editor, '<Shift-TAB>')
    assert position(editor) == (0, 1, 1)


def test_enter_inserts_row_below_and_focuses_same_column():
    editor = make_editor("a,b\n1,2")
    press(editor, '<TAB>', '<Ctrl-j>')
    assert editor.document.rows == [["a", "b"], ["", ""], ["1", "2"]]
    assert position(editor) == (1, 1, 0)


def test_alt_enter_inserts_row_above():
    editor = make_editor("a,b\n1,2")
    press(editor, '<DOWN>', '<Esc+Ctrl-j>')
    assert editor.document.rows == [["a", "b"], ["", ""], ["1", "2"]]
    assert position(editor)[:2] == (1, 0)


def test_add_columns_keep_cursor_on_same_cell():
    editor = make_editor("a,b")
    press(editor, '<Ctrl-n>')
    assert editor.document.rows == [["a", "", "b"]]
    assert position(editor)[:2] == (0, 0)
    press(editor, '<Esc+n>')
    assert editor.document.rows == [["", "a", "", "b"]]
    assert position(editor)[:2] == (0, 1)


def test_add_rows_keep_cursor_on_same_cell():
    editor = make_editor("a\nb")
    press(editor, '<Esc+o>')
    assert editor.document.rows == [[""], ["a"], ["b"]]
    assert editor.cursor.row == 1
    press(editor, '<Ctrl-o>')
    assert editor.document.rows == [[""], ["a"], [""], ["b"]]
    assert editor.cursor.row == 1


def test_delete_row_asks_for_confirmation():
    editor = make_editor("a,b\n1,2")
    press(editor, '<Ctrl-k>')
    assert editor.prompt_mode == 'delete_confirm'
    press(editor, 'n')
    assert editor.prompt_mode is None
    assert editor.document.get_text() == "a,b\n1,2"

    press(editor, '<Ctrl-k>', 'y')
    assert editor.document.get_text() == "1,2"
    assert editor.modified


def test_delete_column_without_confirmation():
    editor = make_editor("a,b\n1,2", warn_on_delete=False)
    press(editor, '<TAB>', '<Esc+k>')
    assert editor.prompt_mode is None
    assert editor.document.get_text() == "a\n1"
    assert position(editor)[:2] == (0, 0)


def test_cannot_delete_last_row():
    editor = make_editor("a,b")
    press(editor, '<Ctrl-k>')
    assert editor.prompt_mode is None
    assert editor.status_message == "Cannot delete the only row"


def test_clear_all():
    editor = make_editor("a,b\n1,2\n")
    press(editor, '<DOWN>', '<TAB>', '<Esc+x>', 'y')
    assert editor.document.get_text() == ""
    assert position(editor) == (0, 0, 0)


def test_quit_unmodified_stops_immediately():
    editor = make_editor("a")
    editor.running = True
    press(editor, '<Ctrl-q>')
    assert editor.running is False


def test_quit_modified_prompts():
    editor = make_editor("a")
    editor.running = True
    press(editor, 'b', '<Ctrl-q>')
    assert editor.prompt_mode == 'quit_confirm'
    press(editor, 'n')
    assert editor.running is False


def test_help_is_dismissed_by_any_key():
    editor = make_editor("a")
    press(editor, '<F1>')
    assert editor.help_visible
    press(editor, 'x')
    assert not editor.help_visible
    assert editor.document.get_text() == "a"
