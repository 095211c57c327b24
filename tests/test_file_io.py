"""Loading and atomically saving delimited-text files from the editor."""

import os

import pytest

from gridmark.config import GridConfig
from gridmark.editor import Editor
from gridmark.errors import ConfigurationError
from gridmark.settings_persistence import DELIMITER, QUOTE_CHAR, WARN_ON_DELETE, SettingsPersistence


@pytest.fixture
def persistence(tmp_path, monkeypatch):
    persistence = SettingsPersistence(config_dir=tmp_path / "config")
    monkeypatch.setattr("gridmark.editor.get_persistence", lambda: persistence)
    return persistence


def write_bytes(path, data: bytes):
    path.write_bytes(data)
    return str(path)


def test_load_and_save_unchanged_file_is_byte_identical(tmp_path, persistence):
    original = b'id;name\r\n1;"Doe; Jane"\r\n2;Smith\r\n'
    filename = write_bytes(tmp_path / "people.csv", original)
    editor = Editor()
    editor.load_file(filename)
    assert editor.document.rows == [["id", "name"], ["1", "Doe; Jane"], ["2", "Smith"]]
    assert not editor.modified

    assert editor.save_file(filename) is True
    assert (tmp_path / "people.csv").read_bytes() == original


def test_save_after_edit(tmp_path, persistence):
    filename = write_bytes(tmp_path / "data.csv", b"a,b\n1,2")
    editor = Editor()
    editor.load_file(filename)
    editor.document.add_row_after(1)
    editor.document.set_cell(2, 0, "x")
    assert editor.modified
    assert editor.save_file(filename)
    assert not editor.modified
    assert (tmp_path / "data.csv").read_text(encoding="utf-8") == "a,b\n1,2\nx,"


def test_missing_file_starts_empty(tmp_path, persistence):
    editor = Editor()
    editor.load_file(str(tmp_path / "new.csv"))
    assert editor.document.rows == [[""]]
    assert editor.filename == str(tmp_path / "new.csv")


def test_unreadable_file_raises_configuration_error(tmp_path, persistence):
    filename = write_bytes(tmp_path / "binary.csv", b"\xff\xfe\x00bad")
    editor = Editor()
    with pytest.raises(ConfigurationError):
        editor.load_file(filename)


def test_parse_warnings_shown_in_status(tmp_path, persistence):
    filename = write_bytes(tmp_path / "broken.csv", b'a,"unterminated\nb,c')
    editor = Editor()
    editor.load_file(filename)
    assert editor.status_message == "1 parse warning(s), see log"


def test_save_records_settings(tmp_path, persistence):
    filename = write_bytes(tmp_path / "data.tsv", b"a\tb\n1\t2\n")
    editor = Editor(warn_on_delete=False)
    editor.load_file(filename)
    editor.save_file(filename)
    assert persistence.load_settings(filename) == {
        QUOTE_CHAR: '"',
        WARN_ON_DELETE: False,
    }


def test_save_records_explicit_delimiter(tmp_path, persistence):
    filename = write_bytes(tmp_path / "data.txt", b"a:b\n1:2\n")
    editor = Editor(config=GridConfig(delimiter=":"))
    editor.load_file(filename)
    editor.save_file(filename)
    assert persistence.load_settings(filename)[DELIMITER] == ":"

    reopened = Editor()
    reopened.load_file(filename)
    assert reopened.document.rows == [["a", "b"], ["1", "2"]]


def test_detected_delimiter_is_detected_again_after_save(tmp_path, persistence):
    path = tmp_path / "list.csv"
    filename = write_bytes(path, b"alpha\nbeta\n")
    editor = Editor()
    editor.load_file(filename)
    assert editor.save_file(filename)

    path.write_bytes(b"a;b;c\n1;2;3\n")
    reopened = Editor()
    reopened.load_file(filename)
    assert reopened.document.metadata.delimiter == ";"
    assert reopened.document.rows == [["a", "b", "c"], ["1", "2", "3"]]


def test_stored_settings_apply_when_delimiter_not_given(tmp_path, persistence):
    filename = write_bytes(tmp_path / "one.csv", b"a;b\n1;2")
    persistence.save_settings(filename, {DELIMITER: ",", WARN_ON_DELETE: False})
    editor = Editor()
    editor.load_file(filename)
    assert editor.document.metadata.delimiter == ","
    assert editor.document.rows == [["a;b"], ["1;2"]]
    assert editor.warn_on_delete is False


def test_explicit_delimiter_beats_stored_settings(tmp_path, persistence):
    filename = write_bytes(tmp_path / "two.csv", b"a;b\n1;2")
    persistence.save_settings(filename, {DELIMITER: ","})
    editor = Editor(config=GridConfig(delimiter=";"))
    editor.load_file(filename)
    assert editor.document.rows == [["a", "b"], ["1", "2"]]


def test_failed_save_keeps_original_and_reports(tmp_path, persistence):
    read_only_dir = tmp_path / "locked"
    read_only_dir.mkdir()
    target = read_only_dir / "out.csv"
    target.write_text("original", encoding="utf-8")
    os.chmod(read_only_dir, 0o555)
    try:
        if os.access(read_only_dir, os.W_OK):
            pytest.skip("running with privileges that ignore directory permissions")
        editor = Editor()
        editor.document.set_text("new,content")
        assert editor.save_file(str(target)) is False
        assert "Permission denied" in editor.status_message
        assert target.read_text(encoding="utf-8") == "original"
        assert os.listdir(read_only_dir) == ["out.csv"]
    finally:
        os.chmod(read_only_dir, 0o755)


def test_save_prompt_flow(tmp_path, persistence):
    from gridmark.keyboard import KeyboardHandler
    parser = KeyboardHandler(None)
    editor = Editor()
    editor.document.set_text("a,b")
    editor._handle_key_event(parser.parse_key('<Ctrl-s>'))
    assert editor.prompt_mode == 'save_filename'
    target = str(tmp_path / "prompted.csv")
    for char in target:
        editor._handle_key_event(parser.parse_key(char))
    editor._handle_key_event(parser.parse_key('<Ctrl-j>'))
    assert editor.prompt_mode is None
    assert editor.filename == target
    assert (tmp_path / "prompted.csv").read_text(encoding="utf-8") == "a,b"
