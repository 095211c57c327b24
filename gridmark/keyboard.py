"""Keyboard input handling using curtsies-style key names."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from .navigation import Direction


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, Shift-Tab


@dataclass
class KeyEvent:
    """A parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'enter')
    raw: str  # The key string as delivered by the terminal
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False

    @property
    def direction(self) -> Optional[Direction]:
        """The arrow direction of a plain arrow key, else None."""
        if self.key_type != KeyType.SPECIAL:
            return None
        try:
            return Direction(self.value)
        except ValueError:
            return None


SPECIAL_KEYS = {
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
    'delete', 'page_up', 'page_down', 'insert', 'tab',
    'f1', 'f2', 'f3', 'f4', 'f5', 'f6', 'f7', 'f8', 'f9', 'f10', 'f11', 'f12',
}

_BASE_ALIASES = {
    'pageup': 'page_up',
    'pagedown': 'page_down',
    'del': 'delete',
    'return': 'enter',
    'esc': 'escape',
}


class KeyboardHandler:
    """Turns terminal key names into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a key name such as '<UP>', '<Ctrl-a>', '<Esc+n>' or 'x'."""
        key_str = str(key)
        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_named(key_str)

        if key_str in ('\n', '\r'):
            return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
        if key_str == '\t':
            return KeyEvent(KeyType.SPECIAL, 'tab', key_str)
        if key_str in ('\x7f', '\x08'):
            return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
        if key_str == '\x1b':
            return KeyEvent(KeyType.SPECIAL, 'escape', key_str)
        if len(key_str) == 1 and 1 <= ord(key_str) <= 26:
            # Ctrl-A .. Ctrl-Z as raw control bytes
            return KeyEvent(KeyType.CTRL, chr(ord('a') + ord(key_str) - 1), key_str, is_ctrl=True)
        return KeyEvent(KeyType.REGULAR, key_str, key_str)

    def _parse_named(self, key_str: str) -> KeyEvent:
        name = key_str[1:-1].lower().replace('+', '-')
        parts = name.split('-')
        base = _BASE_ALIASES.get(parts[-1], parts[-1])
        mods = set(parts[:-1])
        if 'meta' in mods or 'esc' in mods:
            mods.add('alt')
        alt = 'alt' in mods

        if base in ('space', 'spacebar', 'spc') and not mods:
            return KeyEvent(KeyType.REGULAR, ' ', key_str)

        if 'ctrl' in mods and len(base) == 1:
            if base in ('j', 'm'):
                # Ctrl-J / Ctrl-M is what terminals send for Enter
                if alt:
                    return KeyEvent(KeyType.ALT, 'enter', key_str, is_alt=True)
                return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
            if base == 'i' and not alt:
                return KeyEvent(KeyType.SPECIAL, 'tab', key_str)
            if base == 'h' and not alt:
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
            return KeyEvent(KeyType.CTRL, base, key_str, is_ctrl=True)

        if alt and (base in SPECIAL_KEYS or len(base) == 1):
            return KeyEvent(KeyType.ALT, base, key_str, is_alt=True)
        if 'shift' in mods and base in SPECIAL_KEYS:
            return KeyEvent(KeyType.SHIFT_SPECIAL, base, key_str, is_shift=True)
        if base == 'escape':
            return KeyEvent(KeyType.SPECIAL, 'escape', '\x1b')
        return KeyEvent(KeyType.SPECIAL, base, key_str)
