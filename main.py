#!/usr/bin/env python3
"""Gridmark - edit CSV and other delimited text as a grid.

Usage:
    python main.py [--delimiter C] [--quote-char C] [--no-confirm] [filename]

Controls:
    Arrow keys: Move between cells (left/right cross at the cell edge)
    Enter: New row below, Alt-Enter: new row above
    Ctrl-N / Alt-N: New column right / left
    Ctrl-K / Alt-K: Delete row / column
    Ctrl-S: Save file
    Ctrl-Q: Quit (prompts to save if modified)
    F1: Help
"""

from gridmark.__main__ import main


if __name__ == "__main__":
    main()
