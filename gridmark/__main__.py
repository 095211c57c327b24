"""Gridmark CLI entry point.

Allows running via `python -m gridmark` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys

from .config import GridConfig
from .errors import ConfigurationError

USAGE = (
    "usage: gridmark [--version] [--log FILE] [--delimiter C] "
    "[--quote-char C] [--no-confirm] [FILE]"
)


def get_version_string() -> str:
    try:
        return importlib.metadata.version("gridmark")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def parse_args(args: list[str]) -> dict:
    """Parse the command line into a dict of options.

    Raises:
        ConfigurationError: on unknown options or missing values.
    """
    options = {
        "version": False,
        "log": None,
        "delimiter": None,
        "quote_char": None,
        "warn_on_delete": True,
        "filename": None,
    }
    takes_value = {"--log": "log", "--delimiter": "delimiter", "--quote-char": "quote_char"}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--version", "-V"):
            options["version"] = True
        elif arg == "--no-confirm":
            options["warn_on_delete"] = False
        elif arg in takes_value:
            if i + 1 >= len(args):
                raise ConfigurationError(f"{arg} needs a value")
            value = args[i + 1]
            # Spell tab as \t on the command line
            options[takes_value[arg]] = "\t" if value == "\\t" else value
            i += 1
        elif arg.startswith("-") and arg != "-":
            raise ConfigurationError(f"Unknown option: {arg}")
        elif options["filename"] is None:
            options["filename"] = arg
        else:
            raise ConfigurationError("Only one file can be edited at a time")
        i += 1
    return options


def main() -> None:
    try:
        options = parse_args(sys.argv[1:])
        if options["version"]:
            print(get_version_string())
            return
        config = GridConfig.from_mapping({
            key: options[key] for key in ("delimiter", "quote_char")
            if options[key] is not None
        })
    except ConfigurationError as e:
        print(f"gridmark: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    if options["log"]:
        # Never log to the terminal being drawn on
        logging.basicConfig(
            filename=options["log"],
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    # Lazy import to avoid importing UI deps for --version
    from .editor import Editor
    editor = Editor(config=config, warn_on_delete=options["warn_on_delete"])
    if options["filename"]:
        try:
            editor.load_file(options["filename"])
        except ConfigurationError as e:
            print(f"gridmark: {e}", file=sys.stderr)
            sys.exit(1)
    editor.run()


if __name__ == "__main__":  # pragma: no cover
    main()
