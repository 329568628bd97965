"""
Console entry point. Runs the Typer app and renders errors that escape it.

Typer exits on its own for usage errors, `typer.Exit` and Ctrl-C (which Click
turns into an abort with exit status 1), so only application errors reach
the handlers below.
"""

import logging
import os
import sys

from rich.console import Console

from fetchpool.cli.app import app
from fetchpool.cli.formatters import format_error_with_suggestions
from fetchpool.exceptions import FetchPoolError

log = logging.getLogger("fetchpool")


def _force_utf8_output() -> None:
    # Windows consoles default to a legacy code page that cannot print the
    # status glyphs.
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass


def main() -> None:
    if os.name == "nt":
        _force_utf8_output()

    try:
        app()
    except FetchPoolError as e:
        Console(stderr=True).print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        Console(stderr=True).print(
            format_error_with_suggestions(e, {"type": "Unexpected"})
        )
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
