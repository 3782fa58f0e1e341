"""
Coloured stderr logging for the command-line tool.
"""

from __future__ import annotations

import logging
import sys


class ColourFormatter(logging.Formatter):
    grey = "\x1b[38;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    base = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

    COLOURS = {
        logging.DEBUG: grey,
        logging.INFO: grey,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def __init__(self, use_colour: bool = True):
        super().__init__(self.base)
        self.use_colour = use_colour

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        colour = self.COLOURS.get(record.levelno)
        if not self.use_colour or colour is None:
            return text
        return f"{colour}{text}{self.reset}"


def setup_logger(level: int = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the ``portsniffer`` logger."""
    root = logging.getLogger("portsniffer")
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, "_portsniffer", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColourFormatter(use_colour=sys.stderr.isatty()))
    handler._portsniffer = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.propagate = False
    return root
