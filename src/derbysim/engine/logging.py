from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING

from typing_extensions import override

from rich.highlighter import Highlighter
from rich.logging import RichHandler

if TYPE_CHECKING:
    from rich.console import Console
    from rich.text import Text

LOGGER_NAME = "derbysim"

# --- PATTERNS ---
# Competitors are named c1, c2, ... and threads carry the same name
COMPETITOR_PATTERN = re.compile(r"\bc\d+\b")

COLOR = {
    "bonus": "bold #ffaf00",  # orange
    "finish": "bold #23d18b",  # light green
    "rest": "grey62",
    "competitor": "bold white",
    "warning": "bold bright_red",
    "prefix": "grey50",
    "number": "bold #29b8db",  # cyan
}


class ThreadContextFilter(logging.Filter):
    """Inject the emitting thread's name, so every line shows who logged it."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        record.unit = threading.current_thread().name
        return True


class RichMarkupFormatter(logging.Formatter):
    @override
    def format(self, record: logging.LogRecord) -> str:
        unit = getattr(record, "unit", record.threadName)
        message = record.getMessage()
        return f"[{COLOR['prefix']}]{unit:<10}[/{COLOR['prefix']}]  {message}"


class RaceLogHighlighter(Highlighter):
    @override
    def highlight(self, text: Text) -> None:
        text.highlight_regex(r"\bBONUS\b", COLOR["bonus"])
        text.highlight_regex(r"\bFINISH\b", COLOR["finish"])
        text.highlight_regex(r"\bRest \d+\b", COLOR["rest"])
        text.highlight_regex(r"#\d+", COLOR["number"])
        text.highlight_regex(r"!!!", COLOR["warning"])
        text.highlight_regex(COMPETITOR_PATTERN, COLOR["competitor"])


def configure_logging(
    level: int = logging.INFO,
    console: Console | None = None,
) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    handler = RichHandler(
        console=console,
        markup=True,
        show_path=False,
        show_time=False,
        highlighter=RaceLogHighlighter(),
    )
    handler.setFormatter(RichMarkupFormatter())
    handler.addFilter(ThreadContextFilter())
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
