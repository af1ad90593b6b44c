# ABOUTME: Configures process-wide logging for CLIs and hosting processes.
# ABOUTME: Routes records through a Rich console handler at the configured level.

import logging
import os
from typing import Optional

from rich.logging import RichHandler

LOG_LEVEL_ENV = "GRADES_LOG_LEVEL"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install a Rich handler on the root logger.

    ``GRADES_LOG_LEVEL`` wins over ``level``; unknown names fall back to INFO.
    """

    level_str = (os.environ.get(LOG_LEVEL_ENV) or level or "INFO").upper()
    resolved = getattr(logging, level_str, logging.INFO)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(resolved)
