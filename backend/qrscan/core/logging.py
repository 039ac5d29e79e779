from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from qrscan.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Set up root logging once: stdout plus an optional log file."""
    global _configured
    if _configured:
        return

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = log_file or settings.LOG_FILE
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
        handlers=handlers,
    )
    _configured = True
