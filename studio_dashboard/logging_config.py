# studio_dashboard/logging_config.py
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import LOG_DIR

_CONFIGURED = False


def setup_logging(log_dir: Path | None = None, level: int = logging.INFO) -> Path:
    """
    Configure application logging.
    Streamlit re-executes pages on every interaction, so this only installs
    handlers on the first call per process.
    """
    global _CONFIGURED
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "studio.log"
    if _CONFIGURED:
        return log_file

    logger = logging.getLogger()
    logger.setLevel(level)

    # File handler (rotating)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,  # 1 MB per file
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
    )
    logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(console)

    _CONFIGURED = True
    logger.info("Logging initialized. Log file at %s", log_file)
    return log_file
