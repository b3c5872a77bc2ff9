# isclink/common/logging_config.py
from __future__ import annotations
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

@dataclass(frozen=True)
class LogDefaults:
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    stream_level: int = logging.DEBUG
    file_level: int = logging.INFO

DEFAULTS = LogDefaults()

def configure_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Attach a stderr handler (and optionally a file handler) to the
    "isclink" logger. Idempotent: handlers are added once per target.
    """
    logger = logging.getLogger("isclink")
    formatter = logging.Formatter(DEFAULTS.fmt)

    if not any(getattr(h, "_isclink_stream", False) for h in logger.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(formatter)
        sh._isclink_stream = True  # type: ignore[attr-defined]
        logger.addHandler(sh)

    for h in logger.handlers:
        if getattr(h, "_isclink_stream", False):
            h.setLevel(DEFAULTS.stream_level if verbose else logging.INFO)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        target = os.path.abspath(log_file)
        if not any(
            isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target
            for h in logger.handlers
        ):
            fh = logging.FileHandler(log_file, encoding="utf-8", delay=True)
            fh.setLevel(DEFAULTS.file_level)
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
