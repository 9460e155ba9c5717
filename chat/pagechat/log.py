"""Logging bootstrap. The terminal belongs to the UI, so records go to a file."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import pagechat.config as _cfg


def _parse_level(raw: Optional[str]) -> int:
    normalized = str(raw or os.getenv("PAGECHAT_LOG_LEVEL", "") or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def _default_log_path() -> Path:
    _cfg.LOG_DIR.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return _cfg.LOG_DIR / f"pagechat-{ts}-{os.getpid()}.log"


def configure(level: Optional[str] = None, file_path: Optional[Path] = None) -> Path:
    """Attach a rotating file handler to the ``pagechat`` logger; returns the log path."""
    path = Path(file_path) if file_path else _default_log_path()
    handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root = logging.getLogger("pagechat")
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.addHandler(handler)
    root.setLevel(_parse_level(level))
    root.propagate = False
    return path
