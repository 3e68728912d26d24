# byline/pipeline/logger.py
from __future__ import annotations

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def setup_logger(
    log_dir: Optional[str | Path] = None,
    *,
    level: int = logging.INFO,
    filename_prefix: str = "byline",
    console: bool = False,
    rotate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
    force: bool = False,
) -> Optional[Path]:
    """
    Configure root logging for a run.

    With ``log_dir`` a timestamped file is written there (created if
    missing); a path with a suffix is treated as a file and its parent is
    used. Without ``log_dir`` only the console handler (if requested) is
    installed. Returns the log file path, or None when no file is written.
    """
    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()

    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(processName)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_path: Optional[Path] = None
    if log_dir is not None:
        p = Path(log_dir).expanduser()
        target_dir = p if (p.is_dir() or not p.suffix) else p.parent
        target_dir.mkdir(parents=True, exist_ok=True)

        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = target_dir / f"{filename_prefix}_{ts}.log"

        if rotate:
            fhandler: logging.Handler = RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        else:
            fhandler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
        fhandler.setLevel(level)
        fhandler.setFormatter(fmt)
        root.addHandler(fhandler)

    if console:
        shandler = logging.StreamHandler()
        shandler.setLevel(level)
        shandler.setFormatter(fmt)
        root.addHandler(shandler)

    if log_path is not None:
        root.info("Logging to: %s", str(log_path))
    return log_path
