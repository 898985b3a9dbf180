from __future__ import annotations

"""meshgov.logger - one-call helper for consistent logging settings.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from meshgov.config import Settings, get_settings

FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    level: Union[str, int, None] = None,
    log_file: Union[str, Path, None] = None,
    *,
    config: Optional[Settings] = None,
) -> Optional[Path]:
    """Configure the root logger to log to console and an optional file.

    Explicit arguments win over *config* (the global settings by default).

    Returns:
        The path of the log file when one is written, else None.
    """
    config = config or get_settings()
    if level is None:
        level = config.log_level
    if log_file is None and config.log_file_enabled:
        log_file = config.log_file_path

    level_num = getattr(logging, str(level).upper(), logging.INFO) if isinstance(level, str) else level

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level_num, format=FORMAT, datefmt=DATE_FORMAT)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path)
        fh.setFormatter(logging.Formatter(FORMAT, DATE_FORMAT))
        logging.getLogger().addHandler(fh)
        return path
    return None


__all__ = ["setup_logging", "FORMAT", "DATE_FORMAT"]
